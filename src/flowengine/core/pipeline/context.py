# src/flowengine/core/pipeline/context.py
"""
Contexto de execução compartilhado de uma run do flowengine.

O `RunContext` é passado explicitamente a todo engine e ao Resume
Reconstructor. Ele concentra:
    - identidade da execução (run_id, created_at)
    - metadados livres da run (ex.: diretórios de snapshots)
    - o event log estruturado (substitui prints/mensagens soltas)
    - warnings não fatais agrupados por origem

Política de log:
    - `settings.log = False` desliga completamente o event log
    - `settings.log_level` filtra eventos abaixo do nível configurado
      (debug < info < warn < error)

Invariantes:
    - Eventos sempre incluem `run_id`, `step_id`, `level`, `message`, `timestamp`
    - Warnings são agrupados por `step_id`
    - Não existe estado global: cada run possui seu próprio contexto

Limites explícitos:
    - Não executa engines
    - Não persiste eventos automaticamente
    - Não é compartilhado entre processos (runners externos criam o seu)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from .types import LogLevel


@dataclass
class RunContext:
    """
    Contexto de execução de uma run.

    Use `RunContext.new(settings=...)` para criar um contexto com run_id
    e timestamp UTC gerados.
    """
    run_id: str
    created_at: datetime
    settings: Dict[str, Any] = field(default_factory=dict)
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    @classmethod
    def new(cls, *, settings: Optional[Mapping[str, Any]] = None, **meta: Any) -> "RunContext":
        return cls(
            run_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            settings=dict(settings or {}),
            meta=dict(meta),
        )

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def _enabled_for(self, level: LogLevel) -> bool:
        if not bool(self.settings.get("log", True)):
            return False
        try:
            threshold = LogLevel(str(self.settings.get("log_level", "info")).lower())
        except ValueError:
            threshold = LogLevel.INFO
        return level.rank >= threshold.rank

    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        try:
            lvl = LogLevel(str(level).lower())
        except ValueError:
            lvl = LogLevel.INFO
        if not self._enabled_for(lvl):
            return
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": lvl.value,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)

    def events_for(self, step_id: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e.get("step_id") == step_id]
