# src/flowengine/resume/types.py
"""
Tipos do Resume Reconstructor.

    - MissingResultWarning → diagnóstico não fatal (um split sem resultado)
    - ResumeObject         → {control, split_output, workflow_results, metadata}
    - ResumeReport         → Resume Object + warnings acumulados

Warnings são **valores** devolvidos ao chamador, nunca exceções: o chamador
decide se espera, reexecuta splits ou continua com resultados parciais.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from flowengine.core.errors import FlowErrorPayload, missing_split_result


@dataclass(frozen=True)
class MissingResultWarning:
    """
    Resultado esperado de um split não pôde ser localizado.

    `reason` é `"missing"` (nada gravado para o id) ou `"unreadable"`
    (arquivo presente mas não desserializável).
    """

    split_id: str
    location: Optional[str] = None
    reason: str = "missing"

    def to_payload(self) -> FlowErrorPayload:
        payload = missing_split_result(split_id=self.split_id, location=self.location)
        payload.details["reason"] = self.reason
        return payload

    def __str__(self) -> str:
        where = f" at {self.location}" if self.location else ""
        return f"result for split '{self.split_id}' {self.reason}{where}"


@dataclass(frozen=True, eq=False)
class ResumeObject:
    """
    Estado reconstruído após execução externa (total ou parcial).

    Campos:
        - control: Control Object do snapshot
        - split_output: SplitEnvelope do snapshot (`split_output.splits` é o Split Map)
        - workflow_results: split-id → Per-Split Result (subconjunto do Split Map)
        - metadata: tags livres (ex.: `engine`, `timestamp`)
    """

    control: Any
    split_output: Any
    workflow_results: Dict[str, Any]
    metadata: Dict[str, Any] = field(default_factory=dict)

    FIELDS = ("control", "split_output", "workflow_results", "metadata")

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.FIELDS}


@dataclass(frozen=True, eq=False)
class ResumeReport:
    """Resultado de uma reconstrução: Resume Object válido + warnings em ordem do Split Map."""

    resume_object: ResumeObject
    warnings: Tuple[MissingResultWarning, ...] = ()

    @property
    def is_complete(self) -> bool:
        return not self.warnings

    @property
    def missing_ids(self) -> List[str]:
        return [w.split_id for w in self.warnings]
