"""
flowengine — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do flowengine para falhas
fatais do protocolo split / execute / resume.

Objetivo:
- Permitir que engines, Reconstructor e Continuation levantem exceções
  semânticas tipadas
- Facilitar o mapeamento determinístico para FlowErrorPayload
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Diagnósticos não fatais (ex.: resultado de split ausente) NÃO são exceções:
  ver `flowengine.resume.types.MissingResultWarning`.
- Erros de configuração/particionamento vivem em `flowengine.core.config.errors`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True, eq=False)
class FlowException(Exception):
    """Base class para exceções internas do flowengine.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message

    def __reduce__(self):
        return (self.__class__, (self.message, self.details, self.hint))


# ---------------------------------------------------------------------------
# Resume / Snapshots
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class LoadError(FlowException):
    """Snapshot obrigatório (control ou split map) ausente, ilegível ou corrompido."""


@dataclass(frozen=True, eq=False)
class ValidationError(FlowException):
    """Resume Object viola um invariante estrutural."""


# ---------------------------------------------------------------------------
# Output Envelope
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class SchemaError(FlowException):
    """Envelope sem campo obrigatório da categoria, ou com campo malformado."""


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class EngineNotFoundError(FlowException):
    """Nenhum engine registrado para o par (categoria, nome) solicitado."""


@dataclass(frozen=True, eq=False)
class EngineExecutionError(FlowException):
    """Falha de um engine ao processar suas entradas (encapsulada)."""
