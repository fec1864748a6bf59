"""
flowengine — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros serializáveis do flowengine.
Erros fazem parte do contrato operacional do sistema e devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Exceções tipadas (`flowengine.core.exceptions`, `flowengine.core.config.errors`)
são convertidas em `FlowErrorPayload` via `exception_to_payload`, para que o
chamador possa registrar a falha (ex.: no event log do RunContext) sem expor
stack traces.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

from .config.errors import ConfigError
from .exceptions import FlowException


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FlowErrorPayload:
    """
    Payload canônico de erro do flowengine.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - fatal: indica se o erro interrompe o fluxo (diagnósticos não fatais = False)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    fatal: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

LOAD_ERROR = "LOAD_ERROR"
VALIDATION_ERROR = "VALIDATION_ERROR"
SCHEMA_ERROR = "SCHEMA_ERROR"
CONFIG_ERROR = "CONFIG_ERROR"
MISSING_RESULT = "MISSING_RESULT"
ENGINE_NOT_FOUND = "ENGINE_NOT_FOUND"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"

_CODES_BY_CLASS = {
    "LoadError": LOAD_ERROR,
    "ValidationError": VALIDATION_ERROR,
    "SchemaError": SCHEMA_ERROR,
    "EngineNotFoundError": ENGINE_NOT_FOUND,
    "EngineExecutionError": ENGINE_EXECUTION_ERROR,
}


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def snapshot_not_loadable(
    *,
    path: str,
    role: str,
    reason: str,
    hint: str = "Execute o engine de preparação (array_prepare) antes de reconstruir, ou corrija o caminho informado.",
) -> FlowErrorPayload:
    return FlowErrorPayload(
        type=LOAD_ERROR,
        message="Snapshot obrigatório não pôde ser carregado",
        details={"path": path, "role": role, "reason": reason},
        hint=hint,
    )


def missing_split_result(
    *,
    split_id: str,
    location: Optional[str] = None,
    hint: str = "Aguarde a conclusão do split ou reexecute o runner externo para este id.",
) -> FlowErrorPayload:
    return FlowErrorPayload(
        type=MISSING_RESULT,
        message="Resultado de split não encontrado",
        details={"split_id": split_id, "location": location},
        hint=hint,
        fatal=False,
    )


def resume_object_invalid(
    *,
    problems: List[str],
    hint: str = "Reconstrua o Resume Object a partir dos snapshots originais; não edite campos manualmente.",
) -> FlowErrorPayload:
    return FlowErrorPayload(
        type=VALIDATION_ERROR,
        message="Resume Object estruturalmente inválido",
        details={"problems": list(problems)},
        hint=hint,
    )


def envelope_schema_violation(
    *,
    category: str,
    missing: Optional[List[str]] = None,
    malformed: Optional[Dict[str, str]] = None,
    unknown: Optional[List[str]] = None,
    hint: str = "Ajuste o engine para retornar todos os campos obrigatórios da categoria com o tipo correto.",
) -> FlowErrorPayload:
    return FlowErrorPayload(
        type=SCHEMA_ERROR,
        message=f"Envelope '{category}' fora do schema",
        details={
            "category": category,
            "missing": list(missing or []),
            "malformed": dict(malformed or {}),
            "unknown": list(unknown or []),
        },
        hint=hint,
    )


def exception_to_payload(exc: Exception) -> FlowErrorPayload:
    """Converte exceções em FlowErrorPayload (serializável, acionável).

    Regras:
    - FlowException: já vem com message/details/hint; o código é derivado da classe.
    - ConfigError: código CONFIG_ERROR com o nome da subclasse em details.
    - Outras exceções: ENGINE_EXECUTION_ERROR sem expor stack trace.
    """
    if isinstance(exc, FlowException):
        return FlowErrorPayload(
            type=_CODES_BY_CLASS.get(exc.__class__.__name__, exc.__class__.__name__),
            message=str(exc) or "Erro de execução",
            details=dict(getattr(exc, "details", {}) or {}),
            hint=getattr(exc, "hint", None),
        )

    if isinstance(exc, ConfigError):
        return FlowErrorPayload(
            type=CONFIG_ERROR,
            message=str(exc) or "Configuração inválida",
            details={"exception_class": exc.__class__.__name__},
            hint="Revise a configuração do workflow e o particionamento declarado.",
        )

    return FlowErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=str(exc) or "Erro inesperado durante execução",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o event log do run e a configuração do workflow",
    )
