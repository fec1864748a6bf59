# src/flowengine/core/pipeline/envelope.py
"""
Output Envelope — formato uniforme de resultado de engines.

Todo engine do flowengine retorna um envelope da sua categoria. O envelope
é um registro tipado (frozen dataclass) com campos obrigatórios e campos
opcionais **explícitos**:

| categoria      | obrigatórios                                     | opcionais |
|----------------|--------------------------------------------------|-----------|
| split          | split_type, splits, seed                         | params, specific_output |
| preprocessing  | preprocessed_data, method                        | params, specific_output |
| training       | model, model_type, formula                       | predictions, hyperparameters, specific_output |
| execution      | execution_type, workflow_results, continue_workflow | params, specific_output |
| evaluation     | metrics, eval_type, input_data                   | protected_attributes, params, specific_output |

Princípios fundamentais:
    - A validação ocorre na construção: envelopes malformados nunca circulam
    - Campos opcionais não informados são omitidos por completo em `to_dict()`
      (não existem placeholders nulos); a presença basta para comunicar intenção
    - Construção é pura: nenhum efeito colateral

Limites explícitos:
    - Não interpreta o conteúdo de `workflow_results`, `model` ou dados
    - Não executa engines
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Callable, ClassVar, Dict, FrozenSet, Iterable, List, Mapping, Optional, Type, Union

from flowengine.core.exceptions import SchemaError
from flowengine.core.errors import envelope_schema_violation

from .split_map import SplitMap
from .types import EngineCategory


def _is_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


def _is_present(value: Any) -> bool:
    return value is not None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _is_mapping_or_none(value: Any) -> bool:
    return value is None or isinstance(value, Mapping)


def _is_str_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


_SHAPE_LABELS = {
    _is_str: "non-empty string",
    _is_mapping: "mapping",
    _is_present: "non-null value",
    _is_int: "int",
    _is_bool: "bool",
    _is_mapping_or_none: "mapping or None",
    _is_str_sequence: "sequence of strings",
}


@dataclass(frozen=True)
class Envelope:
    """
    Base dos envelopes por categoria.

    Subclasses declaram:
        - `category`: categoria do engine
        - `required`: campos obrigatórios (presença exigida)
        - `shapes`: validadores de shape por campo (obrigatórios e opcionais)
    """

    category: ClassVar[EngineCategory]
    required: ClassVar[FrozenSet[str]] = frozenset()
    shapes: ClassVar[Dict[str, Callable[[Any], bool]]] = {}

    def __post_init__(self) -> None:
        malformed: Dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name not in self.required and value is None:
                continue
            check = self.shapes.get(f.name)
            if check is not None and not check(value):
                malformed[f.name] = f"expected {_SHAPE_LABELS.get(check, 'valid value')}, got {type(value).__name__}"
        if malformed:
            payload = envelope_schema_violation(category=self.category.value, malformed=malformed)
            raise SchemaError(message=payload.message, details=payload.details, hint=payload.hint)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def optional(cls) -> List[str]:
        return [n for n in cls.field_names() if n not in cls.required]

    def has(self, name: str) -> bool:
        """Indica se um campo opcional foi informado."""
        return getattr(self, name, None) is not None

    def to_dict(self) -> Dict[str, Any]:
        """Obrigatórios sempre; opcionais apenas quando informados."""
        out: Dict[str, Any] = {n: getattr(self, n) for n in self.field_names() if n in self.required}
        out.update({n: getattr(self, n) for n in self.optional() if self.has(n)})
        return out


@dataclass(frozen=True)
class SplitEnvelope(Envelope):
    """Saída de um splitter: Split Map + identificação da estratégia."""

    split_type: str
    splits: SplitMap
    seed: int
    params: Optional[Dict[str, Any]] = None
    specific_output: Optional[Dict[str, Any]] = None

    category: ClassVar[EngineCategory] = EngineCategory.SPLIT
    required: ClassVar[FrozenSet[str]] = frozenset({"split_type", "splits", "seed"})
    shapes: ClassVar[Dict[str, Callable[[Any], bool]]] = {
        "split_type": _is_str,
        "splits": lambda v: isinstance(v, SplitMap),
        "seed": _is_int,
        "params": _is_mapping,
        "specific_output": _is_mapping,
    }

    def __post_init__(self) -> None:
        # Mapping simples é normalizado; mapa vazio -> ConfigError (EmptySplitMapError)
        if isinstance(self.splits, Mapping) and not isinstance(self.splits, SplitMap):
            object.__setattr__(self, "splits", SplitMap(self.splits))
        super().__post_init__()


@dataclass(frozen=True)
class PreprocessingEnvelope(Envelope):
    """Saída de um engine de pre-processing."""

    preprocessed_data: Any
    method: str
    params: Optional[Dict[str, Any]] = None
    specific_output: Optional[Dict[str, Any]] = None

    category: ClassVar[EngineCategory] = EngineCategory.PREPROCESSING
    required: ClassVar[FrozenSet[str]] = frozenset({"preprocessed_data", "method"})
    shapes: ClassVar[Dict[str, Callable[[Any], bool]]] = {
        "preprocessed_data": _is_present,
        "method": _is_str,
        "params": _is_mapping,
        "specific_output": _is_mapping,
    }


@dataclass(frozen=True)
class TrainingEnvelope(Envelope):
    """Saída de um engine de treinamento."""

    model: Any
    model_type: str
    formula: str
    predictions: Optional[Any] = None
    hyperparameters: Optional[Dict[str, Any]] = None
    specific_output: Optional[Dict[str, Any]] = None

    category: ClassVar[EngineCategory] = EngineCategory.TRAINING
    required: ClassVar[FrozenSet[str]] = frozenset({"model", "model_type", "formula"})
    shapes: ClassVar[Dict[str, Callable[[Any], bool]]] = {
        "model": _is_present,
        "model_type": _is_str,
        "formula": _is_str,
        "hyperparameters": _is_mapping,
        "specific_output": _is_mapping,
    }


@dataclass(frozen=True)
class ExecutionEnvelope(Envelope):
    """
    Saída de um engine de execução.

    `workflow_results` é `None` quando a execução é adiada para um backend
    externo (nesse caso `continue_workflow` é False e o workflow é retomado
    via Resume Reconstructor).
    """

    execution_type: str
    workflow_results: Optional[Dict[str, Any]]
    continue_workflow: bool
    params: Optional[Dict[str, Any]] = None
    specific_output: Optional[Dict[str, Any]] = None

    category: ClassVar[EngineCategory] = EngineCategory.EXECUTION
    required: ClassVar[FrozenSet[str]] = frozenset({"execution_type", "workflow_results", "continue_workflow"})
    shapes: ClassVar[Dict[str, Callable[[Any], bool]]] = {
        "execution_type": _is_str,
        "workflow_results": _is_mapping_or_none,
        "continue_workflow": _is_bool,
        "params": _is_mapping,
        "specific_output": _is_mapping,
    }

    @property
    def deferred(self) -> bool:
        return self.workflow_results is None


@dataclass(frozen=True)
class EvaluationEnvelope(Envelope):
    """Saída de um engine de avaliação."""

    metrics: Dict[str, Any]
    eval_type: str
    input_data: Any
    protected_attributes: Optional[List[str]] = None
    params: Optional[Dict[str, Any]] = None
    specific_output: Optional[Dict[str, Any]] = None

    category: ClassVar[EngineCategory] = EngineCategory.EVALUATION
    required: ClassVar[FrozenSet[str]] = frozenset({"metrics", "eval_type", "input_data"})
    shapes: ClassVar[Dict[str, Callable[[Any], bool]]] = {
        "metrics": _is_mapping,
        "eval_type": _is_str,
        "input_data": _is_present,
        "protected_attributes": _is_str_sequence,
        "params": _is_mapping,
        "specific_output": _is_mapping,
    }


ENVELOPE_TYPES: Dict[EngineCategory, Type[Envelope]] = {
    EngineCategory.SPLIT: SplitEnvelope,
    EngineCategory.PREPROCESSING: PreprocessingEnvelope,
    EngineCategory.TRAINING: TrainingEnvelope,
    EngineCategory.EXECUTION: ExecutionEnvelope,
    EngineCategory.EVALUATION: EvaluationEnvelope,
}


def envelope_type_for(category: Union[str, EngineCategory]) -> Type[Envelope]:
    return ENVELOPE_TYPES[EngineCategory.parse(category)]


def build_envelope(category: Union[str, EngineCategory], fields_: Mapping[str, Any]) -> Envelope:
    """
    Constrói e valida o envelope de uma categoria.

    Campos opcionais com valor `None` são tratados como não informados.

    Args:
        category: Categoria declarada (`EngineCategory` ou string, ex.: "evaluation").
        fields_: Campos do envelope.

    Returns:
        Envelope: Instância tipada da categoria.

    Raises:
        SchemaError: Categoria desconhecida, campo obrigatório ausente, campo
            desconhecido ou shape inválido.
        ConfigError: Envelope de split com Split Map vazio.
    """
    try:
        cat = EngineCategory.parse(category)
    except ValueError as e:
        raise SchemaError(
            message=f"Unknown envelope category: {category!r}",
            details={"category": str(category), "known": [c.value for c in EngineCategory]},
            hint="Use uma das categorias de EngineCategory.",
        ) from e
    cls = ENVELOPE_TYPES[cat]

    if not isinstance(fields_, Mapping):
        raise SchemaError(
            message=f"Envelope '{cat.value}' requer um mapping de campos",
            details={"category": cat.value, "received": type(fields_).__name__},
            hint=f"Obrigatórios: {sorted(cls.required)}; opcionais: {cls.optional()}.",
        )

    known = set(cls.field_names())
    missing = sorted(n for n in cls.required if n not in fields_)
    unknown = sorted(n for n in fields_ if n not in known)
    if missing or unknown:
        payload = envelope_schema_violation(category=cat.value, missing=missing, unknown=unknown)
        raise SchemaError(message=payload.message, details=payload.details, hint=payload.hint)

    return cls(**dict(fields_))


def check_execution_matches(envelope: ExecutionEnvelope, split_ids: Iterable[str]) -> None:
    """
    Garante que os resultados de uma execução imediata cobrem exatamente os splits despachados.

    Execuções adiadas (`workflow_results is None`) não são verificadas aqui:
    o Resume Reconstructor aceita resultados parciais.

    Raises:
        SchemaError: Se as chaves de `workflow_results` diferirem dos ids despachados.
    """
    if envelope.workflow_results is None:
        return
    expected = list(split_ids)
    got = list(envelope.workflow_results.keys())
    if set(got) != set(expected):
        raise SchemaError(
            message="workflow_results keys must exactly match the dispatched split ids",
            details={
                "missing": [s for s in expected if s not in envelope.workflow_results],
                "unexpected": [s for s in got if s not in set(expected)],
            },
            hint="O engine de execução deve indexar cada resultado pelo split id despachado.",
        )
