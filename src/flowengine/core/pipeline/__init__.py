# src/flowengine/core/pipeline/__init__.py
"""
# Pipeline Core — flowengine

Este pacote define os **contratos canônicos** compartilhados por todos os
engines de um workflow.

## Componentes

- **types**
  - `EngineCategory`: categorias semânticas de engines
  - `LogLevel`: níveis do event log

- **envelope**
  - `Envelope` e um envelope tipado por categoria
  - `build_envelope`: construção validada (falha com `SchemaError`)

- **split_map**
  - `SplitMap`: mapeamento ordenado split-id → payload

- **context**
  - `RunContext`: identidade da run, event log e warnings

- **registry**
  - `EngineSpec` / `EngineRegistry`: resolução explícita por (categoria, nome)

## Invariantes

- Envelopes malformados nunca circulam
- Ids de split são estáveis entre dispatch e resume
- Não existe estado global
"""

from .types import EngineCategory, LogLevel
from .split_map import SplitMap
from .envelope import (
    Envelope,
    EvaluationEnvelope,
    ExecutionEnvelope,
    PreprocessingEnvelope,
    SplitEnvelope,
    TrainingEnvelope,
    build_envelope,
    check_execution_matches,
    envelope_type_for,
)
from .context import RunContext
from .registry import DuplicateEngineError, EngineRegistry, EngineSpec

__all__ = [
    "EngineCategory",
    "LogLevel",
    "SplitMap",
    "Envelope",
    "SplitEnvelope",
    "PreprocessingEnvelope",
    "TrainingEnvelope",
    "ExecutionEnvelope",
    "EvaluationEnvelope",
    "build_envelope",
    "check_execution_matches",
    "envelope_type_for",
    "RunContext",
    "EngineSpec",
    "EngineRegistry",
    "DuplicateEngineError",
]
