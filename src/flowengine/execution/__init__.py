# src/flowengine/execution/__init__.py
"""Dispatch Adapter: engines de execução e runner externo por split."""

from .engines import (
    DEFAULT_PARAMS,
    execution_adaptive_sequential,
    execution_array_prepare,
    execution_joblib_local,
    execution_sequential,
)
from .runner import resolve_split_id, run_split
from .stability import STRATEGIES, StabilityResult, check_stability

__all__ = [
    "DEFAULT_PARAMS",
    "execution_sequential",
    "execution_joblib_local",
    "execution_array_prepare",
    "execution_adaptive_sequential",
    "resolve_split_id",
    "run_split",
    "STRATEGIES",
    "StabilityResult",
    "check_stability",
]
