# src/flowengine/engines/preprocessing.py
"""
Engine de pre-processing `resampling` (v1).

Rebalanceia as classes do target no treino de um split:
    - oversampling  → amostra (com reposição) a classe minoritária até
                      igualar a majoritária
    - undersampling → amostra (sem reposição) a classe majoritária até
                      igualar a minoritária

O resultado é embaralhado com a seed do engine (`params.seed` ou
`control.global_seed`). O teste de um split nunca é reamostrado.
"""

from __future__ import annotations

from typing import Any, Dict

import pandas as pd

from flowengine.core.config.errors import ConfigError
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import PreprocessingEnvelope


def _counts(data: pd.DataFrame, target: str) -> Dict[str, int]:
    return {str(k): int(v) for k, v in data[target].value_counts().sort_index().items()}


def preprocessing_resampling(
    *, ctx: RunContext, control: Any, params: Dict[str, Any], data: pd.DataFrame
) -> PreprocessingEnvelope:
    method = params.get("method")
    if method not in {"oversampling", "undersampling"}:
        raise ConfigError(f"Invalid resampling method: {method!r}")
    seed = params.get("seed")
    seed = control.global_seed if seed is None else int(seed)
    target = control.vars.target_var

    counts = data[target].value_counts()
    if len(counts) < 2:
        raise ConfigError("resampling requires at least two target classes in the training data")
    minority, majority = counts.idxmin(), counts.idxmax()
    gap = int(counts.max() - counts.min())

    ctx.log(step_id="preprocessing.resampling", level="info", message="resampling started", method=method)

    if method == "oversampling":
        extra = data[data[target] == minority].sample(n=gap, replace=True, random_state=seed)
        resampled = pd.concat([data, extra])
    else:
        kept = data[data[target] == majority].sample(n=int(counts.min()), replace=False, random_state=seed)
        resampled = pd.concat([data[data[target] == minority], kept])

    resampled = resampled.sample(frac=1.0, random_state=seed)
    specific = {"original_counts": _counts(data, target), "new_counts": _counts(resampled, target)}
    ctx.log(step_id="preprocessing.resampling", level="info", message="resampling finished", **specific)

    return PreprocessingEnvelope(
        preprocessed_data=resampled,
        method="resampling",
        params=dict(params),
        specific_output=specific,
    )


DEFAULT_PARAMS: Dict[str, Dict[str, Any]] = {
    "resampling": {"method": "oversampling", "seed": None},
}
