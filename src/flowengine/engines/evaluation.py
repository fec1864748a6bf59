# src/flowengine/engines/evaluation.py
"""
Engines de avaliação built-in (v1).

Todos consomem `eval_data`: DataFrame com as colunas `predictions`,
`actuals` e os atributos protegidos binários do teste de um split.

Engines disponíveis:
    - mse                → erro quadrático médio (`metrics.mse`)
    - summarystats       → estatísticas descritivas das predições
                           (`metrics.summary_stats`, métrica aninhada)
    - statisticalparity  → diferença absoluta da média das predições entre os
                           dois grupos de cada atributo protegido binário
                           (`metrics.spd`, métrica aninhada por atributo)
"""

from __future__ import annotations

from typing import Any, Dict, List

import numpy as np
import pandas as pd

from flowengine.core.config.errors import ConfigError
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import EvaluationEnvelope


def _require_columns(eval_data: pd.DataFrame, columns: List[str], engine: str) -> None:
    missing = [c for c in columns if c not in eval_data.columns]
    if missing:
        raise ConfigError(f"{engine}: eval_data is missing columns: {', '.join(missing)}")


def eval_mse(*, ctx: RunContext, control: Any, params: Dict[str, Any], eval_data: pd.DataFrame) -> EvaluationEnvelope:
    _require_columns(eval_data, ["predictions", "actuals"], "mse")
    predictions = eval_data["predictions"].to_numpy(dtype=float)
    actuals = eval_data["actuals"].to_numpy(dtype=float)
    mse = float(np.mean((predictions - actuals) ** 2))

    ctx.log(step_id="evaluation.mse", level="info", message="mse evaluation complete", mse=mse)
    return EvaluationEnvelope(
        metrics={"mse": mse},
        eval_type="mse_eval",
        input_data=eval_data,
        protected_attributes=list(control.vars.protected_vars_binary) or None,
        params=dict(params),
    )


def eval_summarystats(
    *, ctx: RunContext, control: Any, params: Dict[str, Any], eval_data: pd.DataFrame
) -> EvaluationEnvelope:
    _require_columns(eval_data, ["predictions"], "summarystats")
    p = eval_data["predictions"].astype(float)
    q25, q75 = float(p.quantile(0.25)), float(p.quantile(0.75))
    stats = {
        "mean": float(p.mean()),
        "median": float(p.median()),
        "sd": float(p.std()),
        "var": float(p.var()),
        "min": float(p.min()),
        "max": float(p.max()),
        "quantile_25": q25,
        "quantile_75": q75,
        "iqr": q75 - q25,
        # skew/kurt do pandas: estimadores com correção de viés; kurt é o excesso
        "skewness": float(p.skew()),
        "kurtosis": float(p.kurt()),
        "range": float(p.max() - p.min()),
    }
    ctx.log(step_id="evaluation.summarystats", level="debug", message="summary statistics computed")
    return EvaluationEnvelope(
        metrics={"summary_stats": stats},
        eval_type="summarystats_eval",
        input_data=eval_data,
    )


def eval_statisticalparity(
    *, ctx: RunContext, control: Any, params: Dict[str, Any], eval_data: pd.DataFrame
) -> EvaluationEnvelope:
    """
    Statistical parity difference por atributo protegido binário.

    `params.protected_name` sobrescreve `control.vars.protected_vars_binary`.

    Raises:
        ConfigError: Atributo ausente em `eval_data`, não binário, ou nenhum
            atributo declarado.
    """
    names = params.get("protected_name") or list(control.vars.protected_vars_binary)
    if isinstance(names, str):
        names = [names]
    if not names:
        raise ConfigError("statisticalparity: no binary protected attribute declared")
    _require_columns(eval_data, ["predictions", *names], "statisticalparity")

    non_binary = [n for n in names if eval_data[n].nunique(dropna=True) != 2]
    if non_binary:
        raise ConfigError(f"statisticalparity: non-binary protected attributes: {', '.join(non_binary)}")

    spd: Dict[str, float] = {}
    for name in names:
        group_means = eval_data.groupby(name)["predictions"].mean().sort_index()
        spd[name] = float(abs(group_means.iloc[0] - group_means.iloc[1]))

    ctx.log(step_id="evaluation.statisticalparity", level="info", message="statistical parity complete", spd=spd)
    return EvaluationEnvelope(
        metrics={"spd": spd},
        eval_type="statistical_parity_eval",
        input_data=eval_data,
        protected_attributes=list(names),
    )


DEFAULT_PARAMS: Dict[str, Dict[str, Any]] = {
    "mse": {},
    "summarystats": {},
    "statisticalparity": {"protected_name": None},
}
