# src/flowengine/workflow/aggregate.py
"""
Agregação de métricas de avaliação entre splits.

Para cada métrica presente em `output_eval[*].metrics` dos resultados:
    - métrica escalar  → {mean, sd, min, max}
    - métrica aninhada → {submétrica: {mean, sd}}

`sd` é o desvio-padrão amostral (ddof=1); com um único valor é NaN.
Resultados sem `output_eval` são ignorados. Valores ausentes (NaN) são
descartados nas estatísticas.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import numpy as np


def _stats(values: List[Any], *, with_range: bool) -> Dict[str, float]:
    arr = np.asarray(values, dtype=float)
    arr = arr[~np.isnan(arr)]
    if arr.size == 0:
        out = {"mean": float("nan"), "sd": float("nan")}
        if with_range:
            out.update({"min": float("nan"), "max": float("nan")})
        return out
    out = {
        "mean": float(arr.mean()),
        "sd": float(arr.std(ddof=1)) if arr.size > 1 else float("nan"),
    }
    if with_range:
        out.update({"min": float(arr.min()), "max": float(arr.max())})
    return out


def _metrics_of(result: Any) -> List[Mapping[str, Any]]:
    if not isinstance(result, Mapping):
        return []
    output_eval = result.get("output_eval") or {}
    return [
        (env.get("metrics") if isinstance(env, Mapping) else getattr(env, "metrics", None)) or {}
        for env in output_eval.values()
    ]


def aggregate_results(workflow_results: Mapping[str, Any]) -> Dict[str, Any]:
    collected: Dict[str, List[Any]] = {}
    for result in workflow_results.values():
        for metrics in _metrics_of(result):
            for name, value in metrics.items():
                collected.setdefault(name, []).append(value)

    aggregated: Dict[str, Any] = {}
    for name, values in collected.items():
        if isinstance(values[0], Mapping):
            subnames: List[str] = []
            for v in values:
                for k in v:
                    if k not in subnames:
                        subnames.append(k)
            aggregated[name] = {
                sub: _stats([v.get(sub, float("nan")) for v in values], with_range=False)
                for sub in subnames
            }
        else:
            aggregated[name] = _stats(values, with_range=True)
    return aggregated
