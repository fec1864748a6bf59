# src/flowengine/execution/stability.py
"""
Critérios de estabilidade da execução adaptativa.

Cada estratégia compara o histórico completo de uma métrica com os últimos
`window` valores e decide se a métrica convergiu (`stability_value < threshold`).

Estratégias:
    - custom_relative / custom_absolute → estatística fornecida pelo chamador (`fun`)
    - mean_relative   → |média(janela) - média(global)| / |média(global)|
    - mean_absolute   → média de |valor da janela - média(global)|
    - sd_relative / sd_absolute   → desvio padrão amostral (ddof=1)
    - mad_relative / mad_absolute → MAD escalado (1.4826 * mediana dos desvios)
    - cv_relative / cv_absolute   → coeficiente de variação (sd / média)
    - cohen_absolute  → d de Cohen entre a janela e os valores anteriores

Regras comuns:
    - Exige pelo menos `window + 1` valores
    - Nas estratégias relativas, uma base global igual a 0 vira 1e-8
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np

from flowengine.core.config.errors import ConfigError


ZERO_BASE = 1e-8
MAD_SCALE = 1.4826


@dataclass(frozen=True)
class StabilityResult:
    is_stable: bool
    stability_value: float
    threshold_value: float
    strategy: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _sd(x: np.ndarray) -> float:
    return float(np.std(x, ddof=1))


def _mad(x: np.ndarray) -> float:
    return float(MAD_SCALE * np.median(np.abs(x - np.median(x))))


def _cv(x: np.ndarray) -> float:
    return _sd(x) / float(np.mean(x))


def _relative(window_value: float, global_value: float) -> float:
    base = ZERO_BASE if global_value == 0 else abs(global_value)
    return abs(window_value - global_value) / base


_STATISTICS: Dict[str, Callable[[np.ndarray], float]] = {
    "mean": lambda x: float(np.mean(x)),
    "sd": _sd,
    "mad": _mad,
    "cv": _cv,
}


def _cohen(values: np.ndarray, window: int) -> float:
    recent = values[-window:]
    earlier = values[:-window]
    if len(earlier) < 2:
        return float("inf")
    pooled = float(np.sqrt((_sd(recent) ** 2 + _sd(earlier) ** 2) / 2))
    if pooled == 0:
        pooled = ZERO_BASE
    return abs(float(np.mean(recent)) - float(np.mean(earlier))) / pooled


def _stability_value(strategy: str, values: np.ndarray, window: int, fun: Optional[Callable[..., Any]]) -> float:
    if strategy == "cohen_absolute":
        return _cohen(values, window)
    if strategy == "mean_absolute":
        return float(np.mean(np.abs(values[-window:] - np.mean(values))))

    stat_name, _, mode = strategy.rpartition("_")
    if stat_name == "custom":
        if not callable(fun):
            raise ConfigError(f"stability strategy '{strategy}' requires custom_stability_function")

        def stat(x: np.ndarray) -> float:
            return float(fun(x))

    else:
        stat = _STATISTICS[stat_name]

    global_value = stat(values)
    window_value = stat(values[-window:])
    if mode == "relative":
        return _relative(window_value, global_value)
    return abs(window_value - global_value)


STRATEGIES = (
    "custom_relative",
    "custom_absolute",
    "mean_relative",
    "mean_absolute",
    "sd_relative",
    "sd_absolute",
    "mad_relative",
    "mad_absolute",
    "cv_relative",
    "cv_absolute",
    "cohen_absolute",
)


def check_stability(
    strategy: str,
    values: Sequence[float],
    *,
    threshold: float,
    window: int,
    fun: Optional[Callable[..., Any]] = None,
) -> StabilityResult:
    """
    Avalia se a métrica monitorada estabilizou.

    Args:
        strategy: Uma das `STRATEGIES`.
        values: Histórico da métrica, em ordem de execução.
        threshold: Limite; estável quando `stability_value < threshold`.
        window: Quantidade de valores finais comparados com o histórico.
        fun: Estatística das estratégias `custom_*` (recebe um array numpy).

    Raises:
        ConfigError: Estratégia desconhecida, janela inválida, histórico curto
            ou estratégia custom sem função.
    """
    if strategy not in STRATEGIES:
        raise ConfigError(f"unknown stability strategy '{strategy}' (expected one of: {', '.join(STRATEGIES)})")
    if not isinstance(window, int) or isinstance(window, bool) or window < 1:
        raise ConfigError(f"stability window must be a positive int, got: {window!r}")

    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1 or len(arr) < window + 1:
        raise ConfigError(f"stability check needs at least window + 1 = {window + 1} values, got {len(arr)}")

    value = _stability_value(strategy, arr, window, fun)
    return StabilityResult(
        is_stable=bool(value < threshold),
        stability_value=float(value),
        threshold_value=float(threshold),
        strategy=strategy,
    )


__all__ = ["StabilityResult", "STRATEGIES", "check_stability"]
