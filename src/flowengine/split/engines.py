# src/flowengine/split/engines.py
"""
Engines de split canônicos do flowengine (v1).

Cada engine particiona `control.data` em splits nomeados e devolve um
`SplitEnvelope` cujo Split Map associa split-id → `{"train": df, "test": df}`.

Engines disponíveis:
    - random            → um único split (`"random"`), partição aleatória
    - random_stratified → um único split (`"random_stratified"`), estratificado
                          pelo target (ou por `strata_var`)
    - cv                → k folds (`"fold1"` … `"foldk"`), estratificados pelo
                          target quando possível
    - userdefined       → ids e linhas de teste informados pelo chamador

Princípios:
    - Determinismo: a mesma configuração e a mesma seed produzem os mesmos ids
      e as mesmas linhas em cada split
    - Seed explícita: `params.seed` ou, na ausência, `control.global_seed`
    - Zero splits é inválido (`EmptySplitMapError`); um split é execução sem
      particionamento

Limites explícitos:
    - Não executa o workflow
    - Não persiste splits (ver `flowengine.execution.engines.array_prepare`)
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import numpy as np
import pandas as pd
from sklearn.model_selection import KFold, StratifiedKFold, train_test_split

from flowengine.core.config.errors import InvalidSplitParamsError
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import SplitEnvelope
from flowengine.core.pipeline.split_map import SplitMap


_MAX_STRATA_BINS = 5


def _resolve_seed(control: Any, params: Mapping[str, Any]) -> int:
    seed = params.get("seed")
    if seed is None:
        return int(control.global_seed)
    if not isinstance(seed, int) or isinstance(seed, bool):
        raise InvalidSplitParamsError("seed must be an int")
    return seed


def _validate_ratio(ratio: Any) -> float:
    if not isinstance(ratio, (int, float)) or isinstance(ratio, bool):
        raise InvalidSplitParamsError("split_ratio must be a number")
    r = float(ratio)
    if not (0.0 < r < 1.0):
        raise InvalidSplitParamsError("split_ratio must be between 0 and 1 (exclusive)")
    return r


def _strata(values: pd.Series) -> pd.Series:
    """Rótulos de estratificação: o próprio valor (discreto) ou quantis (contínuo)."""
    if pd.api.types.is_numeric_dtype(values) and values.nunique() > 2 * _MAX_STRATA_BINS:
        return pd.qcut(values, q=_MAX_STRATA_BINS, labels=False, duplicates="drop")
    return values.astype(str)


def _can_stratify(labels: pd.Series, min_count: int) -> bool:
    counts = labels.value_counts()
    return len(counts) > 1 and int(counts.min()) >= min_count


def _train_test(data: pd.DataFrame, test_idx: np.ndarray) -> Dict[str, pd.DataFrame]:
    mask = np.zeros(len(data), dtype=bool)
    mask[test_idx] = True
    return {"train": data.iloc[~mask], "test": data.iloc[mask]}


def _holdout(
    *,
    ctx: RunContext,
    step_id: str,
    data: pd.DataFrame,
    ratio: float,
    seed: int,
    stratify_on: Optional[pd.Series],
) -> Dict[str, pd.DataFrame]:
    positions = np.arange(len(data))
    stratify = None
    if stratify_on is not None:
        labels = _strata(stratify_on)
        if _can_stratify(labels, min_count=2):
            stratify = labels.to_numpy()
        else:
            ctx.add_warning(step_id=step_id, message="stratification disabled: too few rows per stratum")
    _, test_pos = train_test_split(
        positions,
        train_size=ratio,
        random_state=seed,
        shuffle=True,
        stratify=stratify,
    )
    return _train_test(data, np.sort(test_pos))


# ---------------------------------------------------------------------------
# random / random_stratified
# ---------------------------------------------------------------------------

def split_random(*, ctx: RunContext, control: Any, params: Dict[str, Any]) -> SplitEnvelope:
    ratio = _validate_ratio(params.get("split_ratio"))
    seed = _resolve_seed(control, params)

    ctx.log(
        step_id="split.random",
        level="info",
        message="random split",
        split_ratio=ratio,
        seed=seed,
    )
    split = _holdout(ctx=ctx, step_id="split.random", data=control.data, ratio=ratio, seed=seed, stratify_on=None)
    return SplitEnvelope(
        split_type="random",
        splits=SplitMap({"random": split}),
        seed=seed,
        params=dict(params),
    )


def split_random_stratified(*, ctx: RunContext, control: Any, params: Dict[str, Any]) -> SplitEnvelope:
    ratio = _validate_ratio(params.get("split_ratio"))
    seed = _resolve_seed(control, params)
    strata_var = params.get("strata_var") or control.vars.target_var
    if strata_var not in control.data.columns:
        raise InvalidSplitParamsError(f"strata_var not found in data: {strata_var}")

    ctx.log(
        step_id="split.random_stratified",
        level="info",
        message="stratified random split",
        split_ratio=ratio,
        seed=seed,
        strata_var=strata_var,
    )
    split = _holdout(
        ctx=ctx,
        step_id="split.random_stratified",
        data=control.data,
        ratio=ratio,
        seed=seed,
        stratify_on=control.data[strata_var],
    )
    return SplitEnvelope(
        split_type="random_stratified",
        splits=SplitMap({"random_stratified": split}),
        seed=seed,
        params=dict(params),
        specific_output={"stratified_on": strata_var},
    )


# ---------------------------------------------------------------------------
# cv
# ---------------------------------------------------------------------------

def split_cv(*, ctx: RunContext, control: Any, params: Dict[str, Any]) -> SplitEnvelope:
    """
    Cross-validation em k folds (`fold1` … `foldk`).

    Estratifica pelo target quando todo estrato tem ao menos `cv_folds`
    linhas; caso contrário usa KFold embaralhado e registra um warning.

    Raises:
        InvalidSplitParamsError: `cv_folds` não inteiro, menor que 2 ou maior
            que o número de linhas.
    """
    k = params.get("cv_folds")
    if not isinstance(k, int) or isinstance(k, bool):
        raise InvalidSplitParamsError("cv_folds must be an int")
    if k < 2:
        raise InvalidSplitParamsError(
            f"cv_folds={k} would leave the training data empty; use cv_folds >= 2 or a random splitter"
        )
    data = control.data
    if k > len(data):
        raise InvalidSplitParamsError(f"cv_folds={k} exceeds the number of rows ({len(data)})")
    seed = _resolve_seed(control, params)

    labels = _strata(data[control.vars.target_var])
    stratified = _can_stratify(labels, min_count=k)
    if stratified:
        folds = StratifiedKFold(n_splits=k, shuffle=True, random_state=seed).split(np.zeros(len(data)), labels)
    else:
        ctx.add_warning(step_id="split.cv", message="stratification disabled: too few rows per stratum")
        folds = KFold(n_splits=k, shuffle=True, random_state=seed).split(np.zeros(len(data)))

    ctx.log(step_id="split.cv", level="info", message="cross-validation split", cv_folds=k, seed=seed)

    pairs = [(f"fold{i}", _train_test(data, test_idx)) for i, (_, test_idx) in enumerate(folds, start=1)]
    return SplitEnvelope(
        split_type="cv",
        splits=SplitMap(pairs),
        seed=seed,
        params=dict(params),
        specific_output={
            "folds": len(pairs),
            "stratified_on": control.vars.target_var if stratified else None,
        },
    )


# ---------------------------------------------------------------------------
# userdefined
# ---------------------------------------------------------------------------

def split_userdefined(*, ctx: RunContext, control: Any, params: Dict[str, Any]) -> SplitEnvelope:
    """
    Splits declarados explicitamente pelo chamador.

    `params.test_rows` mapeia split-id → rótulos de linha (index de `data`)
    que compõem o teste; as demais linhas formam o treino. A ordem do mapa
    define a ordem dos splits.

    Raises:
        EmptySplitMapError: Se `test_rows` estiver vazio.
        InvalidSplitParamsError: Rótulos inexistentes em `data`.
    """
    test_rows = params.get("test_rows") or {}
    if not isinstance(test_rows, Mapping):
        raise InvalidSplitParamsError("test_rows must be a mapping of split id -> row labels")

    data = control.data
    pairs: List[tuple] = []
    for split_id, rows in test_rows.items():
        labels = list(rows)
        unknown = [r for r in labels if r not in data.index]
        if unknown:
            raise InvalidSplitParamsError(f"split '{split_id}' references unknown rows: {unknown}")
        test_mask = data.index.isin(labels)
        pairs.append((split_id, {"train": data.loc[~test_mask], "test": data.loc[test_mask]}))

    splits = SplitMap(pairs)
    seed = _resolve_seed(control, params)
    ctx.log(step_id="split.userdefined", level="info", message="user-defined split", n_splits=len(splits))
    return SplitEnvelope(split_type="userdefined", splits=splits, seed=seed)


DEFAULT_PARAMS: Dict[str, Dict[str, Any]] = {
    "random": {"split_ratio": 0.7, "seed": None},
    "random_stratified": {"split_ratio": 0.7, "seed": None, "strata_var": None},
    "cv": {"cv_folds": 5, "seed": None},
    "userdefined": {"test_rows": {}, "seed": None},
}


__all__ = [
    "split_random",
    "split_random_stratified",
    "split_cv",
    "split_userdefined",
    "DEFAULT_PARAMS",
]
