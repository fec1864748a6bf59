# src/flowengine/engines/training.py
"""
Engines de treinamento built-in (v1).

Cada engine ajusta um modelo sobre o treino de um split e já devolve as
predições sobre o teste do mesmo split, na escala da resposta.

Engines disponíveis:
    - lm  → regressão linear por mínimos quadrados (`LinearRegression`)
    - glm → modelo linear generalizado:
              family=gaussian → `LinearRegression` com pesos opcionais
              family=binomial → `LogisticRegression` sem penalização
                                 (predição = probabilidade da classe positiva)

Matriz de design:
    - colunas = features + atributos protegidos (`VarsSpec.design_columns`)
    - colunas categóricas são codificadas via `pd.get_dummies(drop_first=True)`
    - o teste é realinhado às colunas do treino (categorias ausentes → 0)

Limites explícitos:
    - Sem normalização (ver engines de pre-processing)
    - Sem busca de hiperparâmetros
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Tuple

import numpy as np
import pandas as pd
from sklearn.linear_model import LinearRegression, LogisticRegression

from flowengine.core.config.errors import ConfigError
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import TrainingEnvelope


def _design(train: pd.DataFrame, test: pd.DataFrame, columns: List[str]) -> Tuple[pd.DataFrame, pd.DataFrame]:
    X_train = pd.get_dummies(train[columns], drop_first=True, dtype=float)
    X_test = pd.get_dummies(test[columns], drop_first=True, dtype=float)
    X_test = X_test.reindex(columns=X_train.columns, fill_value=0.0)
    return X_train, X_test


def _sample_weight(train: pd.DataFrame, spec: Any) -> Any:
    if spec is None:
        return None
    if isinstance(spec, str):
        if spec not in train.columns:
            raise ConfigError(f"sample_weight column not found in data: {spec}")
        return train[spec].to_numpy(dtype=float)
    raise ConfigError("sample_weight must be a column name or None")


def train_lm(
    *,
    ctx: RunContext,
    control: Any,
    params: Dict[str, Any],
    train: pd.DataFrame,
    test: pd.DataFrame,
) -> TrainingEnvelope:
    columns = control.vars.design_columns()
    X_train, X_test = _design(train, test, columns)
    y_train = train[control.vars.target_var].to_numpy(dtype=float)

    ctx.log(step_id="training.lm", level="info", message="lm training started", rows=len(X_train))
    start = time.perf_counter()
    model = LinearRegression(fit_intercept=bool(params.get("fit_intercept", True)))
    model.fit(X_train, y_train)
    elapsed = time.perf_counter() - start
    ctx.log(step_id="training.lm", level="info", message="lm training finished", seconds=round(elapsed, 4))

    return TrainingEnvelope(
        model=model,
        model_type="lm",
        formula=control.vars.formula(),
        predictions=np.asarray(model.predict(X_test), dtype=float),
        hyperparameters=dict(params),
        specific_output={"training_time": elapsed, "design_columns": list(X_train.columns)},
    )


def train_glm(
    *,
    ctx: RunContext,
    control: Any,
    params: Dict[str, Any],
    train: pd.DataFrame,
    test: pd.DataFrame,
) -> TrainingEnvelope:
    """
    GLM com família `gaussian` ou `binomial`.

    Raises:
        ConfigError: Família não suportada, ou coluna de pesos inexistente.
    """
    family = str(params.get("family", "gaussian")).lower()
    if family not in {"gaussian", "binomial"}:
        raise ConfigError(f"Unsupported glm family: {family}")

    columns = control.vars.design_columns()
    X_train, X_test = _design(train, test, columns)
    y_train = train[control.vars.target_var].to_numpy()
    weights = _sample_weight(train, params.get("sample_weight"))

    ctx.log(step_id="training.glm", level="info", message="glm training started", family=family, rows=len(X_train))
    start = time.perf_counter()
    if family == "binomial":
        model = LogisticRegression(penalty=None, max_iter=int(params.get("max_iter", 1000)))
        model.fit(X_train, y_train, sample_weight=weights)
        predictions = model.predict_proba(X_test)[:, 1]
    else:
        model = LinearRegression()
        model.fit(X_train, y_train.astype(float), sample_weight=weights)
        predictions = model.predict(X_test)
    elapsed = time.perf_counter() - start
    ctx.log(step_id="training.glm", level="info", message="glm training finished", seconds=round(elapsed, 4))

    return TrainingEnvelope(
        model=model,
        model_type="glm",
        formula=control.vars.formula(),
        predictions=np.asarray(predictions, dtype=float),
        hyperparameters=dict(params),
        specific_output={"training_time": elapsed, "design_columns": list(X_train.columns)},
    )


DEFAULT_PARAMS: Dict[str, Dict[str, Any]] = {
    "lm": {"fit_intercept": True},
    "glm": {"family": "gaussian", "sample_weight": None, "max_iter": 1000},
}
