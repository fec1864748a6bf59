# src/flowengine/engines/__init__.py
"""
Catálogo v1 de engines built-in do flowengine.

`default_specs_v1()` devolve os `EngineSpec` usados por `EngineRegistry.v1()`:

| categoria     | engines                                        |
|---------------|------------------------------------------------|
| split         | random, random_stratified, cv, userdefined     |
| execution     | sequential, joblib_local, array_prepare,       |
|               | adaptive_sequential                            |
| preprocessing | resampling                                     |
| training      | lm, glm                                        |
| evaluation    | mse, summarystats, statisticalparity           |

Engines de terceiros são adicionados com `EngineRegistry.register(...)`.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from flowengine.core.pipeline.registry import EngineSpec
from flowengine.core.pipeline.types import EngineCategory
from flowengine.execution import engines as execution
from flowengine.split import engines as split

from . import evaluation, preprocessing, training


def _specs(
    category: EngineCategory,
    wrappers: Dict[str, Callable[..., Any]],
    defaults: Dict[str, Dict[str, Any]],
    descriptions: Dict[str, str],
) -> List[EngineSpec]:
    return [
        EngineSpec(
            name=name,
            category=category,
            wrapper=wrapper,
            default_params=dict(defaults.get(name) or {}),
            description=descriptions.get(name, ""),
        )
        for name, wrapper in wrappers.items()
    ]


def default_specs_v1() -> List[EngineSpec]:
    """Catálogo v1: splitters, execução, pre-processing, treino e avaliação."""
    split_specs = _specs(
        EngineCategory.SPLIT,
        {
            "random": split.split_random,
            "random_stratified": split.split_random_stratified,
            "cv": split.split_cv,
            "userdefined": split.split_userdefined,
        },
        split.DEFAULT_PARAMS,
        {
            "random": "Partição aleatória treino/teste (um split)",
            "random_stratified": "Partição aleatória estratificada (um split)",
            "cv": "Cross-validation em k folds",
            "userdefined": "Splits declarados pelo chamador",
        },
    )

    execution_specs = _specs(
        EngineCategory.EXECUTION,
        {
            "sequential": execution.execution_sequential,
            "joblib_local": execution.execution_joblib_local,
            "array_prepare": execution.execution_array_prepare,
            "adaptive_sequential": execution.execution_adaptive_sequential,
        },
        execution.DEFAULT_PARAMS,
        {
            "sequential": "Execução in-process sequencial",
            "joblib_local": "Execução in-process paralela (joblib)",
            "array_prepare": "Snapshots de hand-off para array job externo",
            "adaptive_sequential": "Splits sequenciais até a métrica monitorada estabilizar",
        },
    )

    preprocessing_specs = _specs(
        EngineCategory.PREPROCESSING,
        {"resampling": preprocessing.preprocessing_resampling},
        preprocessing.DEFAULT_PARAMS,
        {"resampling": "Over/undersampling do target"},
    )

    training_specs = _specs(
        EngineCategory.TRAINING,
        {"lm": training.train_lm, "glm": training.train_glm},
        training.DEFAULT_PARAMS,
        {"lm": "Regressão linear", "glm": "Modelo linear generalizado (gaussian/binomial)"},
    )

    evaluation_specs = _specs(
        EngineCategory.EVALUATION,
        {
            "mse": evaluation.eval_mse,
            "summarystats": evaluation.eval_summarystats,
            "statisticalparity": evaluation.eval_statisticalparity,
        },
        evaluation.DEFAULT_PARAMS,
        {
            "mse": "Erro quadrático médio",
            "summarystats": "Estatísticas descritivas das predições",
            "statisticalparity": "Statistical parity difference por atributo protegido binário",
        },
    )

    return split_specs + execution_specs + preprocessing_specs + training_specs + evaluation_specs


__all__ = ["default_specs_v1"]
