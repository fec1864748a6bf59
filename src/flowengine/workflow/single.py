# src/flowengine/workflow/single.py
"""
Corpo do workflow para um único split.

`run_workflow_single` é a unidade de trabalho despachada pelo Dispatch
Adapter: in-process (engines `sequential` / `joblib_local`) ou em um runner
externo (`flowengine.execution.runner`). O resultado é o Per-Split Result.

Etapas:
    1. pre-processing (opcional, em cadeia) sobre o treino do split
    2. training (obrigatório): ajuste no treino + predições no teste
    3. evaluation (zero ou mais engines) sobre `eval_data`
       (`predictions`, `actuals` e atributos protegidos binários do teste)

Formato do resultado:
    {
        "split_id": str | None,
        "output_preprocessing": {nome: PreprocessingEnvelope},   # só se houver
        "output_train": TrainingEnvelope,
        "output_eval": {nome: EvaluationEnvelope},
    }

Falhas de engine são registradas no event log (`level=error`) e propagadas.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import pandas as pd

from flowengine.core.config.errors import ConfigError
from flowengine.core.errors import exception_to_payload
from flowengine.core.exceptions import EngineExecutionError
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.registry import EngineRegistry
from flowengine.core.pipeline.types import EngineCategory


def _split_frames(split: Any) -> tuple:
    if not isinstance(split, Mapping) or "train" not in split or "test" not in split:
        raise ConfigError("split payload must be a mapping with 'train' and 'test'")
    return split["train"], split["test"]


def build_eval_data(control: Any, predictions: Any, test: pd.DataFrame) -> pd.DataFrame:
    """Tabela de avaliação: predições, valores reais e atributos protegidos binários."""
    eval_data = pd.DataFrame(
        {
            "predictions": list(predictions),
            "actuals": test[control.vars.target_var].to_numpy(),
        }
    )
    for name in control.vars.protected_vars_binary:
        eval_data[name] = test[name].to_numpy()
    return eval_data


def run_workflow_single(
    control: Any,
    split: Any,
    registry: EngineRegistry,
    *,
    ctx: Optional[RunContext] = None,
    split_id: Optional[str] = None,
) -> Dict[str, Any]:
    ctx = ctx or RunContext.new(settings=control.settings)
    step_id = f"workflow.{split_id}" if split_id else "workflow"
    ctx.log(step_id=step_id, level="info", message="workflow started", split_id=split_id)

    try:
        train, test = _split_frames(split)
        result: Dict[str, Any] = {"split_id": split_id}

        pre_names = control.engines_for(EngineCategory.PREPROCESSING)
        if pre_names:
            outputs = {}
            for name in pre_names:
                out = registry.get(EngineCategory.PREPROCESSING, name).invoke(ctx=ctx, control=control, data=train)
                train = out.preprocessed_data
                outputs[name] = out
            result["output_preprocessing"] = outputs

        train_name = control.engine_for(EngineCategory.TRAINING)
        if train_name is None:
            raise ConfigError("no training engine selected (engines.training)")
        output_train = registry.get(EngineCategory.TRAINING, train_name).invoke(
            ctx=ctx, control=control, train=train, test=test
        )
        if output_train.predictions is None:
            raise EngineExecutionError(
                message=f"Training engine '{train_name}' returned no predictions",
                details={"engine": train_name, "split_id": split_id},
                hint="Engines de treino usados em workflows devem preencher `predictions`.",
            )
        result["output_train"] = output_train

        eval_data = build_eval_data(control, output_train.predictions, test)
        result["output_eval"] = {
            name: registry.get(EngineCategory.EVALUATION, name).invoke(ctx=ctx, control=control, eval_data=eval_data)
            for name in control.engines_for(EngineCategory.EVALUATION)
        }
    except Exception as e:
        ctx.log(
            step_id=step_id,
            level="error",
            message="workflow failed",
            error=exception_to_payload(e).to_dict(),
        )
        raise

    ctx.log(step_id=step_id, level="info", message="workflow finished", split_id=split_id)
    return result
