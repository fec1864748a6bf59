# src/flowengine/execution/engines.py
"""
Engines de execução (Dispatch Adapter) do flowengine (v1).

Um engine de execução recebe o split output e despacha o corpo do workflow
(`run_workflow_single`) para cada split do Split Map.

Engines disponíveis:
    - sequential    → in-process, um split após o outro
    - joblib_local  → in-process, splits em paralelo via `joblib.Parallel`
    - array_prepare → persiste os snapshots de hand-off para um array job
                      externo e **não** executa nenhum split
    - adaptive_sequential → repete o splitter (um split por seed) até a
                      métrica monitorada estabilizar ou atingir `max_splits`

Contrato do envelope:
    - imediato (sequential, joblib_local): `workflow_results` indexado
      exatamente pelos ids do Split Map, `continue_workflow=True`
    - adiado (array_prepare): `workflow_results=None`,
      `continue_workflow=False`; o workflow é retomado via
      `flowengine.resume.prepare_resume`
    - adaptivo (adaptive_sequential): os splits são gerados pelo próprio
      engine; o SplitEnvelope efetivo vai em `specific_output["split_output"]`

Limites explícitos:
    - Não submete jobs ao scheduler externo
    - Não faz retry de splits que falharam
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Tuple

from joblib import Parallel, delayed

from flowengine.core.config.errors import ConfigError
from flowengine.core.config.hashing import compute_control_hash
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import ExecutionEnvelope, SplitEnvelope, check_execution_matches
from flowengine.core.pipeline.registry import EngineRegistry
from flowengine.core.pipeline.types import EngineCategory
from flowengine.persistence.snapshot_store import SnapshotStore
from flowengine.workflow.single import run_workflow_single

from .stability import STRATEGIES, check_stability


def _run_isolated(control: Any, split: Any, registry: EngineRegistry, split_id: str) -> Tuple[str, Any, List[Dict[str, Any]]]:
    # cada worker tem seu próprio contexto; os eventos voltam junto com o resultado
    ctx = RunContext.new(settings=control.settings, split_id=split_id)
    result = run_workflow_single(control, split, registry, ctx=ctx, split_id=split_id)
    return split_id, result, ctx.events


def execution_sequential(
    *,
    ctx: RunContext,
    control: Any,
    params: Dict[str, Any],
    split_output: Any,
    registry: EngineRegistry,
) -> ExecutionEnvelope:
    splits = split_output.splits
    ctx.log(step_id="execution.sequential", level="info", message="sequential execution", n_splits=len(splits))

    workflow_results = {
        split_id: run_workflow_single(control, split, registry, ctx=ctx, split_id=split_id)
        for split_id, split in splits.items()
    }
    out = ExecutionEnvelope(
        execution_type="sequential",
        workflow_results=workflow_results,
        continue_workflow=True,
    )
    check_execution_matches(out, splits.ids())
    return out


def execution_joblib_local(
    *,
    ctx: RunContext,
    control: Any,
    params: Dict[str, Any],
    split_output: Any,
    registry: EngineRegistry,
) -> ExecutionEnvelope:
    """
    Executa os splits em paralelo com `joblib.Parallel`.

    Parâmetros:
        - n_jobs: número de workers (padrão 2; -1 usa todos os núcleos)
        - backend: backend do joblib (`loky`, `threading`, `multiprocessing`)

    Os eventos de cada worker são anexados ao event log do contexto chamador.
    """
    splits = split_output.splits
    n_jobs = params.get("n_jobs", 2)
    backend = params.get("backend", "loky")
    ctx.log(
        step_id="execution.joblib_local",
        level="info",
        message="parallel execution",
        n_splits=len(splits),
        n_jobs=n_jobs,
        backend=backend,
    )

    outputs = Parallel(n_jobs=n_jobs, backend=backend)(
        delayed(_run_isolated)(control, split, registry, split_id) for split_id, split in splits.items()
    )

    workflow_results: Dict[str, Any] = {}
    for split_id, result, events in outputs:
        workflow_results[split_id] = result
        ctx.events.extend(events)

    out = ExecutionEnvelope(
        execution_type="joblib_local",
        workflow_results=workflow_results,
        continue_workflow=True,
        params={"n_jobs": n_jobs, "backend": backend},
    )
    check_execution_matches(out, splits.ids())
    return out


def execution_array_prepare(
    *,
    ctx: RunContext,
    control: Any,
    params: Dict[str, Any],
    split_output: Any,
    registry: EngineRegistry,
) -> ExecutionEnvelope:
    """
    Prepara a execução em array job externo.

    Grava em `output_folder`:
        - control_base.joblib, split_output.joblib, n_splits.txt

    O array job deve executar `python -m flowengine.execution.runner` uma
    vez por split (índices 1..n_splits), gravando em `results_dir`.
    """
    output_folder = Path(params.get("output_folder") or "array_inputs")
    results_dir = Path(params.get("results_dir") or (output_folder / "results"))

    paths = SnapshotStore(output_folder).dump(control=control, split_output=split_output)
    n_splits = len(split_output.splits)
    config_hash = compute_control_hash(control)

    ctx.log(
        step_id="execution.array_prepare",
        level="info",
        message="array inputs prepared; submit one runner per split",
        output_folder=str(output_folder),
        n_splits=n_splits,
    )
    return ExecutionEnvelope(
        execution_type="array_prepare",
        workflow_results=None,
        continue_workflow=False,
        params={"output_folder": str(output_folder), "results_dir": str(results_dir)},
        specific_output={
            "snapshots": paths,
            "n_splits": n_splits,
            "results_dir": str(results_dir),
            "config_hash": config_hash,
            "split_ids": split_output.splits.ids(),
        },
    )


def _positive_int(params: Dict[str, Any], name: str) -> int:
    value = params.get(name)
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ConfigError(f"execution.adaptive_sequential.{name} must be a positive int, got: {value!r}")
    return value


def _monitored_metric(result: Dict[str, Any], source: str, name: str, split_id: str) -> float:
    output = (result.get("output_eval") or {}).get(source)
    metrics = getattr(output, "metrics", None) or {}
    if name not in metrics:
        raise ConfigError(
            f"metric '{name}' not produced by evaluation engine '{source}' in {split_id} "
            f"(select it under engines.evaluation)"
        )
    return float(metrics[name])


def execution_adaptive_sequential(
    *,
    ctx: RunContext,
    control: Any,
    params: Dict[str, Any],
    split_output: Any,
    registry: EngineRegistry,
) -> ExecutionEnvelope:
    """
    Executa splits de um único split em sequência até a métrica estabilizar.

    Na iteração `i` o splitter configurado é reexecutado com
    `seed = seed_base + i`; o split resultante recebe o id `split<i>`.
    A partir de `min_splits` valores a estabilidade é avaliada com
    `check_stability`; o loop para quando estável ou ao atingir `max_splits`.

    Parâmetros:
        - metric_name / metric_source: métrica monitorada e engine de avaliação que a produz
        - stability_strategy, threshold, window: critério (ver `execution.stability`)
        - min_splits / max_splits: limites de iterações
        - custom_stability_function: estatística das estratégias `custom_*`
        - seed_base: base das seeds do splitter

    Raises:
        ConfigError: split output com mais de um split, parâmetros
            inconsistentes ou métrica ausente na avaliação.
    """
    n_initial = len(split_output.splits)
    if n_initial != 1:
        raise ConfigError(
            f"adaptive execution requires a splitter that returns exactly one split, "
            f"got {n_initial} from '{split_output.split_type}'"
        )

    window = _positive_int(params, "window")
    min_splits = _positive_int(params, "min_splits")
    max_splits = _positive_int(params, "max_splits")
    if min_splits < window + 1:
        raise ConfigError(f"min_splits ({min_splits}) must be at least window + 1 ({window + 1})")
    if max_splits < min_splits:
        raise ConfigError(f"max_splits ({max_splits}) must be >= min_splits ({min_splits})")

    threshold = params.get("threshold")
    if not isinstance(threshold, (int, float)) or isinstance(threshold, bool):
        raise ConfigError(f"execution.adaptive_sequential.threshold must be a number, got: {threshold!r}")
    strategy = params.get("stability_strategy")
    if strategy not in STRATEGIES:
        raise ConfigError(f"unknown stability strategy '{strategy}' (expected one of: {', '.join(STRATEGIES)})")
    metric_name = params.get("metric_name")
    metric_source = params.get("metric_source")
    seed_base = int(params.get("seed_base") or 0)

    split_name = control.engine_for(EngineCategory.SPLIT)
    if split_name is None:
        raise ConfigError("adaptive execution needs a split engine to regenerate splits (engines.split)")
    splitter = registry.get(EngineCategory.SPLIT, split_name)

    ctx.log(
        step_id="execution.adaptive_sequential",
        level="info",
        message="adaptive execution started",
        metric=f"{metric_source}.{metric_name}",
        strategy=strategy,
        min_splits=min_splits,
        max_splits=max_splits,
    )

    workflow_results: Dict[str, Any] = {}
    used_splits: Dict[str, Any] = {}
    used_seeds: Dict[str, int] = {}
    values: List[float] = []
    stability = None
    stopped_by = "max_splits"

    i = 1
    while True:
        seed = seed_base + i
        split_id = f"split{i}"
        seeded = control.with_engine_params(EngineCategory.SPLIT, split_name, seed=seed)
        split = next(iter(splitter.invoke(ctx=ctx, control=seeded).splits.values()))

        result = run_workflow_single(control, split, registry, ctx=ctx, split_id=split_id)
        workflow_results[split_id] = result
        used_splits[split_id] = split
        used_seeds[split_id] = seed
        values.append(_monitored_metric(result, metric_source, metric_name, split_id))

        if len(values) >= min_splits:
            stability = check_stability(
                strategy,
                values,
                threshold=threshold,
                window=window,
                fun=params.get("custom_stability_function"),
            )
            if stability.is_stable:
                stopped_by = "stability"
                ctx.log(
                    step_id="execution.adaptive_sequential",
                    level="info",
                    message="stability reached",
                    n_splits=len(values),
                    **stability.to_dict(),
                )
                break
            if len(values) >= max_splits:
                ctx.log(
                    step_id="execution.adaptive_sequential",
                    level="warn",
                    message="maximum number of splits reached before stability",
                    n_splits=len(values),
                    **stability.to_dict(),
                )
                break
        i += 1

    effective_split_output = SplitEnvelope(
        split_type=split_output.split_type,
        splits=used_splits,
        seed=seed_base + 1,
        params=dict(split_output.params or {}),
    )
    out = ExecutionEnvelope(
        execution_type="adaptive_sequential",
        workflow_results=workflow_results,
        continue_workflow=True,
        params=dict(params),
        specific_output={
            "metric_name": metric_name,
            "metric_source": metric_source,
            "values": values,
            "split_output": effective_split_output,
            "used_seeds": used_seeds,
            "stopped_by": stopped_by,
            "stability": stability.to_dict() if stability is not None else None,
        },
    )
    check_execution_matches(out, effective_split_output.splits.ids())
    return out


DEFAULT_PARAMS: Dict[str, Dict[str, Any]] = {
    "sequential": {},
    "joblib_local": {"n_jobs": 2, "backend": "loky"},
    "array_prepare": {"output_folder": "array_inputs", "results_dir": None},
    "adaptive_sequential": {
        "metric_name": "mse",
        "metric_source": "mse",
        "stability_strategy": "cohen_absolute",
        "threshold": 0.2,
        "window": 3,
        "min_splits": 5,
        "max_splits": 50,
        "custom_stability_function": None,
        "seed_base": 1000,
    },
}
