# src/flowengine/workflow/orchestrator.py
"""
Orquestração split → execute → continue.

Funções públicas:
    - run_workflow(control, registry)   → workflow completo; retorna cedo quando
                                          o engine de execução adia o trabalho
                                          (`continue_workflow=False`)
    - continue_workflow(...)            → agrega resultados de uma execução
    - resume_workflow(resume_object)    → valida um Resume Object e continua

Uma continuação a partir de Resume Object usa um ExecutionEnvelope com
`execution_type="external"`; resultados parciais são aceitos (a agregação
usa apenas os splits presentes).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

from flowengine.core.config.errors import ConfigError
from flowengine.core.exceptions import ValidationError
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import ExecutionEnvelope, SplitEnvelope, check_execution_matches
from flowengine.core.pipeline.registry import EngineRegistry
from flowengine.core.pipeline.types import EngineCategory
from flowengine.resume.types import ResumeObject, ResumeReport
from flowengine.resume.validation import validate_resume_object

from .aggregate import aggregate_results


DEFAULT_EXECUTION_ENGINE = "sequential"


@dataclass(frozen=True, eq=False)
class WorkflowOutput:
    """
    Saída de um workflow.

    `aggregated_results` é `None` quando a execução foi adiada para um
    backend externo; nesse caso o workflow continua via `resume_workflow`.
    """

    split_output: SplitEnvelope
    execution_output: ExecutionEnvelope
    aggregated_results: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def completed(self) -> bool:
        return self.aggregated_results is not None


def continue_workflow(
    control: Any,
    split_output: SplitEnvelope,
    execution_output: ExecutionEnvelope,
    *,
    ctx: Optional[RunContext] = None,
) -> WorkflowOutput:
    ctx = ctx or RunContext.new(settings=control.settings)
    if execution_output.workflow_results is None:
        raise ValidationError(
            message="Execution output has no workflow results to continue from",
            details={"execution_type": execution_output.execution_type},
            hint="Reconstrua os resultados com prepare_resume e use resume_workflow.",
        )

    aggregated = aggregate_results(execution_output.workflow_results)
    ctx.log(
        step_id="workflow.continue",
        level="info",
        message="results aggregated",
        execution_type=execution_output.execution_type,
        n_results=len(execution_output.workflow_results),
        n_splits=len(split_output.splits),
        metrics=sorted(aggregated),
    )
    return WorkflowOutput(
        split_output=split_output,
        execution_output=execution_output,
        aggregated_results=aggregated,
        metadata=dict(execution_output.specific_output or {}),
    )


def run_workflow(
    control: Any,
    registry: Optional[EngineRegistry] = None,
    *,
    ctx: Optional[RunContext] = None,
) -> WorkflowOutput:
    """
    Executa split → execution → continuation.

    Raises:
        ConfigError: Nenhum engine de split selecionado, ou particionamento inválido.
        EngineNotFoundError: Engine selecionado não registrado.
        SchemaError: Resultados imediatos não cobrem exatamente os splits.
    """
    registry = registry or EngineRegistry.v1()
    ctx = ctx or RunContext.new(settings=control.settings)

    split_name = control.engine_for(EngineCategory.SPLIT)
    if split_name is None:
        raise ConfigError("no split engine selected (engines.split)")
    split_output = registry.get(EngineCategory.SPLIT, split_name).invoke(ctx=ctx, control=control)

    exec_name = control.engine_for(EngineCategory.EXECUTION) or DEFAULT_EXECUTION_ENGINE
    execution_output = registry.get(EngineCategory.EXECUTION, exec_name).invoke(
        ctx=ctx, control=control, split_output=split_output, registry=registry
    )
    adaptive_split = (execution_output.specific_output or {}).get("split_output")
    if isinstance(adaptive_split, SplitEnvelope):
        # engines adaptativos geram os próprios splits
        split_output = adaptive_split
    check_execution_matches(execution_output, split_output.splits.ids())

    if not execution_output.continue_workflow:
        ctx.log(
            step_id="workflow",
            level="info",
            message="execution deferred; resume after external runs",
            execution_type=execution_output.execution_type,
        )
        return WorkflowOutput(split_output=split_output, execution_output=execution_output)

    return continue_workflow(control, split_output, execution_output, ctx=ctx)


def resume_workflow(
    resume_object: Union[ResumeObject, ResumeReport, Mapping[str, Any]],
    *,
    ctx: Optional[RunContext] = None,
) -> WorkflowOutput:
    """
    Continua o workflow a partir de um Resume Object.

    Raises:
        ValidationError: Resume Object estruturalmente inválido.
    """
    if isinstance(resume_object, ResumeReport):
        resume_object = resume_object.resume_object
    resume = validate_resume_object(resume_object)

    execution_output = ExecutionEnvelope(
        execution_type="external",
        workflow_results=dict(resume.workflow_results),
        continue_workflow=True,
        specific_output=dict(resume.metadata) or None,
    )
    return continue_workflow(resume.control, resume.split_output, execution_output, ctx=ctx)
