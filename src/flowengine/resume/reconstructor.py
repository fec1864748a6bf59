# src/flowengine/resume/reconstructor.py
"""
Resume Reconstructor — reconstrução do estado após execução externa.

Depois que os splits foram despachados para um backend externo (engine
`array_prepare` + runners), o Reconstructor carrega os snapshots de hand-off
e os resultados disponíveis e monta um Resume Object, tolerando lacunas.

Algoritmo:
    1. Carregar os snapshots de control e split output
       (ausente/ilegível/corrompido → `LoadError`, fatal)
    2. Percorrer os ids na ordem do Split Map, consultando a Result Store
    3. Resultado ausente → `MissingResultWarning` (o id é omitido); resultado
       ilegível → `MissingResultWarning(reason="unreadable")`
    4. Montar o Resume Object (metadata padrão: `{}`)
    5. Validar estruturalmente (`ValidationError`, fatal)

Garantias:
    - Idempotente: mesmas entradas → Resume Object estruturalmente equivalente
    - Somente leitura: nunca altera snapshots ou resultados
    - Passada única, sem retries (poll-and-reconstruct é responsabilidade do
      chamador, reinvocando `prepare_resume`)

Resultados "órfãos" (ids presentes na store mas ausentes do Split Map) não
entram no Resume Object e são apenas registrados no event log (`info`).
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from flowengine.core.control import ControlObject
from flowengine.core.exceptions import LoadError
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import SplitEnvelope
from flowengine.persistence.result_store import FileResultStore, ResultStore
from flowengine.persistence.snapshot_store import load_snapshot

from .types import MissingResultWarning, ResumeObject, ResumeReport
from .validation import validate_resume_object


STEP_ID = "resume"


def default_metadata(engine: str = "array_prepare") -> Dict[str, Any]:
    """Metadata convencional: engine que produziu os resultados + timestamp UTC."""
    return {"engine": engine, "timestamp": datetime.now(timezone.utc).isoformat()}


def _as_store(store: Union[ResultStore, str, Path]) -> ResultStore:
    if isinstance(store, (str, Path)):
        return FileResultStore(store)
    if not isinstance(store, ResultStore):
        raise TypeError(f"store must implement ResultStore, got {type(store).__name__}")
    return store


def build_resume_object(
    control: Any,
    split_output: Any,
    store: Union[ResultStore, str, Path],
    *,
    metadata: Optional[Mapping[str, Any]] = None,
    ctx: Optional[RunContext] = None,
) -> ResumeReport:
    """
    Etapas 2–5 do Reconstructor sobre control e split output já carregados.

    Raises:
        ValidationError: Resume Object estruturalmente inválido.
    """
    store = _as_store(store)
    ctx = ctx or RunContext.new(settings=getattr(control, "settings", None))

    splits = getattr(split_output, "splits", None) or {}
    workflow_results: Dict[str, Any] = {}
    warnings: List[MissingResultWarning] = []

    for split_id in splits:
        location = store.location(split_id)
        try:
            payload = store.get(split_id)
        except LoadError as e:
            warning = MissingResultWarning(split_id=split_id, location=location, reason="unreadable")
            ctx.log(step_id=STEP_ID, level="warn", message=str(warning), error=e.details)
        else:
            if payload is not None:
                workflow_results[split_id] = payload
                continue
            warning = MissingResultWarning(split_id=split_id, location=location)
            ctx.log(step_id=STEP_ID, level="warn", message=str(warning), split_id=split_id)
        warnings.append(warning)
        ctx.add_warning(step_id=STEP_ID, message=str(warning))

    stray = [i for i in store.list_ids() if i not in splits]
    if stray:
        ctx.log(step_id=STEP_ID, level="info", message="results outside the split map ignored", split_ids=stray)

    resume = validate_resume_object(
        ResumeObject(
            control=control,
            split_output=split_output,
            workflow_results=workflow_results,
            metadata=dict(metadata or {}),
        )
    )
    ctx.log(
        step_id=STEP_ID,
        level="info",
        message="resume object assembled",
        found=len(workflow_results),
        expected=len(splits),
    )
    return ResumeReport(resume_object=resume, warnings=tuple(warnings))


def prepare_resume(
    control_path: Union[str, Path],
    split_output_path: Union[str, Path],
    store: Union[ResultStore, str, Path],
    metadata: Optional[Mapping[str, Any]] = None,
    ctx: Optional[RunContext] = None,
) -> ResumeReport:
    """
    Reconstrói o Resume Object a partir dos snapshots persistidos.

    Args:
        control_path: Snapshot do Control Object (ex.: `control_base.joblib`).
        split_output_path: Snapshot do SplitEnvelope (ex.: `split_output.joblib`).
        store: Result Store, ou diretório de resultados (`FileResultStore`).
        metadata: Tags do Resume Object (padrão `{}`; ver `default_metadata`).
        ctx: RunContext para eventos e warnings (criado quando omitido).

    Returns:
        ResumeReport: Resume Object validado + `MissingResultWarning`s.

    Raises:
        LoadError: Snapshot ausente, ilegível ou corrompido.
        ValidationError: Resume Object estruturalmente inválido.
    """
    control = load_snapshot(control_path, role="control", expected_type=ControlObject)
    split_output = load_snapshot(split_output_path, role="split_output", expected_type=SplitEnvelope)
    return build_resume_object(control, split_output, store, metadata=metadata, ctx=ctx)
