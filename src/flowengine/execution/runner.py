# src/flowengine/execution/runner.py
"""
Runner externo de um split (hand-off do `array_prepare`).

Cada tarefa de um array job executa este runner uma vez:

    python -m flowengine.execution.runner --input-folder array_inputs \
        --results-dir array_inputs/results --array-index $SLURM_ARRAY_TASK_ID

O runner:
    1. carrega os snapshots de control e split output (somente leitura)
    2. seleciona o split por id (`--split-id`) ou por índice 1-based
       (`--array-index`, padrão `SLURM_ARRAY_TASK_ID`) na ordem do Split Map
    3. executa `run_workflow_single` uma única vez
    4. grava o resultado na Result Store sob o **id** do split

Runners não compartilham estado entre si; a ordem de conclusão é irrelevante.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Any, List, Optional, Union

from flowengine.core.config.errors import InvalidSplitParamsError
from flowengine.core.control import ControlObject
from flowengine.core.errors import exception_to_payload
from flowengine.core.pipeline.context import RunContext
from flowengine.core.pipeline.envelope import SplitEnvelope
from flowengine.core.pipeline.registry import EngineRegistry
from flowengine.persistence.result_store import FileResultStore, ResultStore
from flowengine.persistence.snapshot_store import CONTROL_FILE, SPLIT_OUTPUT_FILE, load_snapshot
from flowengine.workflow.single import run_workflow_single


ARRAY_INDEX_ENV = "SLURM_ARRAY_TASK_ID"


def resolve_split_id(
    split_output: SplitEnvelope,
    *,
    split_id: Optional[str] = None,
    array_index: Optional[int] = None,
) -> str:
    """
    Seleciona o split a executar.

    Raises:
        InvalidSplitParamsError: Nenhum seletor, ambos, id inexistente ou índice fora de 1..n.
    """
    ids = split_output.splits.ids()
    if (split_id is None) == (array_index is None):
        raise InvalidSplitParamsError("exactly one of split_id or array_index must be given")
    if split_id is not None:
        if split_id not in split_output.splits:
            raise InvalidSplitParamsError(f"unknown split id: {split_id!r} (available: {ids})")
        return split_id
    if not 1 <= int(array_index) <= len(ids):
        raise InvalidSplitParamsError(f"array index {array_index} out of range 1..{len(ids)}")
    return ids[int(array_index) - 1]


def run_split(
    *,
    control_path: Union[str, Path],
    split_output_path: Union[str, Path],
    store: Union[ResultStore, str, Path],
    split_id: Optional[str] = None,
    array_index: Optional[int] = None,
    registry: Optional[EngineRegistry] = None,
    ctx: Optional[RunContext] = None,
) -> str:
    """
    Executa um split a partir dos snapshots e persiste o resultado.

    Returns:
        str: Id do split executado.

    Raises:
        LoadError: Snapshot ausente ou ilegível.
        InvalidSplitParamsError: Seletor de split inválido.
    """
    control = load_snapshot(control_path, role="control", expected_type=ControlObject)
    split_output = load_snapshot(split_output_path, role="split_output", expected_type=SplitEnvelope)
    chosen = resolve_split_id(split_output, split_id=split_id, array_index=array_index)

    if isinstance(store, (str, Path)):
        store = FileResultStore(store)
    registry = registry or EngineRegistry.v1()
    ctx = ctx or RunContext.new(settings=control.settings, split_id=chosen)

    result = run_workflow_single(control, split_output.splits[chosen], registry, ctx=ctx, split_id=chosen)
    store.put(chosen, result)
    ctx.log(step_id="runner", level="info", message="split result stored", split_id=chosen, location=store.location(chosen))
    return chosen


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="flowengine.execution.runner",
        description="Run one split of a prepared array execution and store its result.",
    )
    p.add_argument("--input-folder", default="array_inputs", help="Folder with control_base/split_output snapshots.")
    p.add_argument("--results-dir", default=None, help="Result directory (default: <input-folder>/results).")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--split-id", default=None, help="Split id to run.")
    group.add_argument("--array-index", type=int, default=None, help=f"1-based split index (default: ${ARRAY_INDEX_ENV}).")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    array_index: Any = args.array_index
    if args.split_id is None and array_index is None:
        env_value = os.environ.get(ARRAY_INDEX_ENV)
        if env_value is None:
            print(f"error: pass --split-id, --array-index or set {ARRAY_INDEX_ENV}", file=sys.stderr)
            return 2
        try:
            array_index = int(env_value)
        except ValueError:
            print(f"error: {ARRAY_INDEX_ENV} must be an integer, got {env_value!r}", file=sys.stderr)
            return 2

    input_folder = Path(args.input_folder)
    results_dir = Path(args.results_dir) if args.results_dir else input_folder / "results"
    try:
        chosen = run_split(
            control_path=input_folder / CONTROL_FILE,
            split_output_path=input_folder / SPLIT_OUTPUT_FILE,
            store=results_dir,
            split_id=args.split_id,
            array_index=array_index,
        )
    except Exception as e:
        payload = exception_to_payload(e)
        print(f"error [{payload.type}]: {payload.message} {payload.details}", file=sys.stderr)
        return 1
    print(chosen)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
