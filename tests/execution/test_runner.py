# tests/execution/test_runner.py
"""
Testes do runner externo e do ciclo completo de hand-off:

    array_prepare → runner (um por split) → prepare_resume → resume_workflow

Os runners são executados in-process, simulando tarefas de um array job
que terminam em ordem arbitrária.
"""

from dataclasses import replace

import pytest

from flowengine.core.config.errors import InvalidSplitParamsError
from flowengine.core.exceptions import LoadError
from flowengine.execution.runner import ARRAY_INDEX_ENV, main, resolve_split_id, run_split
from flowengine.persistence.result_store import FileResultStore, InMemoryResultStore
from flowengine.persistence.snapshot_store import SnapshotStore
from flowengine.resume.reconstructor import prepare_resume
from flowengine.workflow.orchestrator import resume_workflow


@pytest.fixture
def prepared(tmp_path, control, three_split_output):
    store = SnapshotStore(tmp_path / "array_inputs")
    store.dump(control=control, split_output=three_split_output)
    return store


def test_resolve_split_id_by_index_and_id(three_split_output):
    assert resolve_split_id(three_split_output, array_index=1) == "1"
    assert resolve_split_id(three_split_output, array_index=3) == "3"
    assert resolve_split_id(three_split_output, split_id="2") == "2"


@pytest.mark.parametrize(
    "kwargs",
    [{}, {"array_index": 0}, {"array_index": 4}, {"split_id": "9"}, {"split_id": "1", "array_index": 1}],
)
def test_resolve_split_id_rejects_invalid_selectors(three_split_output, kwargs):
    with pytest.raises(InvalidSplitParamsError):
        resolve_split_id(three_split_output, **kwargs)


def test_run_split_stores_result_under_split_id(prepared, registry):
    store = InMemoryResultStore()

    chosen = run_split(
        control_path=prepared.control_path,
        split_output_path=prepared.split_output_path,
        store=store,
        array_index=2,
        registry=registry,
    )

    assert chosen == "2"
    assert store.list_ids() == ["2"]
    assert store.get("2")["output_train"].model_type == "lm"


def test_run_split_without_snapshots_is_load_error(tmp_path):
    with pytest.raises(LoadError):
        run_split(
            control_path=tmp_path / "control_base.joblib",
            split_output_path=tmp_path / "split_output.joblib",
            store=tmp_path / "results",
            split_id="1",
        )


def test_runner_resume_round_trip(tmp_path, control, registry, dummy_ctx, sample_df):
    """
    Verifica o ciclo completo com um split ainda pendente.

    Invariantes:
        - cada runner grava apenas o seu próprio resultado
        - o Resume Object contém exatamente os splits concluídos
        - a continuação agrega somente os resultados presentes
    """
    folder = tmp_path / "array_inputs"
    ctl = control.with_engine("execution", "array_prepare")
    ctl = replace(ctl, params=dict(ctl.params, execution={"array_prepare": {"output_folder": str(folder)}}))

    split_output = registry.get("split", "cv").invoke(ctx=dummy_ctx, control=ctl)
    prep = registry.get("execution", "array_prepare").invoke(
        ctx=dummy_ctx, control=ctl, split_output=split_output, registry=registry
    )
    snapshots = prep.specific_output["snapshots"]
    results_dir = prep.specific_output["results_dir"]

    # fold2 ainda não terminou; fold3 termina antes de fold1
    for index in (3, 1):
        run_split(
            control_path=snapshots["control"],
            split_output_path=snapshots["split_output"],
            store=results_dir,
            array_index=index,
            registry=registry,
        )

    report = prepare_resume(snapshots["control"], snapshots["split_output"], results_dir, ctx=dummy_ctx)

    assert list(report.resume_object.workflow_results) == ["fold1", "fold3"]
    assert report.missing_ids == ["fold2"]

    output = resume_workflow(report, ctx=dummy_ctx)

    assert output.completed
    assert output.execution_output.execution_type == "external"
    assert set(output.aggregated_results) == {"mse", "summary_stats", "spd"}
    assert set(output.aggregated_results["mse"]) == {"mean", "sd", "min", "max"}


def test_main_uses_array_index_env(prepared, monkeypatch, capsys):
    monkeypatch.setenv(ARRAY_INDEX_ENV, "3")

    code = main(["--input-folder", str(prepared.output_folder)])

    assert code == 0
    assert capsys.readouterr().out.strip() == "3"
    assert FileResultStore(prepared.output_folder / "results").list_ids() == ["3"]


def test_main_with_explicit_split_id_and_results_dir(prepared, tmp_path, capsys):
    code = main(
        [
            "--input-folder", str(prepared.output_folder),
            "--results-dir", str(tmp_path / "out"),
            "--split-id", "1",
        ]
    )

    assert code == 0
    assert FileResultStore(tmp_path / "out").list_ids() == ["1"]


def test_main_without_selector_returns_usage_error(prepared, monkeypatch, capsys):
    monkeypatch.delenv(ARRAY_INDEX_ENV, raising=False)

    assert main(["--input-folder", str(prepared.output_folder)]) == 2
    assert ARRAY_INDEX_ENV in capsys.readouterr().err


def test_main_reports_errors_as_payload(tmp_path, capsys):
    code = main(["--input-folder", str(tmp_path / "missing"), "--split-id", "1"])

    assert code == 1
    assert "LOAD_ERROR" in capsys.readouterr().err


def test_main_rejects_non_numeric_array_index_env(prepared, monkeypatch, capsys):
    monkeypatch.setenv(ARRAY_INDEX_ENV, "abc")

    assert main(["--input-folder", str(prepared.output_folder)]) == 2
    assert "must be an integer" in capsys.readouterr().err
