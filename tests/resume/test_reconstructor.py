# tests/resume/test_reconstructor.py
"""
Testes do Resume Reconstructor.

Os testes asseguram que:
- resultados ausentes geram `MissingResultWarning` e são omitidos
- workflow_results ⊆ Split Map, na ordem do Split Map
- a reconstrução é idempotente e somente-leitura
- snapshots ausentes falham com LoadError
- resultados órfãos são ignorados e registrados como evento `info`

Cenário de referência:
    Split Map {"1", "2", "3"} com resultados apenas para "1" e "3"
    → workflow_results {"1", "3"} e um warning para "2".
"""

import pytest

from flowengine.core.exceptions import LoadError
from flowengine.core.pipeline.envelope import SplitEnvelope
from flowengine.persistence.result_store import FileResultStore, InMemoryResultStore
from flowengine.persistence.snapshot_store import SnapshotStore
from flowengine.resume.reconstructor import build_resume_object, default_metadata, prepare_resume
from flowengine.resume.types import MissingResultWarning


@pytest.fixture
def snapshots(tmp_path, control, three_split_output):
    store = SnapshotStore(tmp_path / "array_inputs")
    store.dump(control=control, split_output=three_split_output)
    return store


def test_missing_middle_split(tmp_path, snapshots, dummy_ctx):
    """
    Verifica o cenário {"1","2","3"} com resultados apenas para "1" e "3".

    Invariantes:
        - workflow_results contém exatamente "1" e "3"
        - existe exatamente um warning, para "2", com a localização esperada
        - o warning também é registrado no RunContext
    """
    results = FileResultStore(tmp_path / "results")
    results.put("1", {"output_eval": {"mse": 1.0}})
    results.put("3", {"output_eval": {"mse": 3.0}})

    report = prepare_resume(
        snapshots.control_path,
        snapshots.split_output_path,
        results,
        ctx=dummy_ctx,
    )

    assert list(report.resume_object.workflow_results) == ["1", "3"]
    assert report.warnings == (
        MissingResultWarning(split_id="2", location=results.location("2")),
    )
    assert report.missing_ids == ["2"]
    assert not report.is_complete
    assert len(dummy_ctx.warnings["resume"]) == 1
    assert report.resume_object.metadata == {}


def test_results_dir_path_is_accepted(tmp_path, snapshots):
    FileResultStore(tmp_path / "results").put("2", "two")

    report = prepare_resume(snapshots.control_path, snapshots.split_output_path, tmp_path / "results")

    assert list(report.resume_object.workflow_results) == ["2"]
    assert report.missing_ids == ["1", "3"]


@pytest.mark.parametrize("present", [[], ["2"], ["1", "3"], ["1", "2", "3"]])
def test_partial_completion_yields_n_of_k(control, three_split_output, present):
    store = InMemoryResultStore({sid: f"r{sid}" for sid in present})

    report = build_resume_object(control, three_split_output, store)

    assert sorted(report.resume_object.workflow_results) == present
    assert len(report.warnings) == 3 - len(present)
    assert report.is_complete == (len(present) == 3)


def test_reconstruction_is_idempotent(tmp_path, snapshots):
    results = FileResultStore(tmp_path / "results")
    results.put("1", {"v": 1})

    a = prepare_resume(snapshots.control_path, snapshots.split_output_path, results)
    b = prepare_resume(snapshots.control_path, snapshots.split_output_path, results)

    assert a.resume_object.workflow_results == b.resume_object.workflow_results
    assert a.warnings == b.warnings
    assert a.resume_object.split_output.splits.ids() == b.resume_object.split_output.splits.ids()
    assert results.list_ids() == ["1"]


def test_missing_snapshot_is_load_error(tmp_path, snapshots):
    snapshots.control_path.unlink()

    with pytest.raises(LoadError) as exc:
        prepare_resume(snapshots.control_path, snapshots.split_output_path, tmp_path / "results")

    assert exc.value.details["role"] == "control"


def test_stray_results_are_ignored_and_logged(control, three_split_output, dummy_ctx):
    store = InMemoryResultStore({"1": "a", "99": "stray"})

    report = build_resume_object(control, three_split_output, store, ctx=dummy_ctx)

    assert list(report.resume_object.workflow_results) == ["1"]
    stray_events = [e for e in dummy_ctx.events_for("resume") if e["message"] == "results outside the split map ignored"]
    assert stray_events[0]["level"] == "info"
    assert stray_events[0]["split_ids"] == ["99"]


def test_unreadable_result_becomes_warning(tmp_path, control, three_split_output, dummy_ctx):
    results = FileResultStore(tmp_path)
    results.put("1", "ok")
    (tmp_path / "result_split_2.joblib").write_bytes(b"corrupt")

    report = build_resume_object(control, three_split_output, results, ctx=dummy_ctx)

    assert list(report.resume_object.workflow_results) == ["1"]
    reasons = {w.split_id: w.reason for w in report.warnings}
    assert reasons == {"2": "unreadable", "3": "missing"}


def test_metadata_is_attached(control, three_split_output):
    meta = default_metadata("array_prepare")

    report = build_resume_object(control, three_split_output, InMemoryResultStore(), metadata=meta)

    assert report.resume_object.metadata["engine"] == "array_prepare"
    assert "timestamp" in report.resume_object.metadata


def test_warning_payload_is_non_fatal():
    payload = MissingResultWarning(split_id="2", location="x", reason="unreadable").to_payload()

    assert payload.fatal is False
    assert payload.details == {"split_id": "2", "location": "x", "reason": "unreadable"}


def test_path_like_split_ids_are_reported_as_missing(tmp_path, control, dummy_ctx):
    split_output = SplitEnvelope(split_type="userdefined", splits={"group/a": 1, "b": 2}, seed=1)
    results = FileResultStore(tmp_path)
    results.put("b", {"v": 2})

    report = build_resume_object(control, split_output, results, ctx=dummy_ctx)

    assert list(report.resume_object.workflow_results) == ["b"]
    assert [(w.split_id, w.reason) for w in report.warnings] == [("group/a", "missing")]
