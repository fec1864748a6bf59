# tests/persistence/test_snapshot_store.py
"""
Testes dos snapshots de hand-off (Control Object + split output).
"""

import pytest

from flowengine.core.control import ControlObject
from flowengine.core.exceptions import LoadError
from flowengine.core.pipeline.envelope import SplitEnvelope
from flowengine.persistence.snapshot_store import SnapshotStore, load_snapshot


def test_dump_writes_layout(tmp_path, control, three_split_output):
    store = SnapshotStore(tmp_path / "array_inputs")

    paths = store.dump(control=control, split_output=three_split_output)

    assert sorted(paths) == ["control", "n_splits", "split_output"]
    assert (tmp_path / "array_inputs" / "control_base.joblib").is_file()
    assert (tmp_path / "array_inputs" / "split_output.joblib").is_file()
    assert store.n_splits() == 3


def test_load_returns_typed_objects(tmp_path, control, three_split_output):
    store = SnapshotStore(tmp_path)
    store.dump(control=control, split_output=three_split_output)

    ctl, split_output = store.load()

    assert isinstance(ctl, ControlObject)
    assert isinstance(split_output, SplitEnvelope)
    assert split_output.splits.ids() == ["1", "2", "3"]
    assert ctl.vars == control.vars


def test_missing_snapshot_is_load_error(tmp_path):
    with pytest.raises(LoadError) as exc:
        load_snapshot(tmp_path / "control_base.joblib", role="control")

    assert exc.value.details["role"] == "control"
    assert exc.value.details["reason"] == "missing"


def test_corrupt_snapshot_is_load_error(tmp_path):
    path = tmp_path / "split_output.joblib"
    path.write_bytes(b"\x00garbage")

    with pytest.raises(LoadError) as exc:
        load_snapshot(path, role="split_output")

    assert exc.value.details["reason"].startswith("unreadable")


def test_snapshot_of_unexpected_type_is_load_error(tmp_path, three_split_output):
    store = SnapshotStore(tmp_path)
    # snapshots trocados: o split output no lugar do Control Object
    store.dump(control=three_split_output, split_output=three_split_output)

    with pytest.raises(LoadError) as exc:
        store.load()

    assert exc.value.details["reason"] == "unexpected type: SplitEnvelope"


def test_missing_n_splits_is_load_error(tmp_path):
    with pytest.raises(LoadError):
        SnapshotStore(tmp_path).n_splits()
