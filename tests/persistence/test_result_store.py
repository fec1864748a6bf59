# tests/persistence/test_result_store.py
"""
Testes das Result Stores (filesystem e memória).

Os testes asseguram que:
- resultados são endereçados por split id (`result_split_<id>.joblib`)
- `get` devolve None para resultados ausentes (nunca levanta)
- arquivos corrompidos falham com LoadError
- ids vazios são rejeitados; ids com separadores de caminho são codificados
"""

import pytest

from flowengine.core.config.errors import InvalidSplitParamsError
from flowengine.core.exceptions import LoadError
from flowengine.persistence.result_store import FileResultStore, InMemoryResultStore, ResultStore


def test_file_store_roundtrip_and_addressing(tmp_path):
    store = FileResultStore(tmp_path / "results")

    store.put("fold1", {"output_eval": {"mse": 0.25}})

    assert (tmp_path / "results" / "result_split_fold1.joblib").is_file()
    assert store.location("fold1").endswith("result_split_fold1.joblib")
    assert store.get("fold1") == {"output_eval": {"mse": 0.25}}


def test_file_store_missing_result_is_none(tmp_path):
    store = FileResultStore(tmp_path / "never_created")

    assert store.get("2") is None
    assert store.list_ids() == []


def test_file_store_put_overwrites(tmp_path):
    store = FileResultStore(tmp_path)
    store.put("1", "first")
    store.put("1", "second")

    assert store.get("1") == "second"
    assert store.list_ids() == ["1"]


def test_file_store_list_ids_ignores_unrelated_files(tmp_path):
    store = FileResultStore(tmp_path)
    store.put("3", 3)
    store.put("1", 1)
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    (tmp_path / ".tmp_abc.joblib").write_bytes(b"")

    assert store.list_ids() == ["1", "3"]


def test_file_store_corrupt_result_is_load_error(tmp_path):
    store = FileResultStore(tmp_path)
    (tmp_path / "result_split_1.joblib").write_bytes(b"not a joblib file")

    with pytest.raises(LoadError) as exc:
        store.get("1")

    assert exc.value.details["split_id"] == "1"


@pytest.mark.parametrize("bad_id", ["", "   ", 3, None])
def test_invalid_ids_are_rejected(tmp_path, bad_id):
    with pytest.raises(InvalidSplitParamsError):
        FileResultStore(tmp_path).put(bad_id, 1)


def test_none_payload_is_rejected(tmp_path):
    with pytest.raises(ValueError):
        FileResultStore(tmp_path).put("1", None)
    with pytest.raises(ValueError):
        InMemoryResultStore().put("1", None)


def test_in_memory_store_contract():
    store = InMemoryResultStore({"1": "a"})
    store.put("3", "c")

    assert store.get("1") == "a"
    assert store.get("2") is None
    assert store.list_ids() == ["1", "3"]
    assert store.location("3") == "memory://3"


def test_both_stores_satisfy_protocol(tmp_path):
    assert isinstance(FileResultStore(tmp_path), ResultStore)
    assert isinstance(InMemoryResultStore(), ResultStore)


@pytest.mark.parametrize("split_id", ["group/a", "a\\b", "..", "50%"])
def test_file_store_encodes_path_like_ids(tmp_path, split_id):
    store = FileResultStore(tmp_path)
    store.put(split_id, {"id": split_id})

    assert store.path_for(split_id).parent == tmp_path
    assert store.get(split_id) == {"id": split_id}
    assert store.list_ids() == [split_id]
