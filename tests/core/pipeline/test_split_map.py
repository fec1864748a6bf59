# tests/core/pipeline/test_split_map.py
"""
Testes do Split Map: ordem, unicidade e rejeição de mapas vazios.
"""

import pytest

from flowengine.core.config.errors import (
    ConfigError,
    DuplicateSplitIdError,
    EmptySplitMapError,
    InvalidSplitParamsError,
)
from flowengine.core.pipeline.split_map import SplitMap


def test_preserves_insertion_order():
    sm = SplitMap({"fold2": "b", "fold1": "a", "fold3": "c"})
    assert sm.ids() == ["fold2", "fold1", "fold3"]
    assert list(sm.items()) == [("fold2", "b"), ("fold1", "a"), ("fold3", "c")]


def test_single_split_is_valid():
    sm = SplitMap({"random": {"train": [], "test": []}})
    assert len(sm) == 1


def test_empty_split_map_is_config_error():
    with pytest.raises(EmptySplitMapError):
        SplitMap({})
    with pytest.raises(ConfigError):
        SplitMap([])


def test_duplicate_ids_from_pairs_are_rejected():
    with pytest.raises(DuplicateSplitIdError):
        SplitMap([("1", "a"), ("1", "b")])


@pytest.mark.parametrize("bad_id", ["", "   ", 1, None])
def test_invalid_ids_are_rejected(bad_id):
    with pytest.raises(InvalidSplitParamsError):
        SplitMap([(bad_id, "x")])


def test_split_map_is_read_only():
    sm = SplitMap({"1": "a"})
    with pytest.raises(TypeError):
        sm["2"] = "b"  # type: ignore[index]
