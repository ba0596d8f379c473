"""
Tests for the utils module.
"""

import pytest

from atrail.utils import load_fixed_transitions, load_json, save_json


def test_json_roundtrip(tmp_path):
    path = str(tmp_path / "data.json")
    save_json(path, {"a": [1, 2]}, indent=2)
    assert load_json(path) == {"a": [1, 2]}


def test_load_fixed_transitions(tmp_path):
    path = str(tmp_path / "fixed.json")
    save_json(path, {"0": [[0, 1], [2, 3]], "5": [[0, 1]]})
    assert load_fixed_transitions(path) == {0: [(0, 1), (2, 3)], 5: [(0, 1)]}


def test_load_fixed_transitions_not_object(tmp_path):
    path = str(tmp_path / "fixed.json")
    save_json(path, [[0, 1]])
    with pytest.raises(ValueError, match="json object"):
        load_fixed_transitions(path)
