"""Tests for startup hydration and the deep-merge rules."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from bluetracker.exceptions import StatePersistenceError
from bluetracker.state.merge import hydrate, load_persisted, merge_deep
from bluetracker.state.observable import wrap
from bluetracker.state.values import ValueKind, classify

# ------------------------------------------------------------------
# classify
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        (None, ValueKind.SCALAR),
        (0, ValueKind.SCALAR),
        (True, ValueKind.SCALAR),
        ("text", ValueKind.SCALAR),
        ([1, 2], ValueKind.SEQUENCE),
        ((1, 2), ValueKind.SEQUENCE),
        ({"a": 1}, ValueKind.MAP),
    ],
)
def test_classify(value: Any, kind: ValueKind) -> None:
    assert classify(value) is kind


def test_classify_sees_through_observable_views() -> None:
    view = wrap({"xs": [], "m": {}}, lambda: True)
    assert classify(view) is ValueKind.MAP
    assert classify(view["xs"]) is ValueKind.SEQUENCE
    assert classify(view["m"]) is ValueKind.MAP


# ------------------------------------------------------------------
# merge_deep
# ------------------------------------------------------------------


def test_scalar_is_overwritten() -> None:
    assert merge_deep({"a": 1}, {"a": 2}) == {"a": 2}


def test_sequence_is_appended_not_replaced() -> None:
    assert merge_deep({"xs": [1]}, {"xs": [2, 3]}) == {"xs": [1, 2, 3]}


def test_unknown_key_is_assigned_wholesale() -> None:
    nested = {"c": 1}
    target: dict[str, Any] = {}

    merge_deep(target, {"b": nested})

    assert target == {"b": {"c": 1}}
    assert target["b"] is nested


def test_maps_merge_recursively() -> None:
    target = {"m": {"a": 1, "b": 2}}
    merge_deep(target, {"m": {"b": 3, "c": 4}})
    assert target == {"m": {"a": 1, "b": 3, "c": 4}}


def test_null_default_is_a_scalar() -> None:
    target: dict[str, Any] = {"a": None}
    merge_deep(target, {"a": {"x": 1}})
    assert target == {"a": {"x": 1}}


def test_merge_is_destructive_and_returns_target() -> None:
    target = {"a": 1}
    assert merge_deep(target, {"a": 5}) is target
    assert target["a"] == 5


def test_type_mismatch_keeps_default() -> None:
    target: dict[str, Any] = {"xs": [], "m": {"k": 1}}
    merge_deep(target, {"xs": "not-a-list", "m": 7})
    assert target == {"xs": [], "m": {"k": 1}}


def _nested(depth: int, leaf: str) -> dict[str, Any]:
    node: dict[str, Any] = {"leaf": leaf}
    for _ in range(depth):
        node = {"child": node, "leaf": leaf}
    return node


def test_deep_structures_stop_at_depth_bound() -> None:
    target = _nested(200, "default")
    source = _nested(200, "persisted")

    result = merge_deep(target, source)

    assert result is target
    node = target
    for _ in range(50):
        assert node["leaf"] == "persisted"
        node = node["child"]
    # Beyond the bound the defaults are left alone.
    assert node["leaf"] == "default"


def test_custom_depth_only_merges_top_level() -> None:
    target = {"a": 1, "m": {"b": 1}}
    merge_deep(target, {"a": 2, "m": {"b": 2}}, depth=1)
    assert target == {"a": 2, "m": {"b": 1}}


def test_zero_depth_is_a_no_op() -> None:
    target = {"a": 1}
    merge_deep(target, {"a": 2}, depth=0)
    assert target == {"a": 1}


# ------------------------------------------------------------------
# hydrate / load_persisted
# ------------------------------------------------------------------


def test_hydrate_missing_file_returns_defaults(tmp_path: Path) -> None:
    defaults = {"topics": [], "n": 1}
    result = hydrate(defaults, tmp_path / "missing.json")
    assert result is defaults
    assert result == {"topics": [], "n": 1}


@pytest.mark.parametrize(
    "content",
    [
        b"{not json",
        b"[1, 2, 3]",
        b'"just a string"',
        b"\xff\xfe\x00garbage",
        b"",
    ],
)
def test_hydrate_corrupt_file_returns_defaults(tmp_path: Path, content: bytes) -> None:
    path = tmp_path / "state.json"
    path.write_bytes(content)

    defaults = {"topics": [], "n": 1}
    assert hydrate(defaults, path) == {"topics": [], "n": 1}


def test_hydrate_merges_persisted_document(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"topics": [{"id": 1, "post_number": 2}], "n": 5, "extra": {"k": "v"}}', encoding="utf-8")

    result = hydrate({"topics": [], "n": 1}, path)

    assert result == {"topics": [{"id": 1, "post_number": 2}], "n": 5, "extra": {"k": "v"}}


def test_hydrate_honours_max_depth(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    path.write_text('{"m": {"inner": 2}}', encoding="utf-8")

    result = hydrate({"m": {"inner": 1}}, path, max_depth=1)

    assert result == {"m": {"inner": 1}}


def test_hydrate_survives_a_deeply_nested_file(tmp_path: Path) -> None:
    path = tmp_path / "state.json"
    depth = 100_000
    path.write_text('{"x": ' + "[" * depth + "]" * depth + "}", encoding="utf-8")

    defaults = {"topics": []}
    assert hydrate(defaults, path) is defaults
    assert defaults == {"topics": []}

    with pytest.raises(StatePersistenceError, match="nested too deeply"):
        load_persisted(path)


def test_load_persisted_raises_typed_error(tmp_path: Path) -> None:
    with pytest.raises(StatePersistenceError):
        load_persisted(tmp_path / "missing.json")

    path = tmp_path / "state.json"
    path.write_text("[]", encoding="utf-8")
    with pytest.raises(StatePersistenceError, match="JSON object"):
        load_persisted(path)
