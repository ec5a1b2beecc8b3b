from __future__ import annotations

import json
from typing import Any

import pytest

from bluetracker.state.observable import ObservableDict, ObservableList, unwrap, wrap


class _Counter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> bool:
        self.calls += 1
        return True


def _make(data: dict[str, Any]) -> tuple[ObservableDict, _Counter]:
    counter = _Counter()
    return wrap(data, counter), counter


# ------------------------------------------------------------------
# Reads
# ------------------------------------------------------------------


def test_reads_behave_like_the_wrapped_dict() -> None:
    data = {"a": 1, "xs": [1, 2], "m": {"k": "v"}}
    view, counter = _make(data)

    assert view == data
    assert len(view) == 3
    assert list(view) == ["a", "xs", "m"]
    assert view["a"] == 1
    assert view.get("missing") is None
    assert "xs" in view
    assert view["xs"] == [1, 2]
    assert list(view["xs"]) == [1, 2]
    assert 2 in view["xs"]
    assert view["m"]["k"] == "v"
    assert dict(view.items())["a"] == 1
    assert counter.calls == 0


def test_nested_containers_come_back_as_views() -> None:
    view, _ = _make({"xs": [{"id": 1}], "m": {"inner": {}}})

    assert isinstance(view["xs"], ObservableList)
    assert isinstance(view["xs"][0], ObservableDict)
    assert isinstance(view["m"]["inner"], ObservableDict)


def test_slices_are_detached_plain_lists() -> None:
    data = {"xs": [1, 2, 3]}
    view, counter = _make(data)

    part = view["xs"][:2]
    part.append(99)

    assert type(part) is list
    assert data["xs"] == [1, 2, 3]
    assert counter.calls == 0


# ------------------------------------------------------------------
# Writes
# ------------------------------------------------------------------


def test_nested_mutation_is_observed() -> None:
    data: dict[str, Any] = {"topics": [], "m": {"inner": {"n": 1}}}
    view, counter = _make(data)

    view["topics"].append({"id": 1, "post_number": 2})
    view["m"]["inner"]["n"] = 2
    view["topics"][0]["post_number"] = 3

    assert counter.calls == 3
    assert data == {"topics": [{"id": 1, "post_number": 3}], "m": {"inner": {"n": 2}}}


def test_callback_runs_before_the_mutation() -> None:
    data = {"n": 1}
    seen: list[int] = []
    view = wrap(data, lambda: seen.append(data["n"]))

    view["n"] = 2

    assert seen == [1]
    assert data["n"] == 2


def test_falsy_callback_result_does_not_veto() -> None:
    data: dict[str, Any] = {}
    view = wrap(data, lambda: False)

    view["x"] = 1

    assert data == {"x": 1}


@pytest.mark.parametrize(
    "mutate",
    [
        lambda v: v.__setitem__("a", 2),
        lambda v: v.__delitem__("a"),
        lambda v: v.pop("a"),
        lambda v: v.popitem(),
        lambda v: v.update({"b": 1}),
        lambda v: v.clear(),
        lambda v: v["xs"].append(4),
        lambda v: v["xs"].extend([4, 5]),
        lambda v: v["xs"].insert(0, 0),
        lambda v: v["xs"].pop(),
        lambda v: v["xs"].remove(2),
        lambda v: v["xs"].__delitem__(slice(0, 2)),
        lambda v: v["xs"].__setitem__(0, 9),
        lambda v: v["xs"].sort(reverse=True),
        lambda v: v["xs"].reverse(),
        lambda v: v["xs"].clear(),
    ],
)
def test_every_mutation_notifies_once(mutate: Any) -> None:
    view, counter = _make({"a": 1, "xs": [1, 2, 3]})
    mutate(view)
    assert counter.calls == 1


def test_iadd_on_nested_list_notifies() -> None:
    data = {"xs": [1]}
    view, counter = _make(data)

    xs = view["xs"]
    xs += [2, 3]

    assert data["xs"] == [1, 2, 3]
    assert counter.calls == 1


def test_failed_mutations_do_not_notify() -> None:
    view, counter = _make({"xs": []})

    with pytest.raises(KeyError):
        del view["missing"]
    with pytest.raises(KeyError):
        view.pop("missing")
    with pytest.raises(IndexError):
        view["xs"].pop()
    with pytest.raises(IndexError):
        view["xs"][3] = 1

    assert view.pop("missing", "fallback") == "fallback"
    assert counter.calls == 0


def test_setdefault_returns_an_observed_view() -> None:
    data: dict[str, Any] = {}
    view, counter = _make(data)

    view.setdefault("topics", []).append({"id": 1})
    view.setdefault("topics", []).append({"id": 2})

    assert data == {"topics": [{"id": 1}, {"id": 2}]}
    assert counter.calls == 3


def test_assigned_views_are_stored_as_plain_data() -> None:
    data: dict[str, Any] = {"a": {"k": 1}}
    view, _ = _make(data)

    view["b"] = view["a"]

    assert type(data["b"]) is dict
    assert json.dumps(unwrap(view)) == '{"a": {"k": 1}, "b": {"k": 1}}'


def test_version_counter_and_unsubscribe() -> None:
    view, counter = _make({"n": 0})
    notifier = view.notifier

    view["n"] = 1
    view["n"] = 2
    assert notifier.version == 2

    notifier.unsubscribe(counter)
    view["n"] = 3
    assert counter.calls == 2
    assert notifier.version == 3

    extra = _Counter()
    remove = notifier.subscribe(extra)
    view["n"] = 4
    remove()
    view["n"] = 5
    assert extra.calls == 1
