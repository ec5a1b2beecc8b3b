"""Notifying views over plain JSON containers.

:func:`wrap` returns an :class:`ObservableDict` that reads exactly like the
dict it wraps. Nested dicts and lists come back as views too, all sharing one
:class:`ChangeNotifier`, so a mutation anywhere in the tree fires the same
coarse ``on_change()`` callback.

The callback runs *before* the mutation is applied and receives nothing
describing the change. Its return value is ignored: the mutation always
happens. The backing containers always stay plain ``dict``/``list`` objects,
so the whole tree can be handed to ``json.dumps`` as-is (see :func:`unwrap`).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, MutableMapping, MutableSequence
from typing import Any, SupportsIndex, overload

_logger = logging.getLogger(__name__)

ChangeCallback = Callable[[], object]

_MISSING = object()


class ChangeNotifier:
    """Observer list plus a monotonically increasing version counter."""

    def __init__(self) -> None:
        self._observers: list[ChangeCallback] = []
        self.version = 0

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register *callback*; returns a function that removes it again."""
        self._observers.append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: ChangeCallback) -> None:
        try:
            self._observers.remove(callback)
        except ValueError:
            pass

    def notify(self) -> None:
        self.version += 1
        for callback in list(self._observers):
            callback()


def unwrap(value: Any) -> Any:
    """Return the plain backing container of an observable view (or *value* itself)."""
    if isinstance(value, (ObservableDict, ObservableList)):
        return value._data
    return value


def _view(value: Any, notifier: ChangeNotifier) -> Any:
    if isinstance(value, dict):
        return ObservableDict(value, notifier)
    if isinstance(value, list):
        return ObservableList(value, notifier)
    return value


class ObservableDict(MutableMapping[str, Any]):
    """Mutable mapping view that notifies before every write."""

    __slots__ = ("_data", "_notifier")

    def __init__(self, data: dict[str, Any], notifier: ChangeNotifier) -> None:
        self._data = data
        self._notifier = notifier

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    def __getitem__(self, key: str) -> Any:
        return _view(self._data[key], self._notifier)

    def __setitem__(self, key: str, value: Any) -> None:
        self._notifier.notify()
        self._data[key] = unwrap(value)

    def __delitem__(self, key: str) -> None:
        if key not in self._data:
            raise KeyError(key)
        self._notifier.notify()
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __eq__(self, other: object) -> bool:
        return self._data == unwrap(other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def clear(self) -> None:
        if self._data:
            self._notifier.notify()
            self._data.clear()

    def pop(self, key: str, default: Any = _MISSING) -> Any:
        if key not in self._data:
            if default is _MISSING:
                raise KeyError(key)
            return default
        self._notifier.notify()
        return self._data.pop(key)

    def popitem(self) -> tuple[str, Any]:
        if not self._data:
            raise KeyError("popitem(): dictionary is empty")
        self._notifier.notify()
        return self._data.popitem()

    def setdefault(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            self[key] = default
        return self[key]

    def update(self, other: Any = (), /, **kwargs: Any) -> None:
        incoming = dict(other, **kwargs)
        if not incoming:
            return
        self._notifier.notify()
        self._data.update({k: unwrap(v) for k, v in incoming.items()})


class ObservableList(MutableSequence[Any]):
    """Mutable sequence view that notifies before every write.

    Slicing returns a detached plain list, like slicing a ``list`` does.
    """

    __slots__ = ("_data", "_notifier")

    def __init__(self, data: list[Any], notifier: ChangeNotifier) -> None:
        self._data = data
        self._notifier = notifier

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    @overload
    def __getitem__(self, index: SupportsIndex) -> Any: ...

    @overload
    def __getitem__(self, index: slice) -> list[Any]: ...

    def __getitem__(self, index: SupportsIndex | slice) -> Any:
        if isinstance(index, slice):
            return self._data[index]
        return _view(self._data[index], self._notifier)

    def __setitem__(self, index: Any, value: Any) -> None:
        if isinstance(index, slice):
            items = [unwrap(v) for v in value]
            self._notifier.notify()
            self._data[index] = items
            return
        self._data[index]  # IndexError before notifying
        self._notifier.notify()
        self._data[index] = unwrap(value)

    def __delitem__(self, index: Any) -> None:
        self._data[index]
        self._notifier.notify()
        del self._data[index]

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[Any]:
        for item in self._data:
            yield _view(item, self._notifier)

    def __contains__(self, value: object) -> bool:
        return unwrap(value) in self._data

    def __eq__(self, other: object) -> bool:
        return self._data == unwrap(other)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r})"

    def insert(self, index: int, value: Any) -> None:
        self._notifier.notify()
        self._data.insert(index, unwrap(value))

    def append(self, value: Any) -> None:
        self._notifier.notify()
        self._data.append(unwrap(value))

    def extend(self, values: Iterable[Any]) -> None:
        items = [unwrap(v) for v in values]
        if not items:
            return
        self._notifier.notify()
        self._data.extend(items)

    def __iadd__(self, values: Iterable[Any]) -> ObservableList:
        self.extend(values)
        return self

    def pop(self, index: int = -1) -> Any:
        self._data[index]
        self._notifier.notify()
        return self._data.pop(index)

    def clear(self) -> None:
        if self._data:
            self._notifier.notify()
            self._data.clear()

    def reverse(self) -> None:
        self._notifier.notify()
        self._data.reverse()

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        self._notifier.notify()
        self._data.sort(key=key, reverse=reverse)


def wrap(state: dict[str, Any], on_change: ChangeCallback) -> ObservableDict:
    """Return an observable view over *state* that calls *on_change* on every mutation.

    *state* itself is not copied; mutations through the view land in it.
    """
    notifier = ChangeNotifier()
    notifier.subscribe(on_change)
    _logger.debug("Observing state with %d top-level keys", len(state))
    return ObservableDict(state, notifier)
