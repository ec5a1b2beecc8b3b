"""File-backed observable state store.

Ties the pieces of this package together::

    defaults --hydrate--> live dict --wrap--> ObservableDict
                                                  | every mutation
                                                  v
                                       DebouncedWriter.schedule()

The store is the single owner of both the in-memory state and its backing
file. Two stores pointed at the same file overwrite each other.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from bluetracker.state.merge import DEFAULT_MAX_DEPTH, hydrate
from bluetracker.state.observable import ObservableDict, wrap
from bluetracker.state.writer import DebouncedWriter

_logger = logging.getLogger(__name__)


class PersistentStore:
    """Observable state hydrated from, and written behind to, one JSON file.

    Usage::

        async with PersistentStore({"topics": []}, "state.json") as store:
            store.state["topics"].append({"id": 1, "post_number": 3})

    Leaving the ``async with`` block flushes pending changes to disk.
    """

    def __init__(
        self,
        defaults: dict[str, Any],
        path: str | os.PathLike[str],
        *,
        flush_delay: float = 0.0,
        max_merge_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._path = Path(path)
        data = hydrate(defaults, self._path, max_depth=max_merge_depth)
        self._data = data
        self._writer = DebouncedWriter(self._path, self._snapshot, delay=flush_delay)
        self._state = wrap(data, self._writer.schedule)

    async def __aenter__(self) -> PersistentStore:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.flush_and_wait()

    def _snapshot(self) -> dict[str, Any]:
        return self._data

    @property
    def state(self) -> ObservableDict:
        return self._state

    @property
    def path(self) -> Path:
        return self._path

    @property
    def writer(self) -> DebouncedWriter:
        return self._writer

    @property
    def version(self) -> int:
        """Number of mutations observed since the store was created."""
        return self._state.notifier.version

    def flush(self) -> None:
        self._writer.flush()

    async def flush_and_wait(self) -> None:
        """Make the current state durable before returning."""
        await self._writer.flush_and_wait()
        _logger.debug("State flushed to %s (version %d)", self._path, self.version)


def persist(
    defaults: dict[str, Any],
    path: str | os.PathLike[str],
    *,
    flush_delay: float = 0.0,
    max_merge_depth: int = DEFAULT_MAX_DEPTH,
) -> ObservableDict:
    """Hydrate *defaults* from *path* and return the live, self-persisting state.

    Shorthand for ``PersistentStore(...).state`` when the caller never needs
    to force a flush.
    """
    store = PersistentStore(defaults, path, flush_delay=flush_delay, max_merge_depth=max_merge_depth)
    return store.state
