"""Debounced, write-behind JSON persistence.

Every call to :meth:`DebouncedWriter.schedule` restarts a single timer owned
by the writer. When the timer fires, the *whole* current state is serialized
and handed to a background task that replaces the backing file. A burst of
mutations inside one loop iteration therefore costs exactly one write, and
the file always ends up holding the state as it was after the last mutation
before an idle gap.

Writes are fire-and-forget: nobody awaits them and failures are logged, not
raised. Shutdown paths that need the final state on disk call
:meth:`DebouncedWriter.flush_and_wait`.
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import os
import tempfile
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

_logger = logging.getLogger(__name__)

_SaveError = (OSError, TypeError, ValueError)


def _dump(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def atomic_write_text(path: Path, text: str) -> None:
    """Replace *path* with *text* via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.remove(tmp_name)
        raise


class DebouncedWriter:
    """Coalesce change notifications into whole-state file writes.

    Parameters
    ----------
    path
        Backing file. Replaced entirely on every flush.
    snapshot
        Returns the JSON-serializable state to persist. Called when the
        timer fires, not when the change is scheduled.
    delay
        Debounce window in seconds. ``0`` means "next loop iteration".
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        snapshot: Callable[[], Any],
        *,
        delay: float = 0.0,
    ) -> None:
        self._path = Path(path)
        self._snapshot = snapshot
        self._delay = max(0.0, delay)
        self._timer: asyncio.TimerHandle | None = None
        self._last_write: asyncio.Task[None] | None = None
        self._dirty = False
        self._seq = 0
        self._written_seq = 0
        self._write_lock = threading.Lock()
        self.flush_count = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def dirty(self) -> bool:
        """True while the in-memory state has changes no write has picked up yet."""
        return self._dirty

    @property
    def pending(self) -> bool:
        """True while a flush timer is armed or a write is in flight."""
        if self._timer is not None:
            return True
        return self._last_write is not None and not self._last_write.done()

    def schedule(self) -> bool:
        """Mark the state dirty and (re)arm the flush timer.

        Without a running event loop nothing is scheduled; the change stays
        dirty until :meth:`flush` or the next scheduled flush. Always returns
        ``True`` so it can be used directly as a change callback.
        """
        self._dirty = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _logger.debug("No running event loop; %s stays dirty until flushed", self._path)
            return True
        self._timer = loop.call_later(self._delay, self._fire)
        return True

    def _serialize(self) -> tuple[int, str] | None:
        try:
            payload = _dump(self._snapshot())
        except (TypeError, ValueError):
            _logger.exception("State for %s is not JSON serializable", self._path)
            return None
        self._seq += 1
        return self._seq, payload

    def _fire(self) -> None:
        self._timer = None
        serialized = self._serialize()
        if serialized is None:
            return
        self._dirty = False
        previous = self._last_write
        loop = asyncio.get_running_loop()
        self._last_write = loop.create_task(self._write_after(previous, *serialized))

    async def _write_after(self, previous: asyncio.Task[None] | None, seq: int, payload: str) -> None:
        # Writes land in the order they were fired.
        if previous is not None and not previous.done():
            await asyncio.wait({previous})
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._write_file, seq, payload)
        except _SaveError:
            self._dirty = True
            _logger.warning("Failed to write state to %s", self._path, exc_info=True)

    def _write_file(self, seq: int, payload: str) -> None:
        # Background and synchronous writes may interleave; never replace a
        # newer snapshot with an older one.
        with self._write_lock:
            if seq <= self._written_seq:
                _logger.debug("Skipping superseded state write #%d for %s", seq, self._path)
                return
            atomic_write_text(self._path, payload)
            self._written_seq = seq
            self.flush_count += 1
        _logger.debug("Wrote %d bytes of state to %s", len(payload), self._path)

    def flush(self) -> None:
        """Write the current state synchronously if it is dirty."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if not self._dirty:
            return
        serialized = self._serialize()
        if serialized is None:
            return
        try:
            self._write_file(*serialized)
            self._dirty = False
        except _SaveError:
            _logger.warning("Failed to write state to %s", self._path, exc_info=True)

    async def wait_idle(self) -> None:
        """Wait until the armed timer (if any) has fired and its write finished."""
        while self._timer is not None:
            await asyncio.sleep(self._delay)
        write = self._last_write
        if write is not None and not write.done():
            await asyncio.wait({write})

    async def flush_and_wait(self) -> None:
        """Flush now instead of waiting for the timer, then wait for all writes."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if self._dirty:
            self._fire()
        await self.wait_idle()
