"""Startup hydration: merge the last persisted state into caller defaults.

Merge rules, applied per key of the persisted document:

- key missing from the defaults: the persisted value is taken as-is
- defaults hold a sequence: persisted elements are appended to it
- defaults hold a mapping: merge recursively (bounded depth)
- defaults hold a scalar (including ``None``): the persisted value wins

Sequences grow on every hydration. Defaults must therefore carry *empty*
sequences for any key fed by persisted history, otherwise the default
entries get duplicated on each restart.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping, MutableMapping
from pathlib import Path
from typing import Any

from bluetracker.exceptions import StatePersistenceError
from bluetracker.state.values import ValueKind, classify

_logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50


def merge_deep(
    target: MutableMapping[str, Any],
    source: Mapping[str, Any],
    depth: int = DEFAULT_MAX_DEPTH,
) -> MutableMapping[str, Any]:
    """Merge *source* into *target* in place and return *target*.

    *depth* only guards against runaway recursion; once it reaches zero the
    remaining subtree of *source* is ignored.
    """
    if depth <= 0:
        return target

    for key, incoming in source.items():
        if key not in target:
            target[key] = incoming
            continue

        kind = classify(target[key])
        if kind is ValueKind.SEQUENCE:
            if classify(incoming) is not ValueKind.SEQUENCE:
                _logger.warning("Persisted %r is not a list; keeping default", key)
                continue
            target[key].extend(incoming)
        elif kind is ValueKind.MAP:
            if classify(incoming) is not ValueKind.MAP:
                _logger.warning("Persisted %r is not an object; keeping default", key)
                continue
            merge_deep(target[key], incoming, depth - 1)
        else:
            target[key] = incoming
    return target


def load_persisted(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Read and decode the state document at *path*.

    Raises :class:`StatePersistenceError` for every failure mode (missing,
    unreadable, not JSON, nested beyond the decoder's recursion limit, not a
    JSON object).
    """
    file_path = Path(path)
    try:
        blob = file_path.read_bytes()
    except FileNotFoundError as exc:
        raise StatePersistenceError(f"No state file at {file_path}") from exc
    except OSError as exc:
        raise StatePersistenceError(f"Cannot read state file {file_path}: {exc}") from exc

    try:
        data = json.loads(blob.decode("utf-8"))
    except ValueError as exc:
        raise StatePersistenceError(f"State file {file_path} is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise StatePersistenceError(f"State file {file_path} is nested too deeply to decode") from exc

    if not isinstance(data, dict):
        raise StatePersistenceError(f"State file {file_path} does not hold a JSON object")
    return data


def hydrate(
    defaults: MutableMapping[str, Any],
    path: str | os.PathLike[str],
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> MutableMapping[str, Any]:
    """Return *defaults* with the persisted state at *path* merged into it.

    A missing or corrupt file is not an error: *defaults* is returned
    untouched. The merge is destructive on *defaults*.
    """
    try:
        persisted = load_persisted(path)
    except StatePersistenceError as exc:
        if isinstance(exc.__cause__, FileNotFoundError):
            _logger.debug("%s; starting from defaults", exc)
        else:
            _logger.warning("%s; starting from defaults", exc)
        return defaults

    _logger.debug("Hydrating state from %s (%d top-level keys)", path, len(persisted))
    return merge_deep(defaults, persisted, max_depth)
