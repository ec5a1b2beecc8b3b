"""State/store layer.

This package is the single owner of the tracker's durable state: it hydrates
the persisted JSON document into caller defaults on startup, observes every
mutation of the live state, and writes the whole document back to disk
behind a debounce timer.
"""

from bluetracker.state.merge import hydrate, merge_deep
from bluetracker.state.observable import ObservableDict, ObservableList, unwrap, wrap
from bluetracker.state.store import PersistentStore, persist
from bluetracker.state.values import ValueKind, classify
from bluetracker.state.writer import DebouncedWriter

__all__ = [
    "DebouncedWriter",
    "ObservableDict",
    "ObservableList",
    "PersistentStore",
    "ValueKind",
    "classify",
    "hydrate",
    "merge_deep",
    "persist",
    "unwrap",
    "wrap",
]
