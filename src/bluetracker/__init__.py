"""bluetracker - forward forum staff posts to webhooks, each exactly once."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("bluetracker")
except PackageNotFoundError:
    __version__ = "0+local"
from bluetracker.config import TrackerConfig
from bluetracker.dedup import DeliveryTracker
from bluetracker.exceptions import (
    DeliveryError,
    StatePersistenceError,
    TrackerConfigError,
    TrackerError,
    TrackerTransportError,
)
from bluetracker.models import LatestTopics, Post, Settings, TopicDetail, TopicSummary, TrackedPost, TrackedRecord
from bluetracker.notify import WebhookNotifier
from bluetracker.state import DebouncedWriter, PersistentStore, hydrate, merge_deep, persist, wrap
from bluetracker.tracker import BlueTracker, PassResult

__all__ = [
    "__version__",
    "BlueTracker",
    "DebouncedWriter",
    "DeliveryError",
    "DeliveryTracker",
    "LatestTopics",
    "PassResult",
    "PersistentStore",
    "Post",
    "Settings",
    "StatePersistenceError",
    "TopicDetail",
    "TopicSummary",
    "TrackedPost",
    "TrackedRecord",
    "TrackerConfig",
    "TrackerConfigError",
    "TrackerError",
    "TrackerTransportError",
    "WebhookNotifier",
    "hydrate",
    "merge_deep",
    "persist",
    "wrap",
]
