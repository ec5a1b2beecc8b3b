"""Tracker configuration for bluetracker."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from bluetracker._constants import BASE_URL, CATEGORY_PATH, DEFAULT_POLL_INTERVAL, DEFAULT_STATE_PATH
from bluetracker.exceptions import TrackerConfigError
from bluetracker.state.merge import DEFAULT_MAX_DEPTH


def _env_list(value: str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclasses.dataclass(frozen=True)
class TrackerConfig:
    """Tracker configuration.

    Parameters
    ----------
    state_path : str
        JSON file holding delivered records and settings.
    base_url : str
        Forum base URL, without trailing slash.
    category_path : str
        Category path below ``base_url`` whose latest topics are polled.
    poll_interval : float
        Seconds between two poll passes in :meth:`BlueTracker.run_forever`.
    flush_delay : float
        Debounce window of the state writer in seconds. ``0`` flushes on the
        next event loop iteration.
    max_merge_depth : int
        Recursion bound for hydrating the state file.
    max_records : int
        Delivery records kept after each pass (oldest are pruned).
        ``0`` keeps everything.
    request_timeout : float
        Total timeout for a single HTTP request in seconds.
    webhooks : tuple of str
        Webhook URLs added to the persisted settings on startup.
    """

    state_path: str = DEFAULT_STATE_PATH
    base_url: str = BASE_URL
    category_path: str = CATEGORY_PATH
    poll_interval: float = DEFAULT_POLL_INTERVAL
    flush_delay: float = 0.0
    max_merge_depth: int = DEFAULT_MAX_DEPTH
    max_records: int = 5000
    request_timeout: float = 30.0
    webhooks: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.base_url:
            raise TrackerConfigError("base_url must be set")
        if self.base_url.endswith("/"):
            object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        object.__setattr__(self, "category_path", self.category_path.strip("/"))
        if self.poll_interval <= 0:
            raise TrackerConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.flush_delay < 0:
            raise TrackerConfigError(f"flush_delay must not be negative, got {self.flush_delay}")
        if self.max_merge_depth < 1:
            raise TrackerConfigError(f"max_merge_depth must be at least 1, got {self.max_merge_depth}")
        if self.max_records < 0:
            raise TrackerConfigError(f"max_records must not be negative, got {self.max_records}")
        if self.request_timeout <= 0:
            raise TrackerConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        object.__setattr__(self, "webhooks", tuple(self.webhooks))

    @property
    def latest_url(self) -> str:
        return f"{self.base_url}/{self.category_path}/l/latest.json?ascending=false"

    def topic_url(self, topic_id: int) -> str:
        return f"{self.base_url}/t/{topic_id}.json?forceLoad=true"

    def posts_url(self, topic_id: int) -> str:
        return f"{self.base_url}/t/{topic_id}/posts.json"

    def post_link(self, slug: str, topic_id: int, post_number: int) -> str:
        return f"{self.base_url}/t/{slug or 'topic'}/{topic_id}/{post_number}"

    @classmethod
    def from_env(cls, **overrides: Any) -> TrackerConfig:
        """Create configuration from environment variables.

        Reads optional ``BLUETRACKER_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        TrackerConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "BLUETRACKER_STATE_PATH": "state_path",
            "BLUETRACKER_BASE_URL": "base_url",
            "BLUETRACKER_CATEGORY_PATH": "category_path",
        }
        _ENV_FLOAT_MAP = {
            "BLUETRACKER_POLL_INTERVAL": "poll_interval",
            "BLUETRACKER_FLUSH_DELAY": "flush_delay",
            "BLUETRACKER_REQUEST_TIMEOUT": "request_timeout",
        }
        _ENV_INT_MAP = {
            "BLUETRACKER_MAX_RECORDS": "max_records",
            "BLUETRACKER_MAX_MERGE_DEPTH": "max_merge_depth",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        try:
            for env_key, field_name in _ENV_FLOAT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = float(val)
            for env_key, field_name in _ENV_INT_MAP.items():
                val = env.get(env_key)
                if val is not None and field_name not in overrides:
                    config_kwargs[field_name] = int(val)
        except ValueError as exc:
            raise TrackerConfigError(f"Invalid numeric environment value: {exc}") from exc

        webhooks = _env_list(env.get("BLUETRACKER_WEBHOOKS"))
        if webhooks is not None and "webhooks" not in overrides:
            config_kwargs["webhooks"] = webhooks

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
