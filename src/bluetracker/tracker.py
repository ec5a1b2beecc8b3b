"""High-level async tracker: poll the forum, deliver new tracked posts once."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from bluetracker._api.topics import fetch_all_posts, fetch_latest, fetch_topic, resolve_tracked_posts
from bluetracker._transport import HttpTransport, Transport
from bluetracker.config import TrackerConfig
from bluetracker.dedup import RECORDS_KEY, DeliveryTracker
from bluetracker.exceptions import TrackerError
from bluetracker.models.forum import Post
from bluetracker.models.records import Settings
from bluetracker.notify import WebhookNotifier
from bluetracker.state.observable import unwrap
from bluetracker.state.store import PersistentStore

_logger = logging.getLogger(__name__)

WEBHOOKS_KEY = "webhooks"


def default_state() -> dict[str, Any]:
    """Fresh defaults for the tracker state file.

    Both lists must start empty: hydration appends persisted entries to them.
    """
    return {RECORDS_KEY: [], WEBHOOKS_KEY: []}


@dataclass(slots=True)
class PassResult:
    """Outcome of one :meth:`BlueTracker.poll_once` pass."""

    topics_checked: int = 0
    delivered: int = 0
    failed_topics: list[int] = field(default_factory=list)
    pruned: int = 0


class BlueTracker:
    """Async tracker for staff ("blue") posts of one forum category.

    Usage::

        async with BlueTracker(TrackerConfig.from_env()) as tracker:
            await tracker.run_forever()
    """

    def __init__(
        self,
        config: TrackerConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        store: PersistentStore | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        if store is None:
            store = PersistentStore(
                default_state(),
                config.state_path,
                flush_delay=config.flush_delay,
                max_merge_depth=config.max_merge_depth,
            )
        self._store = store
        self._dedup = DeliveryTracker(store.state)
        # Tracked post numbers that could not be loaded, per topic. In memory only,
        # so a restart checks them once more.
        self._unresolved: dict[int, set[int]] = {}
        for url in config.webhooks:
            self.add_webhook(url)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> BlueTracker:
        if self._transport is None:
            if self._http_session is None:
                timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
                self._http_session = aiohttp.ClientSession(timeout=timeout)
            self._transport = HttpTransport(self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self._store.flush_and_wait()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def store(self) -> PersistentStore:
        return self._store

    @property
    def dedup(self) -> DeliveryTracker:
        return self._dedup

    @property
    def settings(self) -> Settings:
        return Settings.model_validate({"webhooks": unwrap(self._store.state.get(WEBHOOKS_KEY)) or []})

    def add_webhook(self, url: str) -> bool:
        """Persist *url* as a delivery endpoint; returns False if it was already there."""
        url = url.strip()
        hooks = self._store.state.setdefault(WEBHOOKS_KEY, [])
        if not url or url in hooks:
            return False
        hooks.append(url)
        return True

    def remove_webhook(self, url: str) -> bool:
        hooks = self._store.state.get(WEBHOOKS_KEY)
        if hooks is None or url not in hooks:
            return False
        hooks.remove(url)
        return True

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise TrackerError("Tracker not initialized. Use 'async with BlueTracker(...) as tracker:'")
        return self._transport

    def _notifier(self) -> WebhookNotifier:
        return WebhookNotifier(self._config, self._require_transport(), lambda: self.settings.webhooks)

    async def process_topic(self, topic_id: int) -> list[Post]:
        """Deliver the not-yet-delivered tracked posts of one topic.

        Posts are delivered in ``tracked_posts`` order. A delivery failure
        propagates and leaves the failing post (and the ones after it) for
        the next pass.

        Tracked posts the forum no longer returns are remembered and not
        fetched again by this tracker.
        """
        transport = self._require_transport()
        topic = await fetch_topic(self._config, transport, topic_id)
        unresolved = self._unresolved.get(topic.id, set())
        numbers = [
            number
            for number in self._dedup.pending(topic.id, [tracked.post_number for tracked in topic.tracked_posts])
            if number not in unresolved
        ]
        if not numbers:
            return []

        posts = await fetch_all_posts(self._config, transport, topic)
        candidates = resolve_tracked_posts(topic, posts, numbers)
        missing = set(numbers).difference(post.post_number for post in candidates)
        if missing:
            _logger.info("Topic %s: giving up on missing tracked posts %s", topic.id, sorted(missing))
            self._unresolved.setdefault(topic.id, set()).update(missing)
        notifier = self._notifier()
        return await self._dedup.process_batch(
            topic.id,
            candidates,
            notifier.send,
            post_number=lambda post: post.post_number,
        )

    async def poll_once(self) -> PassResult:
        """Run one pass over the latest topics of the category."""
        transport = self._require_transport()
        latest = await fetch_latest(self._config, transport)
        result = PassResult()

        for summary in latest.tracked():
            result.topics_checked += 1
            try:
                delivered = await self.process_topic(summary.id)
            except TrackerError as exc:
                _logger.warning("Topic %s failed: %s", summary.id, exc)
                result.failed_topics.append(summary.id)
                continue
            result.delivered += len(delivered)

        result.pruned = self._dedup.compact(self._config.max_records)
        _logger.info(
            "Pass done: %d topics checked, %d posts delivered, %d topics failed",
            result.topics_checked,
            result.delivered,
            len(result.failed_topics),
        )
        return result

    async def run_forever(self, stop: asyncio.Event | None = None) -> None:
        """Poll every ``config.poll_interval`` seconds until *stop* is set."""
        stop = stop or asyncio.Event()
        while not stop.is_set():
            try:
                await self.poll_once()
            except TrackerError:
                _logger.warning("Poll pass failed", exc_info=True)
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop.wait(), self._config.poll_interval)
