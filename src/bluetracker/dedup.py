"""At-most-once delivery tracking on top of the persistent state.

Delivered posts are recorded as ``{"id": topic_id, "post_number": n}`` dicts
in an append-only list inside the state (``state["topics"]`` by default).
Because the state is observable, recording a delivery is all it takes to
get it written to disk.

Batch policy: items are delivered in the order given. A delivery that raises
aborts the rest of the batch. The failing item is not recorded, items before
it are, and everything unrecorded is picked up again on the next pass.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, MutableMapping, Sequence
from typing import Any, TypeVar

from pydantic import ValidationError

from bluetracker.models.records import TrackedRecord
from bluetracker.state.observable import unwrap

_logger = logging.getLogger(__name__)

T = TypeVar("T")

RECORDS_KEY = "topics"


class DeliveryTracker:
    """Decide, from persisted history, whether a post still needs delivering."""

    def __init__(self, state: MutableMapping[str, Any], *, key: str = RECORDS_KEY) -> None:
        self._state = state
        self._key = key
        self._malformed_reported = 0

    def records(self) -> list[TrackedRecord]:
        """All well-formed records, oldest first.

        Malformed entries are skipped. They are reported at WARNING only when
        their count changes, so a steady poll loop logs them once.
        """
        parsed: list[TrackedRecord] = []
        skipped = 0
        for raw in unwrap(self._state.get(self._key)) or []:
            try:
                parsed.append(TrackedRecord.model_validate(raw))
            except ValidationError:
                skipped += 1
        if skipped and skipped != self._malformed_reported:
            _logger.warning("Ignoring %d malformed delivery records under %r", skipped, self._key)
        elif skipped:
            _logger.debug("Ignoring %d malformed delivery records under %r", skipped, self._key)
        self._malformed_reported = skipped
        return parsed

    def delivered(self) -> set[tuple[int, int]]:
        return {(record.id, record.post_number) for record in self.records()}

    def should_deliver(self, topic_id: int, post_number: int) -> bool:
        return (topic_id, post_number) not in self.delivered()

    def mark_delivered(self, topic_id: int, post_number: int) -> None:
        record = TrackedRecord(id=topic_id, post_number=post_number)
        self._state.setdefault(self._key, []).append(record.model_dump())
        _logger.debug("Marked topic=%s post=%s delivered", topic_id, post_number)

    def pending(self, topic_id: int, post_numbers: Iterable[int]) -> list[int]:
        """Filter *post_numbers* down to those not delivered yet, keeping order."""
        seen = self.delivered()
        result: list[int] = []
        for number in post_numbers:
            if (topic_id, number) in seen:
                continue
            seen.add((topic_id, number))
            result.append(number)
        return result

    async def process_batch(
        self,
        topic_id: int,
        items: Sequence[T],
        deliver: Callable[[T], Awaitable[object]],
        *,
        post_number: Callable[[T], int],
    ) -> list[T]:
        """Deliver every not-yet-delivered item of one topic, recording each.

        Returns the items delivered in this call. An exception from *deliver*
        propagates after recording everything delivered before it.
        """
        seen = self.delivered()
        delivered: list[T] = []
        for item in items:
            number = post_number(item)
            if (topic_id, number) in seen:
                continue
            await deliver(item)
            self.mark_delivered(topic_id, number)
            seen.add((topic_id, number))
            delivered.append(item)
        return delivered

    def compact(self, max_records: int) -> int:
        """Keep only the newest *max_records* records; returns how many were dropped.

        ``max_records <= 0`` disables pruning.
        """
        if max_records <= 0:
            return 0
        records = self._state.get(self._key)
        if records is None:
            return 0
        excess = len(records) - max_records
        if excess <= 0:
            return 0
        del records[:excess]
        _logger.info("Pruned %d oldest delivery records (keeping %d)", excess, max_records)
        return excess


def should_deliver(topic_id: int, post_number: int, state: MutableMapping[str, Any]) -> bool:
    return DeliveryTracker(state).should_deliver(topic_id, post_number)


def mark_delivered(topic_id: int, post_number: int, state: MutableMapping[str, Any]) -> None:
    DeliveryTracker(state).mark_delivered(topic_id, post_number)
