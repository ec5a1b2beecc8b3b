"""Webhook delivery of tracked posts.

Each post becomes one Discord-style embed, POSTed to every configured
webhook. A webhook that fails is logged and skipped; only when *every*
webhook fails does :meth:`WebhookNotifier.send` raise, so the post stays
undelivered and is retried on the next pass without re-posting to hooks that
already accepted it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Sequence
from typing import Any

from bluetracker._constants import EMBED_COLOR, EMBED_FIELD_NAME, FOOTER_ICON_URL, FOOTER_TEXT
from bluetracker._redact import redact_for_log, redact_url
from bluetracker._render import absolute_avatar_url, excerpt, html_to_text
from bluetracker._transport import Transport
from bluetracker.config import TrackerConfig
from bluetracker.exceptions import DeliveryError, TrackerTransportError
from bluetracker.models.forum import Post

_logger = logging.getLogger(__name__)


def build_payload(post: Post, config: TrackerConfig) -> dict[str, Any]:
    """Build the webhook body announcing *post*."""
    link = config.post_link(post.topic_slug, post.topic_id, post.post_number)
    embed: dict[str, Any] = {
        "title": post.user_title,
        "color": EMBED_COLOR,
        "fields": [
            {
                "name": EMBED_FIELD_NAME,
                "value": excerpt(html_to_text(post.cooked)),
            }
        ],
        "url": link,
        "author": {
            "name": post.username,
            "icon_url": absolute_avatar_url(post.avatar_template, config.base_url),
            "url": link,
        },
        "footer": {
            "text": FOOTER_TEXT,
            "icon_url": FOOTER_ICON_URL,
        },
        "timestamp": post.created_at.isoformat() if post.created_at else None,
    }
    return {"content": None, "embeds": [embed]}


class WebhookNotifier:
    """Send posts to a (possibly changing) list of webhook URLs."""

    def __init__(
        self,
        config: TrackerConfig,
        transport: Transport,
        webhooks: Callable[[], Sequence[str]],
    ) -> None:
        self._config = config
        self._transport = transport
        self._webhooks = webhooks

    async def send(self, post: Post) -> int:
        """Deliver *post* to every webhook; returns how many accepted it.

        Raises :class:`DeliveryError` when webhooks are configured and none
        of them accepted the post.
        """
        hooks = list(self._webhooks())
        if not hooks:
            _logger.warning(
                "No webhooks configured; topic=%s post=%s is recorded without being sent",
                post.topic_id,
                post.post_number,
            )
            return 0

        payload = build_payload(post, self._config)
        accepted = 0
        last_error: TrackerTransportError | None = None
        for hook in hooks:
            try:
                await self._transport.post_json(hook, payload)
                accepted += 1
            except TrackerTransportError as exc:
                last_error = exc
                _logger.warning("Webhook %s rejected topic=%s post=%s: %s", redact_url(hook), post.topic_id, post.post_number, exc)
                _logger.debug("Rejected payload: %s", json.dumps(redact_for_log(payload)))

        if accepted == 0:
            raise DeliveryError(
                f"All {len(hooks)} webhooks failed for topic={post.topic_id} post={post.post_number}",
                url=last_error.url if last_error is not None else "",
            ) from last_error

        _logger.info("Delivered topic=%s post=%s to %d/%d webhooks", post.topic_id, post.post_number, accepted, len(hooks))
        return accepted
