"""Forum topic endpoints.

Discourse embeds only the first chunk of posts in ``/t/{id}.json``; the
remaining ones are fetched by id from ``/t/{id}/posts.json``. Tracked posts
are then resolved by their ``post_number`` among all fetched posts. Looking
them up by position in ``post_stream.stream`` is wrong as soon as a post in
the topic has been deleted.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from pydantic import ValidationError

from bluetracker._constants import POST_CHUNK_SIZE
from bluetracker._transport import Transport
from bluetracker.config import TrackerConfig
from bluetracker.exceptions import TrackerTransportError
from bluetracker.models.forum import LatestTopics, Post, PostStream, TopicDetail

_logger = logging.getLogger(__name__)


def _chunked(ids: Sequence[int], size: int) -> Iterable[Sequence[int]]:
    for start in range(0, len(ids), size):
        yield ids[start : start + size]


async def fetch_latest(config: TrackerConfig, transport: Transport) -> LatestTopics:
    """Fetch the latest topics of the configured category."""
    url = config.latest_url
    body = await transport.get_json(url)
    try:
        return LatestTopics.model_validate(body)
    except ValidationError as exc:
        raise TrackerTransportError(f"Unexpected topic listing from {url}: {exc}", url=url) from exc


async def fetch_topic(config: TrackerConfig, transport: Transport, topic_id: int) -> TopicDetail:
    """Fetch a topic with its first chunk of posts and its tracked posts."""
    url = config.topic_url(topic_id)
    body = await transport.get_json(url)
    try:
        return TopicDetail.model_validate(body)
    except ValidationError as exc:
        raise TrackerTransportError(f"Unexpected topic payload from {url}: {exc}", url=url) from exc


async def fetch_all_posts(config: TrackerConfig, transport: Transport, topic: TopicDetail) -> list[Post]:
    """Return every post of *topic*, loading the ones not embedded in it."""
    posts = list(topic.post_stream.posts)
    loaded = {post.id for post in posts}
    missing = [post_id for post_id in topic.post_stream.stream if post_id not in loaded]

    for chunk in _chunked(missing, POST_CHUNK_SIZE):
        params: list[tuple[str, str | int]] = [("post_ids[]", post_id) for post_id in chunk]
        params.append(("include_suggested", "true"))
        url = config.posts_url(topic.id)
        body = await transport.get_json(url, params)
        try:
            stream = PostStream.model_validate(body.get("post_stream") or {})
        except ValidationError as exc:
            raise TrackerTransportError(f"Unexpected posts payload from {url}: {exc}", url=url) from exc
        posts.extend(stream.posts)

    _logger.debug("Topic %s: %d posts loaded (%d fetched by id)", topic.id, len(posts), len(missing))
    return posts


def resolve_tracked_posts(topic: TopicDetail, posts: Iterable[Post], post_numbers: Iterable[int]) -> list[Post]:
    """Map *post_numbers* to loaded posts, keeping order and skipping unknown numbers."""
    by_number = {post.post_number: post for post in posts}
    resolved: list[Post] = []
    for number in post_numbers:
        post = by_number.get(number)
        if post is None:
            _logger.debug("Topic %s: tracked post #%s not found (deleted?)", topic.id, number)
            continue
        resolved.append(post)
    return resolved
