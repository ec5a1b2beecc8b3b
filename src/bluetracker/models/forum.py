"""Discourse forum response models.

Only the handful of fields the tracker needs are modelled; everything else
in the payload is kept in ``raw``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field, model_validator

from bluetracker.models._base import ForumBaseModel


class TrackedPost(ForumBaseModel):
    """Reference to a staff post inside a topic (``tracked_posts`` entry)."""

    post_number: int
    group: str | None = None


class TopicSummary(ForumBaseModel):
    """A topic as listed on a category's ``latest.json`` page."""

    id: int
    title: str = ""
    slug: str = ""
    highest_post_number: int = 0
    last_posted_at: datetime | None = None
    first_tracked_post: TrackedPost | None = None

    @property
    def has_tracked_posts(self) -> bool:
        return self.first_tracked_post is not None


class LatestTopics(ForumBaseModel):
    """Parsed ``latest.json`` listing.

    Accepts the API shape ``{"topic_list": {"topics": [...]}}`` as well as a
    flat ``{"topics": [...]}``.
    """

    topics: list[TopicSummary] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_topic_list(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(values.get("topic_list"), dict):
            unwrapped = dict(values)
            unwrapped["topics"] = values["topic_list"].get("topics") or []
            return unwrapped
        return values

    def tracked(self) -> list[TopicSummary]:
        """Topics that carry at least one tracked post, in listing order."""
        return [topic for topic in self.topics if topic.has_tracked_posts]


class Post(ForumBaseModel):
    """A single forum post."""

    id: int
    post_number: int
    topic_id: int
    topic_slug: str = ""
    username: str = ""
    name: str | None = None
    user_title: str | None = None
    avatar_template: str = ""
    cooked: str = ""
    """Rendered HTML body."""
    created_at: datetime | None = None


class PostStream(ForumBaseModel):
    posts: list[Post] = Field(default_factory=list)
    stream: list[int] = Field(default_factory=list)
    """Ids of every post in the topic, in display order."""


class TopicDetail(ForumBaseModel):
    """A topic as returned by ``/t/{id}.json``."""

    id: int
    title: str = ""
    slug: str = ""
    post_stream: PostStream = Field(default_factory=PostStream)
    tracked_posts: list[TrackedPost] = Field(default_factory=list)
