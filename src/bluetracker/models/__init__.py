"""Data models for forum responses and persisted tracker records."""

from bluetracker.models._base import ForumBaseModel
from bluetracker.models.forum import LatestTopics, Post, PostStream, TopicDetail, TopicSummary, TrackedPost
from bluetracker.models.records import Settings, TrackedRecord

__all__ = [
    "ForumBaseModel",
    "LatestTopics",
    "Post",
    "PostStream",
    "Settings",
    "TopicDetail",
    "TopicSummary",
    "TrackedPost",
    "TrackedRecord",
]
