"""Persisted record models.

These describe the entries the tracker keeps in its state file. They are
stored as plain dicts (``model_dump()``) so the state stays a JSON document.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrackedRecord(BaseModel):
    """One delivered notification: post ``post_number`` of topic ``id``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    post_number: int


class Settings(BaseModel):
    """Delivery endpoints, persisted next to the tracked records."""

    model_config = ConfigDict(extra="ignore")

    webhooks: list[str] = Field(default_factory=list)

    @field_validator("webhooks", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [str(v).strip() for v in value if v is not None and str(v).strip()]
        return value
