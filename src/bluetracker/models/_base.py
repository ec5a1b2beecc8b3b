"""Base model for forum API responses.

Every forum response model inherits from :class:`ForumBaseModel` which
provides:

* ``extra="ignore"`` so the (very wide) Discourse payloads only populate
  the fields we actually use.
* A ``model_validator(mode="before")`` that drops ``None`` and empty-string
  values so the field default is used instead.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ForumBaseModel(BaseModel):
    """Base for forum API response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Original API response dict."""

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Drop null/empty values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if value is not None and value != ""}
        # Keep an explicitly passed raw= (kwargs construction in tests).
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
