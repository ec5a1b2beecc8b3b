"""Helpers for safe debug logging.

Webhook URLs carry their secret in the path (``/api/webhooks/<id>/<token>``),
so they must never be logged verbatim. This module masks them, and redacts
other sensitive fields, before anything reaches a log record.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import urlsplit

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "authorization",
        "cookie",
        "webhook",
        "webhooks",
    }
)


def redact_url(url: str) -> str:
    """Keep scheme, host and the first path segment; mask the rest."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return "<invalid-url>"
    if not parts.scheme or not parts.netloc:
        return "<redacted>"
    segments = [segment for segment in parts.path.split("/") if segment]
    visible = "/".join(segments[:1])
    masked = "/…" if len(segments) > 1 else ""
    return f"{parts.scheme}://{parts.netloc}/{visible}{masked}"


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_VALUE_KEYS:
                if isinstance(v, str):
                    redacted[key] = redact_url(v)
                elif isinstance(v, Sequence):
                    redacted[key] = [redact_url(item) if isinstance(item, str) else "<redacted>" for item in v]
                else:
                    redacted[key] = "<redacted>"
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    # Fallback: represent unknown objects without dumping internals.
    return repr(value)
