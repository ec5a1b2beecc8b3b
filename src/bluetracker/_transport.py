"""HTTP transport for forum reads and webhook posts."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

import aiohttp

from bluetracker._constants import USER_AGENT
from bluetracker._redact import redact_url
from bluetracker.exceptions import TrackerTransportError

_logger = logging.getLogger(__name__)

QueryParams = Sequence[tuple[str, str | int]]


def _preview(raw: bytes) -> str:
    return raw[:200].decode("utf-8", errors="replace")


class Transport(Protocol):
    """Structural transport interface used by endpoint modules and the notifier."""

    async def get_json(self, url: str, params: QueryParams | None = None) -> dict[str, Any]:
        ...

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> int:
        ...


class HttpTransport:
    """aiohttp-backed transport."""

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def get_json(self, url: str, params: QueryParams | None = None) -> dict[str, Any]:
        """GET *url* and decode a JSON object body."""
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, params=params, headers=headers) as resp:
                raw = await resp.read()
                if resp.status != 200:
                    raise TrackerTransportError(
                        f"HTTP {resp.status} from {url}: {_preview(raw)}",
                        status_code=resp.status,
                        url=url,
                    )
        except TrackerTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TrackerTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            body: Any = json.loads(raw.decode("utf-8"))
        except (ValueError, RecursionError) as exc:
            raise TrackerTransportError(f"Invalid JSON from {url}: {_preview(raw)}", url=url) from exc

        if not isinstance(body, dict):
            raise TrackerTransportError(f"Expected a JSON object from {url}", url=url)
        return body

    async def post_json(self, url: str, payload: Mapping[str, Any]) -> int:
        """POST *payload* as JSON; returns the status code of a 2xx response."""
        headers = {"content-type": "application/json", "user-agent": USER_AGENT}
        safe_url = redact_url(url)

        _logger.debug("POST %s", safe_url)

        try:
            async with self._http.post(url, data=json.dumps(payload), headers=headers) as resp:
                if not 200 <= resp.status < 300:
                    raw = await resp.read()
                    raise TrackerTransportError(
                        f"HTTP {resp.status} from {safe_url}: {_preview(raw)}",
                        status_code=resp.status,
                        url=safe_url,
                    )
                return resp.status
        except TrackerTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise TrackerTransportError(f"Request to {safe_url} failed: {exc}", url=safe_url) from exc
