"""Command-line entry point: ``python -m bluetracker``.

Configuration comes from ``BLUETRACKER_*`` environment variables; the
options below override them.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Any

from bluetracker._redact import redact_url
from bluetracker.config import TrackerConfig
from bluetracker.exceptions import TrackerError
from bluetracker.tracker import BlueTracker

_logger = logging.getLogger("bluetracker")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bluetracker",
        description="Forward new staff posts of a forum category to webhooks.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single poll pass and exit.",
    )
    parser.add_argument(
        "--state",
        dest="state_path",
        help="State file (delivered posts and webhooks).",
    )
    parser.add_argument(
        "--interval",
        dest="poll_interval",
        type=float,
        help="Seconds between poll passes.",
    )
    parser.add_argument(
        "--webhook",
        dest="webhooks",
        action="append",
        help="Webhook URL to add to the persisted settings (repeatable).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args(argv)


def _overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in ("state_path", "poll_interval"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.webhooks:
        overrides["webhooks"] = tuple(args.webhooks)
    return overrides


async def _run(config: TrackerConfig, *, once: bool) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
        except (NotImplementedError, RuntimeError):  # pragma: no cover - Windows
            pass

    async with BlueTracker(config) as tracker:
        hooks = tracker.settings.webhooks
        _logger.info("Tracking %s with %d webhooks: %s", config.latest_url, len(hooks), [redact_url(h) for h in hooks])
        if once:
            await tracker.poll_once()
        else:
            await tracker.run_forever(stop)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = TrackerConfig.from_env(**_overrides(args))
        asyncio.run(_run(config, once=args.once))
    except TrackerError as exc:
        print(f"bluetracker: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
