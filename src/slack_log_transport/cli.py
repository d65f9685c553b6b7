"""
Command line entry point.

Commands:
- send LEVEL MESSAGE [--meta KEY=VALUE ...]: post one record.
- tail [--path PATH]: stream records to stdout as JSONL until interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

import requests

from .app import load_transport
from .errors import SlackTransportError
from .logging_config import setup_logging
from .transport import SlackTransport

logger = logging.getLogger(__name__)


def parse_meta(pairs: list[str]) -> dict[str, object]:
    """
    Turn KEY=VALUE pairs into a mapping; JSON values are decoded.
    """

    meta: dict[str, object] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"--meta expects KEY=VALUE, got '{pair}'")
        key, value = pair.split("=", 1)
        try:
            meta[key] = json.loads(value)
        except json.JSONDecodeError:
            meta[key] = value
    return meta


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slack-log-transport",
        description="Forward log records to a Slack incoming webhook.",
    )
    parser.add_argument("--config", default=None, help="YAML file with a 'slack' mapping")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--json-logs", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="post one record")
    send.add_argument("level")
    send.add_argument("message")
    send.add_argument("--meta", action="append", default=[], metavar="KEY=VALUE")

    tail = sub.add_parser("tail", help="stream records as JSONL")
    tail.add_argument("--path", default=None)
    return parser


def run_send(transport: SlackTransport, level: str, message: str, meta: dict[str, object]) -> int:
    try:
        transport.log(level, message, meta or None)
    except (SlackTransportError, requests.RequestException) as exc:
        logger.error("send failed: %s", exc)
        return 1
    print("ok")
    return 0


async def run_tail(transport: SlackTransport, path: str | None = None) -> int:
    session = transport.stream({"path": path} if path else None)
    failures: list[BaseException] = []

    def _on_log(record: object) -> None:
        print(json.dumps(record), flush=True)

    def _on_error(exc: BaseException) -> None:
        failures.append(exc)
        print(f"error: {exc}", file=sys.stderr, flush=True)

    session.on("log", _on_log)
    session.on("error", _on_error)
    try:
        await session.task
    finally:
        session.destroy()
        await transport.aclose()
    return 1 if failures else 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, json_output=args.json_logs)

    try:
        transport = load_transport(args.config)
    except (SlackTransportError, OSError) as exc:
        parser.error(str(exc))

    if args.command == "send":
        try:
            meta = parse_meta(args.meta)
        except ValueError as exc:
            parser.error(str(exc))
        try:
            return run_send(transport, args.level, args.message, meta)
        finally:
            transport.close()

    try:
        return asyncio.run(run_tail(transport, args.path))
    except KeyboardInterrupt:
        return 130
