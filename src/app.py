"""Application entry point for tripcards."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

import httpx
from art import tprint
from dotenv import load_dotenv
from rich.console import Console

import settings
from adapters.card_formatting import build_rows, build_table, record_to_dict
from adapters.telegram_login import authorize
from client import build_http, build_sender, build_telegram_client, open_pipeline
from core.display_names import DisplayNameDirectory
from core.errors import MissingCredentialsError, SendFailedError

NAME = "TRIPCARDS"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = []
    for name in redact_cfg.get("patterns", []):
        value = os.getenv(name)
        if value:
            values.append(value)
    return sorted(set(values), key=len, reverse=True)


def _configure_logging(console: bool = True) -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    # The TUI owns the terminal, so browse only logs to file.
    if console and config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/tripcards.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        file_handler = RotatingFileHandler(
            path,
            maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
            backupCount=int(file_cfg.get("backup_count", 5)),
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


async def _refresh(filter_id: Optional[str], as_json: bool) -> None:
    async with open_pipeline() as pipeline:
        collection = await pipeline.refresh(filter_id)

    if as_json:
        payload = [record_to_dict(record) for record in collection]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    names = DisplayNameDirectory(settings.DISPLAY_NAMES)
    Console().print(build_table(build_rows(collection, names), title=f"{len(collection)} links"))


async def _senders(filter_id: Optional[str]) -> None:
    async with open_pipeline() as pipeline:
        collection = await pipeline.refresh(filter_id)

    names = DisplayNameDirectory(settings.DISPLAY_NAMES)
    added = names.discover(collection)
    for sender_id, name in sorted(names.overrides.items()):
        marker = " (new)" if sender_id in added else ""
        print(f"{sender_id}\t{name or '-'}{marker}")
    if added:
        print(f"\nAdd names for new senders under \"display_names\" in {settings.CONFIG_PATH}")


async def _send(text: str, group_id: Optional[str]) -> int:
    load_dotenv()
    target = group_id or os.getenv("LINE_GROUP_ID")
    if not target:
        print("No group id: pass --group or set LINE_GROUP_ID", file=sys.stderr)
        return 2
    async with build_http() as http:
        try:
            await build_sender(http).send(target, text)
        except MissingCredentialsError as exc:
            print(f"Cannot send: {exc}", file=sys.stderr)
            return 2
        except (SendFailedError, httpx.HTTPError) as exc:
            print(f"Send failed: {exc}", file=sys.stderr)
            return 1
    print("Message sent.")
    return 0


async def _login() -> None:
    client = build_telegram_client()
    await client.connect()
    try:
        await authorize(client)
    finally:
        await client.disconnect()


def _browse() -> None:
    from frontend.app import LinkBrowserApp

    LinkBrowserApp(open_pipeline=open_pipeline, display_names=settings.DISPLAY_NAMES).run()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="tripcards")
    subparsers = parser.add_subparsers(dest="command")

    refresh = subparsers.add_parser("refresh", help="Fetch messages and resolve link previews")
    refresh.add_argument("--filter", dest="filter_id", help="Only messages from this sender id")
    refresh.add_argument("--json", action="store_true", help="Print records as JSON")

    subparsers.add_parser("browse", help="Open the link browser TUI")

    send = subparsers.add_parser("send", help="Send a text message to the group")
    send.add_argument("text")
    send.add_argument("--group", dest="group_id", help="Target group id (default: LINE_GROUP_ID)")

    senders = subparsers.add_parser("senders", help="List sender ids and their display names")
    senders.add_argument("--filter", dest="filter_id")

    subparsers.add_parser("login", help="Authorize the Telegram message source")

    args = parser.parse_args(argv)

    if args.command == "browse":
        _configure_logging(console=False)
        _browse()
        return

    if not getattr(args, "json", False):
        _print_banner()
    _configure_logging()
    if args.command == "send":
        raise SystemExit(asyncio.run(_send(args.text, args.group_id)))
    if args.command == "senders":
        asyncio.run(_senders(args.filter_id))
        return
    if args.command == "login":
        asyncio.run(_login())
        return
    asyncio.run(_refresh(getattr(args, "filter_id", None), getattr(args, "json", False)))


if __name__ == "__main__":
    main()
