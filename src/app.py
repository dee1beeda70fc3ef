"""Application entry point for the namewatch bot."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv
from telethon import events

import settings
from adapters.http_oracles import build_oracles
from adapters.json_storage import JsonMappingStorage
from adapters.telegram_mapper import build_event
from adapters.telegram_transport import TelegramTransport
from client import build_client
from core.activation import ActivationController
from core.config import (
    ControlConfig,
    DedupConfig,
    DeliveryConfig,
    MistakeConfig,
    PipelineConfig,
    ResolverConfig,
)
from core.dedup import IngestDeduplicator
from core.delivery import DeliveryQueue
from core.dispatcher import EventDispatcher
from core.mistakes import MistakeInjector
from core.names import LearnedNameStore
from core.processor import MessagePipeline
from core.replies import format_group_listing
from core.resolver import NameResolver
from get_session import authorize, login

NAME = "NAMEWATCH"
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


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", True):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    formatter = _RedactingFormatter(_collect_redaction_values(config), fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    if config.get("console", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/namewatch.log")
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
    # Telethon is chatty at INFO; keep it to warnings unless we are debugging.
    if level > logging.DEBUG:
        logging.getLogger("telethon").setLevel(logging.WARNING)


def _from_section(cls, section: dict):
    """Build a config dataclass from a JSON section, ignoring unknown keys."""

    known = {field.name for field in dataclasses.fields(cls)}
    values = {key: value for key, value in (section or {}).items() if key in known}
    if "kinds" in values:
        values["kinds"] = tuple(values["kinds"])
    return cls(**values)


def _build_dispatcher(client, store: LearnedNameStore) -> tuple[EventDispatcher, DeliveryQueue, MessagePipeline]:
    logger = logging.getLogger(__name__)
    transport = TelegramTransport(client)

    control = ControlConfig(
        owners=settings.OWNERS,
        list_commands=settings.LIST_COMMANDS,
        deactivate_commands=settings.DEACTIVATE_COMMANDS,
        status_commands=settings.STATUS_COMMANDS,
    )
    if not control.owners:
        logger.warning("No owners configured; control commands other than status are disabled")

    resolver_config = ResolverConfig(
        timeout_ms=settings.RESOLVER_TIMEOUT_MS,
        max_cooldown_seconds=settings.RESOLVER_MAX_COOLDOWN_SECONDS,
    )
    oracles = []
    if settings.RESOLVE_NAMES:
        oracles = build_oracles(
            settings.ORACLES, resolver_config.timeout_ms, resolver_config.max_cooldown_seconds
        )
    resolver = NameResolver(store, oracles, resolver_config)

    pipeline = MessagePipeline(
        store,
        PipelineConfig(mode=settings.PIPELINE_MODE, resolve_names=settings.RESOLVE_NAMES),
        resolver,
    )
    mistake_config = _from_section(MistakeConfig, settings.MISTAKES)
    queue = DeliveryQueue(
        transport,
        _from_section(DeliveryConfig, settings.DELIVERY),
        MistakeInjector(mistake_config),
    )
    logger.info(
        "Pipeline mode - %s, name resolution %s, mistakes %s",
        settings.PIPELINE_MODE,
        "on" if settings.RESOLVE_NAMES else "off",
        "on" if mistake_config.enabled else "off",
    )

    dispatcher = EventDispatcher(
        transport=transport,
        control=control,
        controller=ActivationController(control),
        deduplicator=IngestDeduplicator(
            DedupConfig(capacity=settings.DEDUP_CAPACITY, max_age_seconds=settings.DEDUP_MAX_AGE_SECONDS)
        ),
        pipeline=pipeline,
        queue=queue,
        store=store,
    )
    return dispatcher, queue, pipeline


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting namewatch")

    store = LearnedNameStore(JsonMappingStorage(settings.MAPPINGS_PATH))
    store.load()

    client = build_client()
    client.loop.run_until_complete(client.connect())
    client.loop.run_until_complete(authorize(client))

    dispatcher, queue, pipeline = _build_dispatcher(client, store)

    # Single handler keeps Telethon integration minimal and defers all filtering
    # to the core dispatcher for consistency and testability.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            await event.message.get_sender()
            await dispatcher.handle(build_event(event.message))
        except Exception:
            logger.exception("Error while processing message")

    client.start()
    logger.info("Client connected. Listening for incoming messages...")
    try:
        client.run_until_disconnected()
    finally:
        queue.close()
        client.loop.run_until_complete(pipeline.join())
        store.persist()
        logger.info("Stopped; %s learned names saved", store.learned_count)


def _groups() -> None:
    _print_banner()
    client = build_client()

    async def _run_groups() -> None:
        await client.connect()
        if not await client.is_user_authorized():
            print("Authorization required. Starting login...")
            await authorize(client)
        groups = await TelegramTransport(client).list_groups()
        print(format_group_listing(groups, with_hint=False))
        await client.disconnect()

    client.loop.run_until_complete(_run_groups())


def _login() -> None:
    _print_banner()
    client = build_client()
    client.loop.run_until_complete(login(client))


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="namewatch")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the bot")
    subparsers.add_parser("groups", help="List groups in the order used by group selection")
    subparsers.add_parser("login", help="Authorize the Telegram account and exit")

    args = parser.parse_args(argv)
    if args.command == "groups":
        _groups()
        return
    if args.command == "login":
        _login()
        return
    _run()


if __name__ == "__main__":
    main()
