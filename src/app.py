"""Application entry point for the autoreply dashboard and CLI."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint
from dotenv import load_dotenv

import settings
from adapters.json_rule_repository import JsonRuleRepository
from adapters.log_notifier import LoggingNotifier
from adapters.sqlite_activity import SQLiteActivityStore
from core.connection import Connected, Connecting
from core.errors import DuplicateKeywordError, ValidationError
from core.models import describe_outcome
from core.rule_store import RuleStore
from runtime import AutoReplyRuntime, build_runtime

NAME = "AUTOREPLY"
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


def _configure_logging(force_console: bool = False) -> None:
    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"
    secrets = _collect_redaction_values(config)
    formatter = _RedactingFormatter(secrets, fmt=fmt, datefmt=datefmt)

    handlers: list[logging.Handler] = []

    # Console output would corrupt the dashboard screen, so it is opt-in there.
    if config.get("console", True) or force_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/autoreply.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        max_bytes = int(file_cfg.get("max_bytes", 5 * 1024 * 1024))
        backup_count = int(file_cfg.get("backup_count", 5))
        file_handler = RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if not handlers:
        return

    logging.basicConfig(level=level, handlers=handlers)


def _build_runtime(notifier, ai_enabled: Optional[bool] = None) -> AutoReplyRuntime:
    ai_config = settings.AI_CONFIG
    if ai_enabled is not None:
        ai_config = dataclasses.replace(ai_config, enabled=ai_enabled)
    return build_runtime(
        rules_path=settings.RULES_PATH,
        session_path=settings.SESSION_PATH,
        db_path=settings.DB_PATH,
        ai_config=ai_config,
        routing_config=settings.ROUTING_CONFIG,
        activity_config=settings.ACTIVITY_CONFIG,
        notifier=notifier,
        on_ai_toggle=settings.save_ai_enabled,
    )


def _dashboard() -> None:
    _print_banner()
    _configure_logging()
    from frontend.app import DashboardApp

    DashboardApp(runtime_factory=_build_runtime).run()


def _route(message: str, ai_enabled: Optional[bool], conversation_id: str) -> None:
    _configure_logging(force_console=True)
    runtime = _build_runtime(LoggingNotifier(), ai_enabled=ai_enabled)

    # Headless routing has no pairing step; mark the transport as connected.
    runtime.gate.transition(Connecting())
    runtime.gate.transition(Connected())
    first_entry = len(runtime.activity_log)

    outcome = asyncio.run(runtime.dispatcher.dispatch(conversation_id, message))

    for entry in runtime.activity_log.entries()[first_entry:]:
        print(f"[{entry.kind}] {entry.text}")
    print(f"outcome: {describe_outcome(outcome)}")


def _rules(args: argparse.Namespace) -> None:
    store = RuleStore.hydrate(JsonRuleRepository(settings.RULES_PATH))

    if args.rules_command == "add":
        try:
            rule = store.add(args.keyword, args.reply)
        except (ValidationError, DuplicateKeywordError) as exc:
            raise SystemExit(f"error: {exc}")
        print(f"added {rule.id}: {rule.keyword} -> {rule.reply}")
        return

    if args.rules_command == "remove":
        if store.get(args.rule_id) is None:
            print(f"no rule with id {args.rule_id}")
            return
        store.remove(args.rule_id)
        print(f"removed {args.rule_id}")
        return

    rules = store.all()
    if not rules:
        print("No keyword rules defined yet.")
        return
    for rule in rules:
        added = rule.created_at.astimezone().strftime("%Y-%m-%d")
        print(f"{rule.id} | {rule.keyword} | {rule.reply} | added {added}")


def _activity(limit: int) -> None:
    if not settings.ACTIVITY_CONFIG.persist:
        print("Activity persistence is disabled (activity.persist=false).")
        return
    store = SQLiteActivityStore(settings.DB_PATH)
    store.init_db()
    rows = store.list_entries(limit=limit)
    if not rows:
        print("No activity recorded yet.")
        return
    for row in reversed(rows):
        timestamp = row["timestamp"].replace("T", " ")[:19]
        print(f"{timestamp} [{row['kind']}] {row['text']}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="autoreply")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("dashboard", help="Launch the auto-reply dashboard")

    route_parser = subparsers.add_parser("route", help="Route one message against the stored rules")
    route_parser.add_argument("message")
    route_parser.add_argument("--conversation", default="cli", help="Conversation id")
    ai_group = route_parser.add_mutually_exclusive_group()
    ai_group.add_argument("--ai", dest="ai", action="store_true", default=None, help="Force AI fallback on")
    ai_group.add_argument("--no-ai", dest="ai", action="store_false", help="Force AI fallback off")
    route_parser.set_defaults(ai=None)

    rules_parser = subparsers.add_parser("rules", help="Manage keyword rules")
    rules_sub = rules_parser.add_subparsers(dest="rules_command")
    rules_sub.add_parser("list", help="List keyword rules")
    add_parser = rules_sub.add_parser("add", help="Add a keyword rule")
    add_parser.add_argument("keyword")
    add_parser.add_argument("reply")
    remove_parser = rules_sub.add_parser("remove", help="Remove a keyword rule by id")
    remove_parser.add_argument("rule_id")

    activity_parser = subparsers.add_parser("activity", help="Show persisted activity history")
    activity_parser.add_argument("--limit", type=int, default=50)

    args = parser.parse_args(argv)
    if args.command == "route":
        _route(args.message, args.ai, args.conversation)
        return
    if args.command == "rules":
        _rules(args)
        return
    if args.command == "activity":
        _activity(args.limit)
        return
    _dashboard()


if __name__ == "__main__":
    main()
