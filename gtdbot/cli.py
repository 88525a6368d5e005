#!/usr/bin/env python3
"""
GTD Bot Command Line Interface

Main entry point for the `gtdbot` command.

Usage:
    gtdbot --action run --user alice --command add Buy milk
    gtdbot --action run --user alice --command process 1 project Q3 Launch
    gtdbot --action export --user alice --format csv
    gtdbot --action stats --user alice --days 7
    gtdbot --action remind
    gtdbot --action serve

Output:
    JSON result with success status and data
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from gtdbot import SYSTEM_ACTOR, __version__
from gtdbot.activity import ActivityLog, EventType
from gtdbot.automation.reminders import WeeklyReminderScheduler
from gtdbot.channels.dispatcher import build_dispatcher
from gtdbot.config import load_config
from gtdbot.errors import GTDError
from gtdbot.logging_config import get_logger, setup_logging
from gtdbot.tasks.store import TaskRepository
from gtdbot.timeutil import to_iso, utcnow

logger = get_logger(__name__)


def cmd_run(args, config) -> dict:
    dispatcher = build_dispatcher(config)
    return asyncio.run(dispatcher.dispatch(args.user, args.command, args.argv))


def cmd_export(args, config) -> dict:
    activity = ActivityLog(config.storage.resolved_log_dir())
    data = activity.export(args.user, args.format)
    if data is None:
        return {"success": False, "error": f"No activity log for user {args.user}"}
    return {"success": True, "format": args.format, "data": data}


def cmd_stats(args, config) -> dict:
    dispatcher = build_dispatcher(config)
    return dispatcher.stats.stats(args.user, window_days=args.days)


def _reminder_hook(config) -> WeeklyReminderScheduler:
    return WeeklyReminderScheduler(
        TaskRepository(config.storage.resolved_data_dir()),
        ActivityLog(config.storage.resolved_log_dir()),
        interval_hours=config.reminders.interval_hours,
    )


def cmd_remind(args, config) -> dict:
    return _reminder_hook(config).run_once()


def cmd_serve(args, config) -> dict:
    """Record startup and run the reminder hook until interrupted."""
    activity = ActivityLog(config.storage.resolved_log_dir())
    activity.record(
        SYSTEM_ACTOR,
        EventType.BOT_STARTED,
        {"botUsername": args.name, "startTime": to_iso(utcnow())},
    )
    logger.info(f"GTD Bot is ready as {args.name}")

    if not config.reminders.enabled:
        return {"success": True, "message": "Reminders disabled; nothing to run"}

    hook = _reminder_hook(config)
    try:
        asyncio.run(hook.run_forever())
    except KeyboardInterrupt:
        hook.stop()
    return {"success": True, "message": f"Reminder hook ran {hook.runs} time(s)"}


def main():
    parser = argparse.ArgumentParser(description="GTD Bot - Getting Things Done over chat commands")
    parser.add_argument("--version", action="version", version=f"gtdbot {__version__}")
    parser.add_argument(
        "--action",
        required=True,
        choices=["run", "export", "stats", "remind", "serve"],
        help="Action to perform",
    )
    parser.add_argument("--config", type=Path, help="Path to gtd.yaml")
    parser.add_argument("--user", help="User ID")

    # run args
    parser.add_argument("--command", help="GTD command name (add, inbox, process, ...)")
    parser.add_argument("argv", nargs="*", help="Command arguments")

    # export / stats args
    parser.add_argument("--format", choices=["json", "csv"], default="json", help="Export format")
    parser.add_argument("--days", type=int, default=None, help="Statistics window in days")

    # serve args
    parser.add_argument("--name", default="gtdbot", help="Bot name recorded at startup")

    args = parser.parse_args()

    setup_logging()
    config = load_config(args.config)

    if args.action in ("run", "export", "stats") and not args.user:
        print(f"Error: --user required for {args.action}")
        sys.exit(1)
    if args.action == "run" and not args.command:
        print("Error: --command required for run")
        sys.exit(1)

    handlers = {
        "run": cmd_run,
        "export": cmd_export,
        "stats": cmd_stats,
        "remind": cmd_remind,
        "serve": cmd_serve,
    }

    try:
        result = handlers[args.action](args, config)
    except GTDError as e:
        result = {"success": False, "error": str(e)}

    if args.action == "export" and result.get("success") and args.format == "csv":
        print(result["data"], end="")
        return

    if result.get("success"):
        print(f"OK {result.get('message', 'Success')}")
    else:
        print(f"ERROR {result.get('error') or result.get('message')}")
        print(json.dumps(result, indent=2, default=str))
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))


if __name__ == "__main__":
    main()
