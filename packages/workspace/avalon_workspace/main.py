"""
Workspace command-line entry point.

Loads settings and the roster, configures logging, restores the persisted
session and runs one command against the local store.
"""

from __future__ import annotations

import argparse
import getpass
import json
import sys
from pathlib import Path
from typing import Any, Callable, Sequence

import structlog

from avalon_shared.schemas import (
    ValidationResult,
    to_record,
    validate_attachment,
    validate_evaluation,
    validate_task,
)

from .backup import export_backup, import_backup
from .config import Settings, get_settings, load_roster
from .errors import WorkspaceError
from .export import evaluations_to_csv
from .guard import GuardOutcome, RouteGuard
from .session import SessionManager
from .storage import SqliteStore

VALIDATORS: dict[str, Callable[[Any], ValidationResult]] = {
    "task": validate_task,
    "attachment": validate_attachment,
    "evaluation": validate_evaluation,
}


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog with the specified level and format."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="avalon", description="Avalon workspace session tools")
    parser.add_argument("--db", help="Path to the storage file (default: AVALON_STORAGE_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Log in as a roster member")
    p.add_argument("username")
    p.add_argument("--password", help="Prompted for when omitted")

    sub.add_parser("logout", help="End the current session")
    sub.add_parser("status", help="Show the current session")

    p = sub.add_parser("activity", help="Show or edit the activity log (admins only)")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--delete", metavar="ENTRY_ID")
    group.add_argument("--clear", action="store_true")

    p = sub.add_parser("validate", help="Validate entity records from a JSON file")
    p.add_argument("entity", choices=sorted(VALIDATORS))
    p.add_argument("file")

    sub.add_parser("evaluations-csv", help="Print stored evaluations as CSV")

    p = sub.add_parser("backup", help="Export or import workspace data")
    p.add_argument("action", choices=["export", "import"])
    p.add_argument("file")

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _cmd_login(session: SessionManager, args: argparse.Namespace) -> int:
    password = args.password if args.password is not None else getpass.getpass()
    result = session.attempt_login(args.username, password)
    if not result.success:
        print(result.error, file=sys.stderr)
        return 1
    print(f"Logged in as {result.username}")
    return 0


def _cmd_logout(session: SessionManager, args: argparse.Namespace) -> int:
    session.logout()
    print("Logged out")
    return 0


def _cmd_status(session: SessionManager, args: argparse.Namespace) -> int:
    _print_json(session.snapshot().model_dump())
    return 0


def _cmd_activity(session: SessionManager, args: argparse.Namespace) -> int:
    decision = RouteGuard(session).check_admin()
    if decision.outcome is not GuardOutcome.RENDER:
        print("Access denied", file=sys.stderr)
        return 1

    if args.clear:
        session.audit.clear()
        return 0
    if args.delete:
        if not session.audit.delete(args.delete):
            print(f"No entry {args.delete}", file=sys.stderr)
            return 1
        return 0

    _print_json([to_record(e) for e in session.audit.entries()])
    return 0


def _cmd_validate(session: SessionManager, args: argparse.Namespace) -> int:
    validator = VALIDATORS[args.entity]
    raw = json.loads(Path(args.file).read_text())
    records = raw if isinstance(raw, list) else [raw]

    failed = 0
    for index, record in enumerate(records):
        result = validator(record)
        if result.ok:
            continue
        failed += 1
        for err in result.errors:
            print(f"[{index}] {err.field}: {err.reason}")
    print(f"{len(records) - failed}/{len(records)} valid")
    return 1 if failed else 0


def _cmd_evaluations_csv(session: SessionManager, args: argparse.Namespace) -> int:
    raw = session.store.get("decodeEvaluations")
    records = json.loads(raw) if raw else []
    evaluations = []
    for record in records:
        result = validate_evaluation(record)
        if result.ok:
            evaluations.append(result.entity)
    sys.stdout.write(evaluations_to_csv(evaluations))
    return 0


def _cmd_backup(session: SessionManager, args: argparse.Namespace) -> int:
    store = session.store
    path = Path(args.file)
    if args.action == "export":
        path.write_text(json.dumps(export_backup(store), indent=2, ensure_ascii=False))
        print(f"Backup written to {path}")
    else:
        keys = import_backup(store, json.loads(path.read_text()))
        print(f"Restored {len(keys)} keys")
    return 0


COMMANDS: dict[str, Callable[[SessionManager, argparse.Namespace], int]] = {
    "login": _cmd_login,
    "logout": _cmd_logout,
    "status": _cmd_status,
    "activity": _cmd_activity,
    "validate": _cmd_validate,
    "evaluations-csv": _cmd_evaluations_csv,
    "backup": _cmd_backup,
}


def main(argv: Sequence[str] | None = None, settings: Settings | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_format)
    log = structlog.get_logger()

    try:
        roster = load_roster(settings.roster_path)
    except (FileNotFoundError, WorkspaceError) as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    try:
        with SqliteStore(args.db or settings.storage_path) as store:
            session = SessionManager(
                roster,
                store,
                default_route=settings.default_route,
                login_route=settings.login_route,
            )
            session.restore()
            log.debug("cli.command", command=args.command, username=session.username)
            return COMMANDS[args.command](session, args)
    except (WorkspaceError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


def run() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
