"""Command-line access to the feedback store.

Runs store operations directly against the configured backend, without the
HTTP server, for operators inspecting or repairing data.

Usage::

    python -m feedback_tracker.cli list
    python -m feedback_tracker.cli --json stats
    python -m feedback_tracker.cli add "Ada" ada@example.com "Loving the new dashboard"
    python -m feedback_tracker.cli vote 3f6c... upvote
    python -m feedback_tracker.cli delete 3f6c...
    python -m feedback_tracker.cli --backend sqlite list

Exit codes: 0 on success, 1 when the store rejects the operation
(validation, unknown id, storage failure), 2 on bad arguments.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from feedback_tracker.models.feedback import FeedbackRecord, StatsSummary, VoteAction
from feedback_tracker.utils.errors import FeedbackTrackerError


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_record(record: FeedbackRecord) -> str:
    created = record.created_at.strftime("%Y-%m-%d %H:%M")
    return (
        f"{record.id}  [{record.votes:+d}]  {record.name} <{record.email}>  {created}\n"
        f"    {record.message}"
    )


def _format_stats(summary: StatsSummary) -> str:
    return "\n".join([
        f"Total feedback: {summary.total_feedback}",
        f"Total votes:    {summary.total_votes}",
        f"Average votes:  {summary.average_votes:.1f}",
        f"Positive rate:  {summary.positive_rate}%",
    ])


def _emit(payload: Any, as_json: bool) -> None:
    if as_json:
        if isinstance(payload, list):
            data = [item.model_dump(mode="json", by_alias=True) for item in payload]
        else:
            data = payload.model_dump(mode="json", by_alias=True)
        print(json.dumps(data, indent=2, ensure_ascii=False))
        return

    if isinstance(payload, list):
        if not payload:
            print("No feedback yet.")
        for record in payload:
            print(_format_record(record))
    elif isinstance(payload, StatsSummary):
        print(_format_stats(payload))
    else:
        print(_format_record(payload))


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="feedback_tracker.cli",
        description="Inspect and manage stored feedback.",
    )
    parser.add_argument("--json", action="store_true", help="Print machine-readable JSON.")
    parser.add_argument(
        "--backend",
        choices=["json", "sqlite", "memory"],
        help="Override FEEDBACK_BACKEND for this run.",
    )
    parser.add_argument("--data-file", help="Override FEEDBACK_DATA_FILE (json backend).")
    parser.add_argument("--db-path", help="Override FEEDBACK_DB_PATH (sqlite backend).")

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List all feedback, newest first.")
    sub.add_parser("stats", help="Show aggregate statistics.")

    add = sub.add_parser("add", help="Create a feedback entry.")
    add.add_argument("name")
    add.add_argument("email")
    add.add_argument("message")

    vote = sub.add_parser("vote", help="Upvote or downvote an entry.")
    vote.add_argument("feedback_id")
    vote.add_argument("action", choices=[a.value for a in VoteAction])

    delete = sub.add_parser("delete", help="Delete an entry.")
    delete.add_argument("feedback_id")

    return parser


def _settings_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.backend:
        overrides["feedback_backend"] = args.backend
    if args.data_file:
        overrides["feedback_data_file"] = args.data_file
    if args.db_path:
        overrides["feedback_db_path"] = args.db_path
    return overrides


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace) -> Any:
    # Deferred so ``--help`` does not pay for building the web app.
    from feedback_tracker.config.settings import Settings
    from feedback_tracker.main import build_feedback_store

    store = build_feedback_store(Settings(**_settings_overrides(args)))
    await store.repository.initialize()

    if args.command == "list":
        return await store.list()
    if args.command == "stats":
        return await store.stats()
    if args.command == "add":
        return await store.create(args.name, args.email, args.message)
    if args.command == "vote":
        return await store.vote(args.feedback_id, args.action)
    if args.command == "delete":
        return await store.delete(args.feedback_id)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run one store operation, and print the result."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from feedback_tracker.utils.logging import configure_logging

    # Importing the app configures stdout logging; keep stdout for results.
    import feedback_tracker.main  # noqa: F401

    configure_logging(log_level="WARNING", stream=sys.stderr)

    try:
        result = asyncio.run(_run(args))
    except FeedbackTrackerError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    _emit(result, args.json)
    return 0


if __name__ == "__main__":
    sys.exit(main())
