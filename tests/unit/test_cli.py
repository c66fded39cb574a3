"""Unit tests for the management CLI (feedback_tracker.cli.manage)."""

from __future__ import annotations

import json
import sys

import pytest

from feedback_tracker.cli.manage import _format_record, _format_stats, main
from feedback_tracker.models.feedback import StatsSummary
from feedback_tracker.utils.logging import configure_logging


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """Run the CLI against a throwaway JSON file; returns a runner."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("FEEDBACK_BACKEND", raising=False)
    data_file = tmp_path / "feedback.json"

    def _run(*argv: str) -> int:
        return main(["--backend", "json", "--data-file", str(data_file), *argv])

    yield _run
    # main() points logging at the captured stderr; put it back.
    configure_logging(stream=sys.__stderr__)


# ======================================================================
# Formatting
# ======================================================================


class TestFormatting:
    def test_format_record(self, record_factory) -> None:
        text = _format_record(record_factory(votes=-2))
        assert text.splitlines() == [
            "fb-test  [-2]  Grace Hopper <grace@example.com>  2026-03-14 09:26",
            "    The new release notes page is very helpful.",
        ]

    def test_format_stats(self) -> None:
        text = _format_stats(
            StatsSummary(total_feedback=3, total_votes=2, average_votes=0.7, positive_rate=33)
        )
        assert "Average votes:  0.7" in text
        assert text.endswith("Positive rate:  33%")


# ======================================================================
# Commands
# ======================================================================


class TestCommands:
    def test_list_empty(self, cli, capsys) -> None:
        assert cli("list") == 0
        assert capsys.readouterr().out.strip() == "No feedback yet."

    def test_add_vote_stats_delete(self, cli, capsys) -> None:
        assert cli("--json", "add", "Ada", "ADA@example.com", "The dashboard is lovely") == 0
        created = json.loads(capsys.readouterr().out)
        assert created["email"] == "ada@example.com"
        assert created["votes"] == 0

        assert cli("vote", created["id"], "upvote") == 0
        assert "[+1]" in capsys.readouterr().out

        assert cli("--json", "stats") == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats == {
            "totalFeedback": 1,
            "totalVotes": 1,
            "averageVotes": 1.0,
            "positiveRate": 100,
        }

        assert cli("delete", created["id"]) == 0
        capsys.readouterr()

        assert cli("--json", "list") == 0
        assert json.loads(capsys.readouterr().out) == []

    def test_validation_failure_exits_1(self, cli, capsys) -> None:
        assert cli("add", "A", "ada@example.com", "The dashboard is lovely") == 1
        captured = capsys.readouterr()
        assert "Error: Name must be at least 2 characters long." in captured.err
        assert captured.out == ""

    def test_unknown_id_exits_1(self, cli, capsys) -> None:
        assert cli("delete", "missing") == 1
        assert "Error: Feedback not found" in capsys.readouterr().err

    def test_bad_action_is_usage_error(self, cli) -> None:
        with pytest.raises(SystemExit) as exc_info:
            cli("vote", "abc", "sideways")
        assert exc_info.value.code == 2

    def test_data_persists_between_runs(self, cli, capsys, tmp_path) -> None:
        cli("add", "Ada", "ada@example.com", "The dashboard is lovely")
        cli("add", "Bob", "bob@example.com", "Search could be faster")
        capsys.readouterr()

        assert cli("--json", "list") == 0
        names = [r["name"] for r in json.loads(capsys.readouterr().out)]
        assert names == ["Bob", "Ada"]
        assert (tmp_path / "feedback.json").exists()
