"""End-to-end command tests through the Click runner, JSON output."""

from __future__ import annotations

import json
from typing import Any

import pytest
from click.testing import CliRunner

from tasklistctl.cli import cli


def _run(runner: CliRunner, *args: str) -> dict[str, Any]:
    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def _fail(runner: CliRunner, *args: str) -> dict[str, Any]:
    result = runner.invoke(cli, ["--json", *args])
    assert result.exit_code == 1, result.output
    return json.loads(result.stderr)


@pytest.mark.usefixtures("_isolated_store")
class TestListCommands:
    def test_tree(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "Work")
        _run(cli_runner, "list", "create", "Reports", "--parent", "1")
        tree = _run(cli_runner, "list", "all", "--tree")["data"]["items"]
        assert tree[0]["name"] == "Work"
        assert tree[0]["children"][0]["name"] == "Reports"

    def test_get_path(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "Work")
        _run(cli_runner, "list", "create", "Reports", "--parent", "1")
        data = _run(cli_runner, "list", "get", "2")["data"]
        assert data["path"] == "Work > Reports"
        assert data["depth"] == 1

    def test_reparent_cycle_rejected(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "A")
        _run(cli_runner, "list", "create", "B", "--parent", "1")
        payload = _fail(cli_runner, "list", "update", "1", "--parent", "2")
        assert payload["error"]["code"] == "INTEGRITY_VIOLATION"

    def test_update_root_detaches(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "A")
        _run(cli_runner, "list", "create", "B", "--parent", "1")
        assert _run(cli_runner, "list", "update", "2", "--root")["data"]["parent_list_id"] is None

    def test_update_requires_changes(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "A")
        result = cli_runner.invoke(cli, ["list", "update", "1"])
        assert result.exit_code == 1
        assert "No changes specified" in result.stderr

    def test_delete_cascade(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "A")
        _run(cli_runner, "list", "create", "B", "--parent", "1")
        assert _fail(cli_runner, "list", "delete", "1")["error"]["code"] == "INTEGRITY_VIOLATION"
        data = _run(cli_runner, "list", "delete", "1", "--cascade")["data"]
        assert data["deleted"] is True
        assert _run(cli_runner, "list", "all")["data"]["count"] == 0

    def test_move_task_needs_target_or_none(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["list", "move-task", "1"])
        assert result.exit_code == 2

    def test_move_task_detach(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "A")
        _run(cli_runner, "task", "create", "1", "T")
        data = _run(cli_runner, "list", "move-task", "1", "--none")["data"]
        assert data == {"id": 1, "moved": True, "list_id": None}


@pytest.mark.usefixtures("_isolated_store")
class TestTaskCommands:
    def test_lifecycle(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "L")
        _run(cli_runner, "task", "create", "1", "first", "--priority", "high", "--hours", "2")
        _run(cli_runner, "task", "create", "1", "second")

        _run(cli_runner, "task", "start", "1")
        _run(cli_runner, "task", "start", "2")
        assert _run(cli_runner, "task", "get", "1")["data"]["status"] == "pending"

        done = _run(cli_runner, "task", "complete", "2")["data"]
        assert done["status"] == "completed"
        assert done["completed_at"] is not None

    def test_update_warning_goes_to_stderr(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "L")
        _run(cli_runner, "task", "create", "1", "T")
        result = cli_runner.invoke(cli, ["task", "update", "1", "--status", "completed"])
        assert result.exit_code == 0
        assert "WARNING: Unusual status change: pending -> completed" in result.stderr

    def test_clear_due(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "L")
        _run(cli_runner, "task", "create", "1", "T", "--due", "2024-07-01")
        assert _run(cli_runner, "task", "get", "1")["data"]["due_date"] == "2024-07-01"
        cleared = _run(cli_runner, "task", "update", "1", "--clear-due")["data"]
        assert cleared["due_date"] is None

    def test_invalid_status_is_usage_error(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["task", "create", "1", "T", "--status", "done"])
        assert result.exit_code == 2

    def test_list_filters(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "L")
        _run(cli_runner, "task", "create", "1", "a")
        _run(cli_runner, "task", "create", "1", "b", "--status", "blocked")
        data = _run(cli_runner, "task", "list", "--status", "blocked")["data"]
        assert [t["title"] for t in data["items"]] == ["b"]

    def test_delete(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "L")
        _run(cli_runner, "task", "create", "1", "gone")
        assert _run(cli_runner, "task", "delete", "1")["data"]["deleted"] is True
        assert _fail(cli_runner, "task", "get", "1")["error"]["code"] == "NOT_FOUND"


@pytest.mark.usefixtures("_isolated_store")
class TestTemplateCommands:
    def test_build_and_apply(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "template", "create", "Release", "--category", "eng")
        _run(cli_runner, "template", "add-task", "1", "Tag {{version}}", "--priority", "high")
        _run(cli_runner, "template", "add-task", "1", "Notify {{team}}")
        assert _run(cli_runner, "template", "get", "1")["data"]["placeholders"] == [
            "version",
            "team",
        ]

        applied = _run(
            cli_runner, "template", "apply", "1", "Release 2.1", "--param", "version=2.1"
        )["data"]
        assert applied["task_count"] == 2
        titles = sorted(
            t["title"] for t in _run(cli_runner, "task", "list", "--list", "1")["data"]["items"]
        )
        assert titles == ["Notify {{team}}", "Tag 2.1"]

    def test_from_list(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "Source")
        _run(cli_runner, "task", "create", "1", "step one", "--status", "completed")
        data = _run(cli_runner, "template", "from-list", "1", "Copy")["data"]
        assert [s["title"] for s in data["tasks"]] == ["step one"]

    def test_bad_param(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "template", "create", "T")
        result = cli_runner.invoke(cli, ["template", "apply", "1", "X", "--param", "novalue"])
        assert result.exit_code == 2
        assert "KEY=VALUE" in result.output

    def test_list_and_delete(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "template", "create", "A", "--category", "x")
        _run(cli_runner, "template", "create", "B")
        assert _run(cli_runner, "template", "list", "--category", "x")["data"]["count"] == 1
        _run(cli_runner, "template", "delete", "1")
        assert _run(cli_runner, "template", "list")["data"]["count"] == 1


@pytest.mark.usefixtures("_isolated_store")
class TestTagAndAttributeCommands:
    def test_tags(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "L")
        _run(cli_runner, "task", "create", "1", "T")
        _run(cli_runner, "tag", "create", "work")
        _run(cli_runner, "tag", "create", "deep", "--parent", "1")
        assert _run(cli_runner, "tag", "get", "2")["data"]["path"] == "work/deep"

        _run(cli_runner, "tag", "add", "task", "1", "2")
        _run(cli_runner, "tag", "add", "list", "1", "1")
        assert _run(cli_runner, "tag", "show", "task", "1")["data"]["items"][0]["name"] == "deep"
        assert _run(cli_runner, "tag", "remove", "list", "1", "1")["data"]["removed"] is True

        assert _fail(cli_runner, "tag", "create", "work")["error"]["code"] == "CONFLICT"

    def test_attributes(self, cli_runner: CliRunner) -> None:
        _run(cli_runner, "list", "create", "L")
        _run(cli_runner, "task", "create", "1", "T")
        _run(cli_runner, "attr", "define", "Severity", "integer", "--rules", '{"min": 1, "max": 5}')

        failed = _fail(cli_runner, "attr", "set", "task", "1", "1", "6")
        assert failed["error"]["code"] == "VALIDATION_FAILED"
        assert _run(cli_runner, "attr", "set", "task", "1", "1", "3")["data"]["value"] == "3"
        shown = _run(cli_runner, "attr", "show", "task", "1")["data"]["items"]
        assert [(v["name"], v["value"]) for v in shown] == [("Severity", "3")]

        removed = _run(cli_runner, "attr", "delete", "1")["data"]
        assert removed["values_removed"] == 1

    def test_bad_rules_json(self, cli_runner: CliRunner) -> None:
        payload = _fail(cli_runner, "attr", "define", "X", "integer", "--rules", "{oops")
        assert payload["error"]["code"] == "VALIDATION_FAILED"


@pytest.mark.usefixtures("_isolated_store")
class TestSearchCommands:
    def _seed(self, runner: CliRunner) -> None:
        _run(runner, "list", "create", "Work")
        _run(runner, "task", "create", "1", "Write report", "--due", "2024-06-10")
        _run(runner, "task", "create", "1", "Review report", "--status", "cancelled")
        _run(runner, "task", "create", "1", "Plan offsite", "--priority", "critical")
        _run(runner, "tag", "create", "writing")
        _run(runner, "tag", "add", "task", "1", "1")

    def test_tasks_by_text(self, cli_runner: CliRunner) -> None:
        self._seed(cli_runner)
        items = _run(cli_runner, "search", "tasks", "report")["data"]["items"]
        assert [t["title"] for t in items] == ["Write report"]
        with_cancelled = _run(cli_runner, "search", "tasks", "report", "--cancelled")
        assert with_cancelled["data"]["count"] == 2

    def test_tasks_by_tag_and_due(self, cli_runner: CliRunner) -> None:
        self._seed(cli_runner)
        by_tag = _run(cli_runner, "search", "tasks", "--tag", "writing")["data"]["items"]
        assert [t["title"] for t in by_tag] == ["Write report"]
        by_due = _run(cli_runner, "search", "tasks", "--due-to", "2024-06-10")["data"]["items"]
        assert [t["title"] for t in by_due] == ["Write report"]

    def test_sort_ascending(self, cli_runner: CliRunner) -> None:
        self._seed(cli_runner)
        items = _run(cli_runner, "search", "tasks", "--sort", "title", "--asc")["data"]["items"]
        assert [t["title"] for t in items] == ["Plan offsite", "Write report"]

    def test_bad_attr_pair(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["search", "tasks", "--attr", "broken"])
        assert result.exit_code == 2

    def test_aggregates(self, cli_runner: CliRunner) -> None:
        self._seed(cli_runner)
        counts = _run(cli_runner, "search", "counts")["data"]
        assert counts["total"] == 3
        assert counts["counts"]["cancelled"] == 1
        top = _run(cli_runner, "search", "top-tags")["data"]["items"]
        assert [t["name"] for t in top] == ["writing"]
        analytics = _run(cli_runner, "search", "analytics", "--list", "1")["data"]
        assert analytics["cancellation_rate"] == 33.3
        assert _run(cli_runner, "search", "suggest", "rep")["data"]["items"] == [
            "Review report",
            "Write report",
        ]

    def test_lists(self, cli_runner: CliRunner) -> None:
        self._seed(cli_runner)
        _run(cli_runner, "list", "create", "Home")
        items = _run(cli_runner, "search", "lists", "work")["data"]["items"]
        assert [item["name"] for item in items] == ["Work"]


@pytest.mark.usefixtures("_isolated_store")
class TestUpgradeCommand:
    def test_check_then_apply(self, cli_runner: CliRunner) -> None:
        pending = _run(cli_runner, "upgrade", "--check")["data"]
        assert pending["pending_count"] == 1
        applied = _run(cli_runner, "upgrade")["data"]
        assert applied["stamped"] is True
        assert _run(cli_runner, "upgrade", "--check")["data"]["pending_count"] == 0

    def test_check_and_stamp_exclusive(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["upgrade", "--check", "--stamp"])
        assert result.exit_code == 2
