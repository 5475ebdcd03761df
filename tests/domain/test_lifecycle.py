"""Tests for task status flow and priority ranking."""

from __future__ import annotations

import pytest

from tasklistctl.domain.lifecycle import (
    PRIORITY_RANK,
    TASK_TRANSITIONS,
    Priority,
    TaskStatus,
    is_natural_transition,
    transition_warning,
)


class TestTransitions:
    def test_every_status_has_an_entry(self) -> None:
        assert set(TASK_TRANSITIONS) == set(TaskStatus)

    @pytest.mark.parametrize(
        ("current", "target"),
        [
            (TaskStatus.PENDING, TaskStatus.IN_PROGRESS),
            (TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED),
            (TaskStatus.IN_PROGRESS, TaskStatus.PENDING),
            (TaskStatus.BLOCKED, TaskStatus.IN_PROGRESS),
            (TaskStatus.PENDING, TaskStatus.PENDING),
        ],
    )
    def test_natural(self, current: TaskStatus, target: TaskStatus) -> None:
        assert is_natural_transition(current, target)
        assert transition_warning(current, target) is None

    def test_reopening_terminal_task_warns(self) -> None:
        warning = transition_warning(TaskStatus.COMPLETED, TaskStatus.PENDING)
        assert warning is not None
        assert "Reopened completed" in warning

    def test_skipping_progress_warns(self) -> None:
        warning = transition_warning(TaskStatus.PENDING, TaskStatus.COMPLETED)
        assert warning == "Unusual status change: pending -> completed"


class TestPriority:
    def test_rank_order(self) -> None:
        ordered = sorted(Priority, key=PRIORITY_RANK.__getitem__)
        assert ordered == [Priority.LOW, Priority.NORMAL, Priority.HIGH, Priority.CRITICAL]

    def test_values(self) -> None:
        assert {p.value for p in Priority} == {"low", "normal", "high", "critical"}
