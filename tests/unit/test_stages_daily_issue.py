"""Tests for DailyIssueStage - locate or create the tracking issue."""

import pytest

from issue_steward.engine.stages.daily_issue import DailyIssueStage
from issue_steward.exceptions import DailyIssueError


@pytest.fixture
def stage(tracker, settings, templates):
    return DailyIssueStage(tracker, settings, templates)


class TestLocateOrCreate:
    @pytest.mark.asyncio
    async def test_creates_issue_with_template(self, stage, tracker, today):
        daily = await stage.locate_or_create(today)

        assert daily.created is True
        issue = tracker.issues[daily.number]
        assert issue.title == "Task Status 2026-10-19"
        assert issue.labels == ["daily-task-summary"]
        assert daily.url == issue.url
        assert "## Reminders & Suggestions" in issue.body
        assert "## Metrics & Status" in issue.body
        assert "## メモ・下書き" in issue.body
        assert "<!-- Add any draft notes" in issue.body

    @pytest.mark.asyncio
    async def test_lookup_is_idempotent(self, stage, tracker, today):
        first = await stage.locate_or_create(today)
        second = await stage.locate_or_create(today)

        assert (second.number, second.url) == (first.number, first.url)
        assert second.created is False
        assert len(tracker.issues_labeled("daily-task-summary")) == 1
        assert tracker.calls.count("create_issue") == 1

    @pytest.mark.asyncio
    async def test_ignores_other_dates_and_unlabeled_titles(self, stage, tracker, today):
        tracker.add_issue("Task Status 2026-10-18", labels=["daily-task-summary"])
        tracker.add_issue("Task Status 2026-10-19", labels=["other"])

        daily = await stage.locate_or_create(today)

        assert daily.created is True
        assert len(tracker.issues) == 3

    @pytest.mark.asyncio
    async def test_uses_lowest_number_when_duplicated(self, stage, tracker, today):
        first = tracker.add_issue("Task Status 2026-10-19", labels=["daily-task-summary"])
        tracker.add_issue("Task Status 2026-10-19", labels=["daily-task-summary"])

        daily = await stage.locate_or_create(today)

        assert daily.number == first.number
        assert "create_issue" not in tracker.calls

    @pytest.mark.asyncio
    async def test_retries_transient_lookup_failure(self, stage, tracker, today):
        tracker.failures["list_open_issues"] = 2

        daily = await stage.locate_or_create(today)

        assert daily.created is True
        assert tracker.calls.count("list_open_issues") == 3

    @pytest.mark.asyncio
    async def test_lookup_exhaustion_is_fatal(self, stage, tracker, today):
        tracker.failures["list_open_issues"] = 3

        with pytest.raises(DailyIssueError, match="search"):
            await stage.locate_or_create(today)

        assert "create_issue" not in tracker.calls

    @pytest.mark.asyncio
    async def test_create_exhaustion_is_fatal(self, stage, tracker, today):
        tracker.failures["create_issue"] = 3

        with pytest.raises(DailyIssueError, match="create"):
            await stage.locate_or_create(today)

        assert tracker.issues == {}
