"""Daily issue stage - finds today's tracking issue or creates it."""

from datetime import date

import structlog

from issue_steward.engine import protocol
from issue_steward.engine.stages.base import RunStage
from issue_steward.exceptions import DailyIssueError
from issue_steward.models.domain import DailyIssue

log = structlog.get_logger(__name__)


class DailyIssueStage(RunStage):
    """Locate or create the tracking issue for a calendar date.

    The tracking issue is identified by the tracking label plus an exact
    title match. Lookup is idempotent; creation only happens when no open
    issue matches.

    Two overlapping runs can both miss the issue and both create one: there
    is no lock, only search-then-create. When duplicates are seen the lowest
    numbered one is used and a warning is logged.
    """

    async def locate_or_create(self, today: date) -> DailyIssue:
        """Return the tracking issue for ``today``, creating it if needed.

        Raises:
            DailyIssueError: If listing or creating fails after retries.
        """
        title = protocol.daily_title(self.tracking.title_prefix, today)
        label = self.tracking.daily_label
        log.info("daily_issue_lookup", title=title, label=label)

        try:
            candidates = await self._read(
                lambda: self.tracker.list_open_issues(labels=[label]),
                "list_daily_issues",
            )
        except Exception as e:
            log.error("daily_issue_lookup_failed", title=title, error=str(e), exc_info=True)
            raise DailyIssueError(f"Could not search for daily issue '{title}': {e}") from e

        matches = sorted((issue for issue in candidates if issue.title == title), key=lambda issue: issue.number)
        if len(matches) > 1:
            log.warning(
                "duplicate_daily_issues",
                title=title,
                numbers=[issue.number for issue in matches],
                using=matches[0].number,
            )
        if matches:
            existing = matches[0]
            log.info("daily_issue_found", issue=existing.number, url=existing.url)
            return DailyIssue(number=existing.number, url=existing.url, title=title)

        log.info("daily_issue_creating", title=title)
        body = self.templates.render(
            "daily_issue.md.j2",
            {
                "title": title,
                "date": today.isoformat(),
                "drafts_header": self.tracking.drafts_header,
                "drafts_placeholder": self.tracking.drafts_placeholder,
            },
        )

        try:
            created = await self._write(
                lambda: self.tracker.create_issue(title=title, body=body, labels=[label]),
                "create_daily_issue",
            )
        except Exception as e:
            log.error("daily_issue_create_failed", title=title, error=str(e), exc_info=True)
            raise DailyIssueError(f"Could not create daily issue '{title}': {e}") from e

        log.info("daily_issue_created", issue=created.number, url=created.url)
        return DailyIssue(number=created.number, url=created.url, title=title, created=True)
