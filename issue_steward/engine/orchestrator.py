"""
Daily run orchestrator.

This module provides ``DailyRunOrchestrator``, which sequences one run:

    locate/create tracking issue -> collect repository data
    -> generate narrative -> post summary -> process drafts

Failure Policy:
    Only the tracking issue stage can end the run; without it nothing has
    anywhere to post. A failed collection or generation skips the summary
    comment but drafts are still processed, since the two are independent.

Example:
    >>> orchestrator = DailyRunOrchestrator(settings, tracker, generator)
    >>> report = await orchestrator.run()
    >>> print(report.issue_url, report.statistics)
"""

from datetime import UTC, date, datetime

import structlog

from issue_steward.config.settings import StewardSettings
from issue_steward.engine.collector import RepoCollector
from issue_steward.engine.stages.daily_issue import DailyIssueStage
from issue_steward.engine.stages.drafts import DraftGateStage
from issue_steward.engine.stages.summary import SummaryStage
from issue_steward.models.domain import RunReport
from issue_steward.models.narrative import Narrative
from issue_steward.providers.base import NarrativeProvider, TrackerProvider
from issue_steward.rendering.engine import MarkdownTemplateEngine

log = structlog.get_logger(__name__)

PREVIEW_LENGTH = 100
GENERATION_FAILED = "Generation failed"


def utc_today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(UTC).date()


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    """First ``length`` characters of ``text`` followed by an ellipsis."""
    return f"{text[:length]}..."


class DailyRunOrchestrator:
    """Coordinate one daily status run against a single repository."""

    def __init__(
        self,
        settings: StewardSettings,
        tracker: TrackerProvider,
        generator: NarrativeProvider,
    ) -> None:
        self.settings = settings
        self.tracker = tracker
        self.generator = generator

        templates = MarkdownTemplateEngine()
        self.daily_issue = DailyIssueStage(tracker, settings, templates)
        self.summary = SummaryStage(tracker, settings, templates)
        self.drafts = DraftGateStage(tracker, settings, templates)
        self.collector = RepoCollector(
            tracker,
            limit=settings.tracking.collection_limit,
            retry=settings.retry.read.policy(),
        )

    async def run(self, today: date | None = None) -> RunReport:
        """Run every stage once.

        Args:
            today: Date of the tracking issue; the current UTC date by default.

        Raises:
            DailyIssueError: If the tracking issue cannot be located or created.
        """
        today = today or utc_today()
        log.info("daily_run_start", repository=self.settings.repository.full_name, date=today.isoformat())

        daily = await self.daily_issue.locate_or_create(today)
        log.info("daily_run_issue", issue=daily.number, url=daily.url, created=daily.created)

        narrative = await self._generate()
        report = RunReport(
            issue_url=daily.url,
            summary_preview=preview(narrative.summary) if narrative else GENERATION_FAILED,
            actions_preview=preview(narrative.actions) if narrative else GENERATION_FAILED,
            generated=narrative is not None,
        )

        if narrative is None:
            log.error("daily_run_generation_failed", issue=daily.number)
        else:
            comment = await self.summary.post_summary(daily.number, narrative)
            if comment is None:
                log.error("daily_run_comment_missing", issue=daily.number)
            else:
                report.comment_url = comment.url

        report.statistics = await self.drafts.process_drafts(daily.number)
        log.info("daily_run_complete", issue=daily.number, generated=report.generated, **report.statistics.as_dict())
        return report

    async def _generate(self) -> Narrative | None:
        try:
            snapshot = await self.collector.collect_snapshot()
        except Exception as e:
            log.error("repo_data_collection_failed", error=str(e), exc_info=True)
            return None

        try:
            return await self.generator.generate(snapshot)
        except Exception as e:
            log.error("narrative_generation_failed", error=str(e), exc_info=True)
            return None
