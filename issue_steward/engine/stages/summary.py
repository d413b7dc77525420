"""Summary stage - posts the generated narrative on the tracking issue."""

from datetime import UTC, datetime

import structlog

from issue_steward.engine.stages.base import RunStage
from issue_steward.models.domain import Comment
from issue_steward.models.narrative import Narrative

log = structlog.get_logger(__name__)


class SummaryStage(RunStage):
    """Format and post the status summary comment.

    A failed post is logged and reported as None; draft processing does
    not depend on it.
    """

    def render_summary(self, narrative: Narrative, now: datetime | None = None) -> str:
        """Render the summary comment body.

        Raises:
            ValueError: If the summary or the actions text is empty.
        """
        if not narrative.summary.strip() or not narrative.actions.strip():
            raise ValueError("Narrative with a summary and action proposals is required")

        timestamp = (now or datetime.now(UTC)).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return self.templates.render(
            "summary_comment.md.j2",
            {"timestamp": timestamp, "summary": narrative.summary, "actions": narrative.actions},
        )

    async def post_summary(
        self,
        issue_number: int,
        narrative: Narrative,
        now: datetime | None = None,
    ) -> Comment | None:
        """Post ``narrative`` on issue ``issue_number``.

        Returns:
            The posted comment, or None if posting failed.

        Raises:
            ValueError: If the narrative is incomplete.
        """
        body = self.render_summary(narrative, now)
        log.info("summary_posting", issue=issue_number)

        try:
            comment = await self._write(
                lambda: self.tracker.create_comment(issue_number, body),
                "create_summary_comment",
            )
        except Exception as e:
            log.error("summary_post_failed", issue=issue_number, error=str(e), exc_info=True)
            return None

        log.info("summary_posted", issue=issue_number, comment=comment.id, url=comment.url)
        return comment
