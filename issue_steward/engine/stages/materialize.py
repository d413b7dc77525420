"""Materialize stage - turns approved draft items into sub-issues."""

import structlog

from issue_steward.engine import protocol
from issue_steward.engine.stages.base import RunStage
from issue_steward.models.domain import DraftItem, Issue, RunStatistics

log = structlog.get_logger(__name__)


class SubIssueMaterializer(RunStage):
    """Create one sub-issue per approved draft unless a similar one exists.

    Drafts are handled in source order. Open issues are re-listed before
    every draft, so a draft sees the sub-issues created for earlier drafts
    of the same batch. That re-read is what keeps a batch from creating
    duplicates; nothing else is locked.
    """

    async def materialize(
        self,
        parent: Issue,
        drafts: list[DraftItem],
        stats: RunStatistics | None = None,
    ) -> RunStatistics:
        """Create sub-issues for ``drafts`` under tracking issue ``parent``.

        A failure on one draft is logged and the remaining drafts are still
        processed.

        Args:
            parent: The tracking issue the drafts came from.
            drafts: Approved draft items, in source order.
            stats: Counters to update; a fresh set when omitted.

        Returns:
            The updated counters.
        """
        stats = stats if stats is not None else RunStatistics()

        for draft in drafts:
            title = draft.title.strip()
            if not title:
                continue

            try:
                existing = await self.find_similar(title)
                if existing is not None:
                    log.info("sub_issue_exists", draft=title, existing=existing.number)
                    stats.existed += 1
                    continue

                created = await self._create_sub_issue(parent, title)
                stats.created += 1
                log.info("sub_issue_created", issue=created.number, draft=title, parent=parent.number)

                reference = self.templates.render(
                    "sub_issue_reference.md.j2",
                    {"draft_title": title, "number": created.number},
                )
                await self._write(
                    lambda: self.tracker.create_comment(parent.number, reference),
                    "create_reference_comment",
                )
            except Exception as e:
                log.error("sub_issue_failed", draft=title, parent=parent.number, error=str(e), exc_info=True)

        log.info("materialize_complete", parent=parent.number, **stats.as_dict())
        return stats

    async def find_similar(self, title: str) -> Issue | None:
        """Return an open issue whose title matches ``title``, if any."""
        open_issues = await self._read(lambda: self.tracker.list_open_issues(), "list_open_issues")
        return next((issue for issue in open_issues if protocol.titles_match(issue.title, title)), None)

    async def _create_sub_issue(self, parent: Issue, title: str) -> Issue:
        body = self.templates.render(
            "sub_issue.md.j2",
            {
                "parent_title": parent.title,
                "parent_number": parent.number,
                "parent_url": parent.url,
                "draft_title": title,
            },
        )
        return await self._write(
            lambda: self.tracker.create_issue(title=title, body=body, labels=[self.tracking.sub_issue_label]),
            "create_sub_issue",
        )
