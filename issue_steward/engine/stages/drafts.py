"""Drafts stage - extracts draft items and runs the approval gate.

Protocol:
    The gate is a two-phase commit whose state lives entirely in the
    tracking issue, so every run re-derives where it stands:

    1. No drafts written yet           -> nothing to do
    2. Drafts but no confirmation      -> post a confirmation request, stop
    3. Confirmation without reaction   -> still waiting, stop
    4. Confirmation with the reaction  -> materialize sub-issues

    Re-running at any phase is safe: the confirmation request is found
    again by its marker and author type, the reaction is re-checked, and
    materialization skips drafts that already have a matching open issue.

Pinned approval:
    With ``tracking.pin_approved_drafts`` on (the default), approval only
    covers the list shown in the confirmation request. If the drafts region
    no longer matches that list, a fresh request for the current list is
    posted and nothing is created until it is approved. With the flag off,
    an approved request releases whatever the drafts region holds now.
"""

import structlog

from issue_steward.engine import protocol
from issue_steward.engine.protocol import DraftRegionStatus
from issue_steward.engine.stages.base import RunStage
from issue_steward.engine.stages.materialize import SubIssueMaterializer
from issue_steward.models.domain import Comment, DraftItem, RunStatistics

log = structlog.get_logger(__name__)


class DraftGateStage(RunStage):
    """Draft extraction and the reaction-based approval gate."""

    def __init__(self, *args, materializer: SubIssueMaterializer | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.materializer = materializer or SubIssueMaterializer(self.tracker, self.settings, self.templates)

    async def process_drafts(self, issue_number: int) -> RunStatistics:
        """Advance the draft promotion protocol for one tracking issue.

        Never raises: unexpected faults are logged and the counters gathered
        so far are returned.

        Returns:
            ``processed`` is the number of draft items found; ``created``
            and ``existed`` stay zero unless approval was found.
        """
        stats = RunStatistics()

        try:
            issue = await self._read(lambda: self.tracker.get_issue(issue_number), "get_issue")

            region = protocol.extract_drafts_region(
                issue.body,
                self.tracking.drafts_header,
                self.tracking.drafts_placeholder,
            )
            if region.status is DraftRegionStatus.HEADER_MISSING:
                log.info("drafts_section_missing", issue=issue_number, header=self.tracking.drafts_header)
                return stats
            if region.status is not DraftRegionStatus.FOUND:
                log.info("drafts_not_authored", issue=issue_number, status=region.status.value)
                return stats

            drafts = protocol.parse_draft_items(region.text)
            stats.processed = len(drafts)
            if not drafts:
                log.info("drafts_no_list_items", issue=issue_number)
                return stats

            log.info("drafts_found", issue=issue_number, count=len(drafts))

            comments = await self._read(lambda: self.tracker.list_comments(issue_number), "list_comments")
            confirmation = self.find_confirmation(comments)

            if confirmation is None:
                await self.request_confirmation(issue_number, drafts)
                return stats

            if self.tracking.pin_approved_drafts and not self._shows_current_drafts(confirmation, drafts):
                log.warning("drafts_changed_since_confirmation", issue=issue_number, comment=confirmation.id)
                await self.request_confirmation(issue_number, drafts)
                return stats

            if not await self.is_approved(issue_number, confirmation):
                log.info("drafts_awaiting_approval", issue=issue_number, comment=confirmation.id)
                return stats

            log.info("drafts_approved", issue=issue_number, comment=confirmation.id, count=len(drafts))
            await self.materializer.materialize(issue, drafts, stats)

        except Exception as e:
            log.error("drafts_processing_failed", issue=issue_number, error=str(e), exc_info=True)

        return stats

    def find_confirmation(self, comments: list[Comment]) -> Comment | None:
        """Most recent automation-authored comment carrying the marker."""
        matches = [
            comment
            for comment in comments
            if self.tracking.confirmation_marker in comment.body
            and comment.author_type == self.tracking.automation_author_type
        ]
        return matches[-1] if matches else None

    async def request_confirmation(self, issue_number: int, drafts: list[DraftItem]) -> Comment:
        """Post a confirmation request enumerating ``drafts``."""
        body = self.templates.render(
            "confirmation_comment.md.j2",
            {
                "marker": self.tracking.confirmation_marker,
                "reaction": protocol.reaction_display(self.tracking.approval_reaction),
                "drafts": drafts,
            },
        )
        comment = await self._write(
            lambda: self.tracker.create_comment(issue_number, body),
            "create_confirmation_comment",
        )
        log.info("confirmation_requested", issue=issue_number, comment=comment.id, count=len(drafts))
        return comment

    async def is_approved(self, issue_number: int, confirmation: Comment) -> bool:
        reactions = await self._read(
            lambda: self.tracker.list_comment_reactions(issue_number, confirmation.id),
            "list_reactions",
        )
        return any(reaction.content == self.tracking.approval_reaction for reaction in reactions)

    def _shows_current_drafts(self, confirmation: Comment, drafts: list[DraftItem]) -> bool:
        shown = protocol.parse_confirmation_items(confirmation.body)
        if not shown:
            # Nothing parsable, e.g. a request written by hand; trust it.
            return True
        return [item.line for item in shown] == [item.line for item in drafts]
