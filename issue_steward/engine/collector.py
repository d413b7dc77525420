"""Repository snapshot collection for the narrative generator."""

import structlog

from issue_steward.models.domain import Issue, PullRequest
from issue_steward.models.narrative import IssueSummary, PullRequestSummary, RepoSnapshot
from issue_steward.providers.base import TrackerProvider
from issue_steward.utils.retry import RetryPolicy

log = structlog.get_logger(__name__)


class RepoCollector:
    """Collect recently updated open issues and pull requests.

    Only the most recently updated ``limit`` records of each kind are sent
    to the generator, which bounds prompt size and cost.
    """

    def __init__(self, tracker: TrackerProvider, limit: int = 50, retry: RetryPolicy | None = None) -> None:
        self.tracker = tracker
        self.limit = limit
        self.retry = retry or RetryPolicy()

    async def collect_snapshot(self) -> RepoSnapshot:
        """Build the snapshot. Tracker faults propagate after retries."""
        issues = await self.retry.run(lambda: self.tracker.list_open_issues(limit=self.limit), "list_open_issues")
        open_issues = [issue for issue in issues if not issue.is_pull_request]

        pulls = await self.retry.run(
            lambda: self.tracker.list_open_pull_requests(limit=self.limit),
            "list_open_pull_requests",
        )

        log.info("repo_data_collected", issues=len(open_issues), pulls=len(pulls))
        return RepoSnapshot(
            issues=[_summarize_issue(issue) for issue in open_issues],
            pulls=[_summarize_pull(pr) for pr in pulls],
        )


def _summarize_issue(issue: Issue) -> IssueSummary:
    return IssueSummary(
        number=issue.number,
        title=issue.title,
        state=issue.state.value,
        created_at=issue.created_at,
        updated_at=issue.updated_at,
        labels=issue.labels,
    )


def _summarize_pull(pr: PullRequest) -> PullRequestSummary:
    return PullRequestSummary(
        number=pr.number,
        title=pr.title,
        state=pr.state,
        created_at=pr.created_at,
        updated_at=pr.updated_at,
        labels=pr.labels,
        draft=pr.draft,
    )
