"""Data models for the issue tracker boundary and generator payloads."""

from issue_steward.models.domain import (
    Comment,
    DailyIssue,
    DraftItem,
    Issue,
    IssueState,
    PullRequest,
    Reaction,
    RunReport,
    RunStatistics,
)
from issue_steward.models.narrative import IssueSummary, Narrative, PullRequestSummary, RepoSnapshot

__all__ = [
    "Comment",
    "DailyIssue",
    "DraftItem",
    "Issue",
    "IssueState",
    "IssueSummary",
    "Narrative",
    "PullRequest",
    "PullRequestSummary",
    "Reaction",
    "RepoSnapshot",
    "RunReport",
    "RunStatistics",
]
