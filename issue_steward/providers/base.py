"""
Abstract base classes for providers.

The daily run talks to two external collaborators: the issue tracker
(which is also the only place state is kept) and the narrative generator.
Both are reached through these interfaces so stages can be tested against
in-memory fakes.
"""

from abc import ABC, abstractmethod

from issue_steward.models.domain import Comment, Issue, PullRequest, Reaction
from issue_steward.models.narrative import Narrative, RepoSnapshot


class TrackerProvider(ABC):
    """Abstract base class for issue tracker implementations.

    All methods are async. Implementations convert provider payloads into
    the domain records from ``issue_steward.models.domain`` and let provider
    errors propagate; retrying is the caller's job (see
    ``issue_steward.utils.retry``).
    """

    async def connect(self) -> None:
        """Open the connection to the tracker. No-op by default."""

    async def disconnect(self) -> None:
        """Release the connection. No-op by default."""

    @abstractmethod
    async def list_open_issues(
        self,
        labels: list[str] | None = None,
        limit: int | None = None,
    ) -> list[Issue]:
        """List open issues, most recently updated first.

        Args:
            labels: Only return issues carrying ALL of these labels.
            limit: Maximum number of records; None for every open issue.

        Returns:
            Issues and pull requests (flagged with ``is_pull_request``).
        """
        pass

    @abstractmethod
    async def list_open_pull_requests(self, limit: int | None = None) -> list[PullRequest]:
        """List open pull requests, most recently updated first."""
        pass

    @abstractmethod
    async def get_issue(self, issue_number: int) -> Issue:
        """Get a single issue by number."""
        pass

    @abstractmethod
    async def create_issue(
        self,
        title: str,
        body: str,
        labels: list[str] | None = None,
    ) -> Issue:
        """Create a new issue and return it with its assigned number and URL."""
        pass

    @abstractmethod
    async def list_comments(self, issue_number: int) -> list[Comment]:
        """List every comment on an issue, oldest first."""
        pass

    @abstractmethod
    async def create_comment(self, issue_number: int, body: str) -> Comment:
        """Post a comment on an issue."""
        pass

    @abstractmethod
    async def list_comment_reactions(self, issue_number: int, comment_id: int) -> list[Reaction]:
        """List reactions on one comment of an issue."""
        pass


class NarrativeProvider(ABC):
    """Abstract base class for narrative generators.

    A generator turns a repository snapshot into a status summary and
    action proposals. Failure, including malformed output, is reported by
    returning None rather than by raising.
    """

    async def aclose(self) -> None:
        """Release any held resources. No-op by default."""

    @abstractmethod
    async def generate(self, snapshot: RepoSnapshot) -> Narrative | None:
        """Generate a narrative for ``snapshot``.

        Returns:
            The validated narrative, or None when generation failed.
        """
        pass
