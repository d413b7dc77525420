"""GitHub tracker implementation using PyGithub and REST API."""

import asyncio
from collections.abc import Callable
from itertools import islice
from typing import TypeVar

import structlog
from github import Auth, Github, GithubException  # type: ignore[import-not-found]
from github.Issue import Issue as GHIssue  # type: ignore[import-not-found]
from github.IssueComment import IssueComment as GHComment  # type: ignore[import-not-found]
from github.PullRequest import PullRequest as GHPullRequest  # type: ignore[import-not-found]
from github.Repository import Repository as GHRepository  # type: ignore[import-not-found]

from issue_steward.models.domain import Comment, Issue, IssueState, PullRequest, Reaction
from issue_steward.providers.base import TrackerProvider

log = structlog.get_logger(__name__)

T = TypeVar("T")


async def _run_sync(func: Callable[[], T]) -> T:
    """Run a synchronous PyGithub call in a worker thread."""
    return await asyncio.to_thread(func)


class GitHubRestProvider(TrackerProvider):
    """GitHub issue tracker using the PyGithub library."""

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        base_url: str = "https://api.github.com",
    ):
        """Initialize GitHub provider.

        Args:
            token: GitHub personal access token or Actions token
            owner: Repository owner (user or organization)
            repo: Repository name
            base_url: GitHub API base URL (for GitHub Enterprise)
        """
        self.token = token.strip() if token else token
        self.owner = owner
        self.repo = repo
        self.base_url = base_url.rstrip("/")
        self._client: Github | None = None
        self._repo: GHRepository | None = None

    async def connect(self) -> None:
        """Initialize GitHub client and resolve the repository."""

        def _connect() -> tuple[Github, GHRepository]:
            client = Github(auth=Auth.Token(self.token), base_url=self.base_url)
            repo = client.get_repo(f"{self.owner}/{self.repo}")
            return client, repo

        self._client, self._repo = await _run_sync(_connect)
        log.info("github_connected", base_url=self.base_url, owner=self.owner, repo=self.repo)

    async def disconnect(self) -> None:
        """Close GitHub client."""
        if self._client:
            await _run_sync(self._client.close)
            self._client = None
            self._repo = None

    @property
    def repository(self) -> GHRepository:
        if self._repo is None:
            raise ConnectionError("GitHub provider is not connected; call connect() first")
        return self._repo

    async def list_open_issues(
        self,
        labels: list[str] | None = None,
        limit: int | None = None,
    ) -> list[Issue]:
        """List open issues (pull requests included) via the issues API."""
        log.info("list_open_issues", labels=labels, limit=limit)

        def _list() -> list[GHIssue]:
            paginated = self.repository.get_issues(
                state="open",
                labels=labels or [],
                sort="updated",
                direction="desc",
            )
            return list(islice(paginated, limit)) if limit else list(paginated)

        try:
            gh_issues = await _run_sync(_list)
            return [self._convert_issue(gh_issue) for gh_issue in gh_issues]
        except GithubException as e:
            log.error("github_list_issues_failed", labels=labels, error=str(e))
            raise

    async def list_open_pull_requests(self, limit: int | None = None) -> list[PullRequest]:
        """List open pull requests."""
        log.info("list_open_pull_requests", limit=limit)

        def _list() -> list[GHPullRequest]:
            paginated = self.repository.get_pulls(state="open", sort="updated", direction="desc")
            return list(islice(paginated, limit)) if limit else list(paginated)

        try:
            gh_pulls = await _run_sync(_list)
            return [self._convert_pull_request(gh_pr) for gh_pr in gh_pulls]
        except GithubException as e:
            log.error("github_list_pulls_failed", error=str(e))
            raise

    async def get_issue(self, issue_number: int) -> Issue:
        """Get single issue by number."""
        log.info("get_issue", number=issue_number)

        try:
            gh_issue = await _run_sync(lambda: self.repository.get_issue(issue_number))
            return self._convert_issue(gh_issue)
        except GithubException as e:
            log.error("github_get_issue_failed", number=issue_number, error=str(e))
            raise

    async def create_issue(
        self,
        title: str,
        body: str,
        labels: list[str] | None = None,
    ) -> Issue:
        """Create a new issue."""
        log.info("create_issue", title=title, labels=labels)

        try:
            gh_issue = await _run_sync(
                lambda: self.repository.create_issue(
                    title=title,
                    body=body,
                    labels=labels or [],
                )
            )
            return self._convert_issue(gh_issue)
        except GithubException as e:
            log.error("github_create_issue_failed", title=title, error=str(e))
            raise

    async def list_comments(self, issue_number: int) -> list[Comment]:
        """Retrieve all comments for an issue."""
        log.info("list_comments", number=issue_number)

        def _list() -> list[GHComment]:
            gh_issue = self.repository.get_issue(issue_number)
            return list(gh_issue.get_comments())

        try:
            gh_comments = await _run_sync(_list)
            return [self._convert_comment(c) for c in gh_comments]
        except GithubException as e:
            log.error("github_list_comments_failed", number=issue_number, error=str(e))
            raise

    async def create_comment(self, issue_number: int, body: str) -> Comment:
        """Add comment to issue."""
        log.info("create_comment", number=issue_number)

        def _create() -> GHComment:
            gh_issue = self.repository.get_issue(issue_number)
            return gh_issue.create_comment(body)

        try:
            gh_comment = await _run_sync(_create)
            return self._convert_comment(gh_comment)
        except GithubException as e:
            log.error("github_create_comment_failed", number=issue_number, error=str(e))
            raise

    async def list_comment_reactions(self, issue_number: int, comment_id: int) -> list[Reaction]:
        """List reactions on an issue comment."""
        log.info("list_comment_reactions", number=issue_number, comment_id=comment_id)

        def _list() -> list[Reaction]:
            gh_comment = self.repository.get_issue(issue_number).get_comment(comment_id)
            return [
                Reaction(content=r.content, user=r.user.login if r.user else "") for r in gh_comment.get_reactions()
            ]

        try:
            return await _run_sync(_list)
        except GithubException as e:
            log.error("github_list_reactions_failed", comment_id=comment_id, error=str(e))
            raise

    def _convert_issue(self, gh_issue: GHIssue) -> Issue:
        """Convert GitHub Issue to our Issue model."""
        state = IssueState.CLOSED if gh_issue.state == "closed" else IssueState.OPEN

        return Issue(
            number=gh_issue.number,
            title=gh_issue.title or "",
            body=gh_issue.body or "",
            state=state,
            labels=[label.name for label in gh_issue.labels],
            created_at=gh_issue.created_at,
            updated_at=gh_issue.updated_at,
            url=gh_issue.html_url,
            is_pull_request=gh_issue.pull_request is not None,
        )

    def _convert_pull_request(self, gh_pr: GHPullRequest) -> PullRequest:
        """Convert GitHub PullRequest to our PullRequest model."""
        return PullRequest(
            number=gh_pr.number,
            title=gh_pr.title or "",
            state=gh_pr.state,
            created_at=gh_pr.created_at,
            updated_at=gh_pr.updated_at,
            labels=[label.name for label in gh_pr.labels],
            draft=bool(gh_pr.draft),
            url=gh_pr.html_url,
        )

    def _convert_comment(self, gh_comment: GHComment) -> Comment:
        """Convert GitHub Comment to our Comment model."""
        user = gh_comment.user
        return Comment(
            id=gh_comment.id,
            body=gh_comment.body or "",
            author=user.login if user else "unknown",
            author_type=user.type if user else "",
            url=gh_comment.html_url,
        )
