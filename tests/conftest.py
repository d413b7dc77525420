"""Pytest configuration and shared fixtures."""

from datetime import UTC, date, datetime
from itertools import count

import pytest

from issue_steward.config.settings import StewardSettings
from issue_steward.models.domain import Comment, Issue, IssueState, PullRequest, Reaction
from issue_steward.providers.base import TrackerProvider
from issue_steward.rendering.engine import MarkdownTemplateEngine

TODAY = date(2026, 10, 19)
DAILY_TITLE = "Task Status 2026-10-19"


class FakeTracker(TrackerProvider):
    """In-memory issue tracker.

    Keeps issues, comments and reactions across calls so that several runs
    can be played against the same tracker state. Comments it creates are
    authored by the automation identity ("Bot").

    ``failures`` maps an operation name to the number of upcoming calls
    that should raise; ``fail_titles`` makes ``create_issue`` fail for
    specific titles on every call.
    """

    def __init__(self) -> None:
        self.issues: dict[int, Issue] = {}
        self.pulls: list[PullRequest] = []
        self.comments: dict[int, list[Comment]] = {}
        self.reactions: dict[int, list[Reaction]] = {}
        self.failures: dict[str, int] = {}
        self.fail_titles: set[str] = set()
        self.calls: list[str] = []
        self._numbers = count(1)
        self._comment_ids = count(1000)

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        remaining = self.failures.get(operation, 0)
        if remaining:
            self.failures[operation] = remaining - 1
            raise ConnectionError(f"{operation} unavailable")

    def add_issue(self, title: str, body: str = "", labels: list[str] | None = None, **kwargs) -> Issue:
        number = next(self._numbers)
        now = datetime(2026, 10, 19, 9, 0, tzinfo=UTC)
        issue = Issue(
            number=number,
            title=title,
            body=body,
            state=kwargs.pop("state", IssueState.OPEN),
            labels=labels or [],
            created_at=now,
            updated_at=now,
            url=f"https://github.com/acme/widgets/issues/{number}",
            **kwargs,
        )
        self.issues[number] = issue
        return issue

    def add_comment(self, issue_number: int, body: str, author_type: str = "User") -> Comment:
        comment = Comment(
            id=next(self._comment_ids),
            body=body,
            author="github-actions[bot]" if author_type == "Bot" else "octocat",
            author_type=author_type,
            url=f"https://github.com/acme/widgets/issues/{issue_number}#issuecomment",
        )
        self.comments.setdefault(issue_number, []).append(comment)
        return comment

    def react(self, comment_id: int, content: str = "+1") -> None:
        self.reactions.setdefault(comment_id, []).append(Reaction(content=content, user="octocat"))

    def comments_on(self, issue_number: int) -> list[Comment]:
        return self.comments.get(issue_number, [])

    def issues_labeled(self, label: str) -> list[Issue]:
        return [issue for issue in self.issues.values() if label in issue.labels]

    async def list_open_issues(self, labels=None, limit=None):
        self._maybe_fail("list_open_issues")
        issues = [
            issue
            for issue in sorted(self.issues.values(), key=lambda i: i.number, reverse=True)
            if issue.state == IssueState.OPEN and all(label in issue.labels for label in labels or [])
        ]
        return issues[:limit] if limit else issues

    async def list_open_pull_requests(self, limit=None):
        self._maybe_fail("list_open_pull_requests")
        return self.pulls[:limit] if limit else list(self.pulls)

    async def get_issue(self, issue_number):
        self._maybe_fail("get_issue")
        return self.issues[issue_number]

    async def create_issue(self, title, body, labels=None):
        self._maybe_fail("create_issue")
        if title in self.fail_titles:
            raise ConnectionError(f"cannot create {title}")
        return self.add_issue(title, body, labels)

    async def list_comments(self, issue_number):
        self._maybe_fail("list_comments")
        return list(self.comments_on(issue_number))

    async def create_comment(self, issue_number, body):
        self._maybe_fail("create_comment")
        return self.add_comment(issue_number, body, author_type="Bot")

    async def list_comment_reactions(self, issue_number, comment_id):
        self._maybe_fail("list_comment_reactions")
        return list(self.reactions.get(comment_id, []))


@pytest.fixture
def tracker() -> FakeTracker:
    """Empty in-memory tracker."""
    return FakeTracker()


@pytest.fixture
def settings() -> StewardSettings:
    """Settings with zero retry delays."""
    no_wait = {"max_attempts": 3, "delay": 0}
    return StewardSettings(
        github={"token": "ghp_test_token"},
        repository={"owner": "acme", "name": "widgets"},
        generator={"api_key": "sk-test"},
        retry={"read": no_wait, "write": no_wait, "generate": no_wait},
    )


@pytest.fixture
def templates() -> MarkdownTemplateEngine:
    return MarkdownTemplateEngine()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def daily_body():
    """Build a tracking issue body with the given drafts region text."""

    def _build(drafts: str) -> str:
        return (
            f"# {DAILY_TITLE}\n\n"
            "## Reminders & Suggestions\n\n*No updates yet.*\n\n"
            "## Metrics & Status\n\n*No updates yet.*\n\n"
            f"## メモ・下書き\n\n{drafts}\n"
        )

    return _build
