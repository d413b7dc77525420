"""
Domain models for the tracker boundary.

Provider payloads are converted into these records as soon as they are
received; nothing past the provider layer touches a PyGithub object.

Example:
    Building a draft item from a drafts region line::

        item = DraftItem(index=1, line="- Write release notes", title="Write release notes")
"""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum


class IssueState(str, Enum):
    """Enumeration of possible issue states."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass
class Issue:
    """Represents an issue (or a pull request listed as an issue).

    GitHub's issue listing endpoint returns pull requests too; they are kept
    here with ``is_pull_request`` set so callers decide whether they count.
    """

    number: int
    """Human-readable issue number (e.g., #42)."""

    title: str
    """Issue title, a single line."""

    body: str
    """Issue description in markdown. Empty string when the issue has none."""

    state: IssueState
    """Current state of the issue (open or closed)."""

    labels: list[str]
    """Label names attached to the issue."""

    created_at: datetime | None
    """Timestamp when the issue was created."""

    updated_at: datetime | None
    """Timestamp of the most recent update to the issue."""

    url: str
    """Web URL of the issue."""

    is_pull_request: bool = False
    """True when the record is a pull request surfaced by the issues API."""


@dataclass
class PullRequest:
    """Represents an open pull request."""

    number: int
    title: str
    state: str
    created_at: datetime | None
    updated_at: datetime | None
    labels: list[str]
    draft: bool
    url: str


@dataclass
class Comment:
    """Represents an issue comment.

    ``author_type`` is the provider's account type ("User", "Bot",
    "Organization"). The approval gate only trusts confirmation requests
    written by the automation identity, which is recognised by this field.
    """

    id: int
    body: str
    author: str
    author_type: str
    url: str = ""


@dataclass
class Reaction:
    """A reaction on a comment, e.g. ``+1`` or ``rocket``."""

    content: str
    user: str = ""


@dataclass
class DailyIssue:
    """Identity of the tracking issue for one calendar date."""

    number: int
    url: str
    title: str
    created: bool = False
    """True when this run created the issue rather than finding it."""


@dataclass
class DraftItem:
    """One list item from the drafts region of a tracking issue.

    Recomputed from the issue body on every run; never stored.
    """

    index: int
    """1-based position in the drafts region."""

    line: str
    """The stripped source line, list prefix included."""

    title: str
    """The line with its bullet or ordinal prefix removed."""


@dataclass
class RunStatistics:
    """Per-run draft processing counters."""

    processed: int = 0
    created: int = 0
    existed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass
class RunReport:
    """What a daily run reports back to its caller."""

    issue_url: str
    summary_preview: str
    actions_preview: str
    statistics: RunStatistics = field(default_factory=RunStatistics)
    comment_url: str | None = None
    generated: bool = False

    def outputs(self) -> dict[str, str]:
        """Flatten the report into named string outputs."""
        return {
            "issue_url": self.issue_url,
            "reminder": self.summary_preview,
            "action_suggestions": self.actions_preview,
            "sub_issues_processed": json.dumps(self.statistics.as_dict(), separators=(",", ":")),
        }

