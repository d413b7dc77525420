"""
Tracker wire conventions and the drafts micro-parser.

The tracker stores everything as free text, so a handful of fixed strings
act as structured fields: the tracking label and title, the drafts section
header, the confirmation comment marker. They are shared with tracking
issues that already exist and must not change.

Parsing outcomes are explicit (see ``DraftRegionStatus``) so callers can
tell "no drafts section", "nothing written yet" and "drafts found" apart.

Example:
    >>> region = extract_drafts_region(body, DRAFTS_SECTION_HEADER, DRAFTS_PLACEHOLDER)
    >>> if region.status is DraftRegionStatus.FOUND:
    ...     items = parse_draft_items(region.text)
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

from issue_steward.models.domain import DraftItem

DAILY_ISSUE_LABEL = "daily-task-summary"
DAILY_ISSUE_TITLE_PREFIX = "Task Status"
DRAFTS_SECTION_HEADER = "## メモ・下書き"
DRAFTS_PLACEHOLDER = "<!-- Add any draft notes"
SUB_ISSUE_LABEL = "sub-issue"
CONFIRMATION_MARKER = "下書きセクションからの子Issueの作成"
APPROVAL_REACTION = "+1"
AUTOMATION_AUTHOR_TYPE = "Bot"

SECTION_MARKER = "##"

REACTION_DISPLAY = {
    "+1": "👍 (thumbs up)",
    "heart": "❤️ (heart)",
    "hooray": "🎉 (hooray)",
    "rocket": "🚀 (rocket)",
}

LIST_ITEM_PATTERN = re.compile(r"^(-|\*|\d+\.)\s+.+")
LIST_PREFIX_PATTERN = re.compile(r"^(-|\*|\d+\.)\s+")
ENUMERATED_LINE_PATTERN = re.compile(r"^(\d+)\.\s+(.+)$")


class DraftRegionStatus(str, Enum):
    """Outcome of looking for the drafts region in an issue body."""

    HEADER_MISSING = "header_missing"
    EMPTY = "empty"
    PLACEHOLDER = "placeholder"
    FOUND = "found"


@dataclass(frozen=True)
class DraftRegion:
    status: DraftRegionStatus
    text: str = ""


def reaction_display(content: str) -> str:
    """How a reaction is named in instructions posted to the tracker."""
    return REACTION_DISPLAY.get(content, f"`{content}`")


def daily_title(prefix: str, day: date) -> str:
    """Title of the tracking issue for ``day``: ``"<prefix> YYYY-MM-DD"``."""
    return f"{prefix} {day.isoformat()}"


def extract_drafts_region(body: str, header: str, placeholder: str) -> DraftRegion:
    """Cut the drafts region out of a tracking issue body.

    The region starts right after ``header`` and ends at the next ``##``
    marker or at the end of the body. It is returned trimmed.

    Args:
        body: Full issue body (may be empty).
        header: Drafts section header.
        placeholder: Text of the template's placeholder comment. A region
            still containing it has not been authored yet.
    """
    start = body.find(header)
    if start == -1:
        return DraftRegion(DraftRegionStatus.HEADER_MISSING)

    rest = body[start + len(header) :]
    end = rest.find(SECTION_MARKER)
    text = (rest[:end] if end != -1 else rest).strip()

    if not text:
        return DraftRegion(DraftRegionStatus.EMPTY)
    if placeholder and placeholder in text:
        return DraftRegion(DraftRegionStatus.PLACEHOLDER, text)
    return DraftRegion(DraftRegionStatus.FOUND, text)


def strip_list_prefix(line: str) -> str:
    """Remove a leading ``-``, ``*`` or ``N.`` list marker."""
    return LIST_PREFIX_PATTERN.sub("", line.strip(), count=1).strip()


def parse_draft_items(region: str) -> list[DraftItem]:
    """Turn a drafts region into draft items, in source order.

    Only bulleted (``-``/``*``) and ordinal (``1.``) lines count; any other
    line is ignored.
    """
    lines = [line.strip() for line in region.split("\n")]
    drafts = [line for line in lines if LIST_ITEM_PATTERN.match(line)]
    return [DraftItem(index=i, line=line, title=strip_list_prefix(line)) for i, line in enumerate(drafts, start=1)]


def parse_confirmation_items(comment_body: str) -> list[DraftItem]:
    """Recover the draft list enumerated in a confirmation comment.

    Confirmation comments list every draft line as ``N. <line>``. Only
    enumerated lines whose payload is itself a list item are taken, which
    skips numbered prose elsewhere in the comment.
    """
    items: list[DraftItem] = []
    for raw in comment_body.split("\n"):
        match = ENUMERATED_LINE_PATTERN.match(raw.strip())
        if not match:
            continue
        line = match.group(2).strip()
        if not LIST_ITEM_PATTERN.match(line):
            continue
        items.append(DraftItem(index=len(items) + 1, line=line, title=strip_list_prefix(line)))
    return items


def titles_match(existing_title: str, draft_title: str) -> bool:
    """Case-insensitive equality or containment in either direction.

    Containment runs both ways so that an open "Refactor database module"
    absorbs the draft "Refactor database" and vice versa. The cost is that a
    short open title such as "CI" absorbs any draft mentioning CI.
    """
    existing = existing_title.strip().casefold()
    draft = draft_title.strip().casefold()
    if not existing or not draft:
        return False
    return existing == draft or draft in existing or existing in draft
