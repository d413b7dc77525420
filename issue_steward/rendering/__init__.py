"""Markdown rendering for tracker-facing text."""

from issue_steward.rendering.engine import MarkdownTemplateEngine

__all__ = ["MarkdownTemplateEngine"]
