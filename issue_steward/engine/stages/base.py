"""
Base class for daily run stages.

Stage Lifecycle:
    Stages are built once per run by the orchestrator and share the same
    tracker, settings and template engine. Each run is a single linear pass,
    so stages hold no state of their own between calls; everything they
    need is re-read from the tracker.

Tracker Calls:
    Stages never call the tracker directly. Reads go through ``_read`` and
    writes through ``_write`` so every call carries the configured retry
    budget and an operation label for the logs.
"""

from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from issue_steward.config.settings import StewardSettings
from issue_steward.providers.base import TrackerProvider
from issue_steward.rendering.engine import MarkdownTemplateEngine

log = structlog.get_logger(__name__)

T = TypeVar("T")


class RunStage:
    """Shared plumbing for stages.

    Attributes:
        tracker: Issue tracker provider.
        settings: Run configuration.
        templates: Markdown template engine for tracker-facing text.
    """

    def __init__(
        self,
        tracker: TrackerProvider,
        settings: StewardSettings,
        templates: MarkdownTemplateEngine | None = None,
    ) -> None:
        self.tracker = tracker
        self.settings = settings
        self.templates = templates or MarkdownTemplateEngine()
        self.read_policy = settings.retry.read.policy()
        self.write_policy = settings.retry.write.policy()

    @property
    def tracking(self):
        return self.settings.tracking

    async def _read(self, operation: Callable[[], Awaitable[T]], label: str) -> T:
        return await self.read_policy.run(operation, label)

    async def _write(self, operation: Callable[[], Awaitable[T]], label: str) -> T:
        return await self.write_policy.run(operation, label)
