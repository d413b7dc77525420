"""Issue tracker and narrative generator providers."""

from issue_steward.providers.base import NarrativeProvider, TrackerProvider

__all__ = ["NarrativeProvider", "TrackerProvider"]
