"""Configuration loading for issue-steward."""

from issue_steward.config.settings import StewardSettings

__all__ = ["StewardSettings"]
