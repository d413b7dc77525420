"""issue-steward: daily repository status tracking and draft promotion."""

__version__ = "0.1.0"
