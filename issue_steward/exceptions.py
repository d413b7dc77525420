"""Custom exception hierarchy for issue-steward.

Exception Hierarchy:
    StewardError (base)
    ├── ConfigurationError
    ├── ExternalServiceError
    │   └── GenerationError
    └── DailyIssueError

Only ``ConfigurationError`` and ``DailyIssueError`` end a run. Everything
else is contained by the stage that raised it and shows up as degraded
output (a missing comment, zero statistics, a skipped draft).

Example Usage:
    >>> from issue_steward.exceptions import ConfigurationError
    >>> try:
    ...     settings = StewardSettings.from_yaml(path)
    ... except ConfigurationError as e:
    ...     click.echo(f"Error: {e.message}", err=True)
"""


class StewardError(Exception):
    """Base exception for all issue-steward errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(StewardError):
    """Configuration-related errors.

    Raised before any network call when required identifiers or
    credentials are missing, or a configuration file is invalid.

    Examples:
        - GITHUB_TOKEN not set
        - Target repository owner/name not resolvable
        - Invalid YAML syntax in the configuration file
    """

    pass


class ExternalServiceError(StewardError):
    """A tracker or generator call failed after its retry budget.

    Attributes:
        message: Human-readable error description
        operation: Label of the operation that failed
    """

    def __init__(self, message: str, operation: str | None = None) -> None:
        """Initialize exception.

        Args:
            message: Error message
            operation: Label of the failing operation, if known
        """
        self.operation = operation
        super().__init__(message)


class GenerationError(ExternalServiceError):
    """The narrative generator returned no usable result."""

    pass


class DailyIssueError(StewardError):
    """The tracking issue could not be located or created.

    Nothing downstream can proceed without a target issue, so this error
    aborts the whole run.
    """

    pass
