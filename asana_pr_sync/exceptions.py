"""Custom exception hierarchy for asana-pr-sync.

Exception Hierarchy:
    AsanaSyncError (base)
    ├── ConfigurationError
    └── ExternalServiceError
        └── AuthorizationError

Fatal problems (bad inputs, no pull request context, rejected credentials)
surface as ConfigurationError or AuthorizationError and abort the run.
ExternalServiceError is raised by the provider clients for any transport or
HTTP failure; the synchronizer decides per operation whether it propagates
or is recorded as a failed task outcome.

Example Usage:
    >>> from asana_pr_sync.exceptions import ConfigurationError
    >>> try:
    ...     targets = parse_targets(raw)
    ... except yaml.YAMLError as e:
    ...     raise ConfigurationError(f"Invalid targets input: {e}") from e
"""


class AsanaSyncError(Exception):
    """Base exception for all asana-pr-sync errors.

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


class ConfigurationError(AsanaSyncError):
    """Configuration-related errors.

    Examples:
        - Missing required action input
        - Unrecognized action name
        - Malformed move targets
        - No pull request context available, or the PR fetch failed
    """

    pass


class ExternalServiceError(AsanaSyncError):
    """External service communication errors.

    Raised when a call to Asana or GitHub fails (HTTP error status,
    connection failure, timeout).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_text: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response_text: Response body text (if applicable)
        """
        self.message = message
        self.status_code = status_code
        self.response_text = response_text

        full_message = message
        if status_code:
            full_message = f"{message} (HTTP {status_code})"

        super().__init__(full_message)
        self.message = message


class AuthorizationError(ExternalServiceError):
    """The tracker rejected the configured access token."""

    pass
