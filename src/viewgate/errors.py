"""Exception hierarchy.

CONTRACT
- ViewgateError is the base of everything raised on purpose by viewgate.
- MalformedUrlError derives from ValueError so callers treating bad input as
  an argument error keep working.
- CheckFailure is raised only by the issue-check policy, never by the engine.
"""


class ViewgateError(Exception):
    """Base error for viewgate failures."""


class ConfigurationError(ViewgateError):
    """No instances configured, instance not found, or unreadable config."""


class IntegrationError(ViewgateError):
    """The analysis server answered with something we cannot use."""


class WebServiceError(IntegrationError):
    """The server rejected the session (authentication or protocol)."""


class CheckFailure(ViewgateError):
    """Issues were found and the policy says the build must fail."""

    def __init__(self, message: str, issue_count: int | None = None):
        super().__init__(message)
        self.issue_count = issue_count


class MalformedUrlError(ValueError):
    """The server address does not parse as an absolute http(s) URL."""
