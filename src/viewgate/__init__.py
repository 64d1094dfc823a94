"""viewgate package.

Simple API for CI jobs and scripts:

    import viewgate

    # Fail the build when the view reports issues
    count = viewgate.check_for_issues(
        "https://coverity.example.com:8443", "my-project", "Outstanding Issues"
    )

    # Test a server address and credentials
    outcome = viewgate.validate_connection("https://coverity.example.com:8443")
"""

from pathlib import Path
from typing import Optional

from .config import Credentials, InstancesConfig, ServerInstance, load_instances
from .connection import ConnectionOutcome, ConnectionValidator
from .errors import CheckFailure, ConfigurationError, IntegrationError, ViewgateError
from .orchestrator import IssueCheckRequest
from .orchestrator import check_for_issues as _check_for_issues
from .transport.base import Transport
from .transport.http import HttpTransport
from .util.events import EventLog

__version__ = "0.1.0"


def check_for_issues(
    instance_url: str,
    project_name: str,
    view_name: str,
    return_issue_count: Optional[bool] = None,
    *,
    instances: Optional[InstancesConfig] = None,
    config_file: Optional[str | Path] = None,
    transport: Optional[Transport] = None,
    events_file: Optional[str | Path] = None,
) -> int:
    """Return the number of issues in a view, or raise CheckFailure.

    Args:
        instance_url: URL of a configured instance
        project_name: Project on the server
        view_name: Saved view to count issues in
        return_issue_count: True only reports found issues; False/None fails
        instances: Explicit snapshot (otherwise loaded from config_file or defaults)
        config_file: Optional path to instances.yaml
        transport: Optional transport (defaults to HttpTransport)
        events_file: Optional JSONL file receiving workflow events

    Raises:
        CheckFailure: issues were found and return_issue_count is not True
        ConfigurationError: no instances, or the instance is not configured
        IntegrationError: the server could not be reached or queried
    """
    snapshot = instances if instances is not None else load_instances(Path(config_file) if config_file else None)
    request = IssueCheckRequest(
        instance_url=instance_url,
        project_name=project_name,
        view_name=view_name,
        return_issue_count=return_issue_count,
    )
    event_log = EventLog(Path(events_file), workflow="check_for_issues") if events_file else None
    return _check_for_issues(
        request,
        snapshot,
        transport or HttpTransport(timeout_s=snapshot.timeout_s),
        event_log=event_log,
    )


def validate_connection(
    url: str,
    credentials: Optional[Credentials] = None,
    *,
    transport: Optional[Transport] = None,
) -> ConnectionOutcome:
    """Test a server address and credentials. Never raises."""
    return ConnectionValidator(transport or HttpTransport()).test_connection_to(url, credentials)


__all__ = [
    "check_for_issues",
    "validate_connection",
    "CheckFailure",
    "ConfigurationError",
    "ConnectionOutcome",
    "Credentials",
    "InstancesConfig",
    "IntegrationError",
    "ServerInstance",
    "ViewgateError",
]
