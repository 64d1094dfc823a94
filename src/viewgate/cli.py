"""CLI entrypoint.

Primary command (what a CI job calls):
- viewgate check ...

Utilities:
- viewgate validate / instances / views / doctor / init

CONTRACT
- Inputs: Command line arguments (parsed by Typer)
- Outputs (required):
  - Exit code 0 on success
  - Exit code 1 when the issue policy fails the build (CheckFailure)
  - Exit code 2 on configuration, connection or workflow errors
  - Console output (stdout) with the result; logs on stderr
- Invariants:
  - The instances snapshot is loaded once per command and passed explicitly
  - Errors are reported as one line unless --verbose is set
- Failure:
  - Invalid arguments raise Typer BadParameter
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import InstancesConfig, ServerInstance, load_instances
from .connection import ConnectionOutcome, ConnectionValidator
from .doctor import doctor_report
from .errors import CheckFailure, ConfigurationError
from .fields import InstanceUrlFieldHelper, ViewFieldHelper
from .orchestrator import IssueCheckReport, IssueCheckRequest, check_for_issues
from .transport.http import HttpTransport
from .util.events import EventLog
from .views import ViewCacheData

app = typer.Typer(add_completion=False, help="Gate CI builds on issues reported by analysis server views.")

console = Console()

_state = {"verbose": False}


def _stderr_sink(message: str) -> None:
    sys.stderr.write(message)


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        _stderr_sink,
        level="DEBUG" if verbose else "INFO",
        format="<level>{level: <8}</level> {message}",
        colorize=False,
    )


def _version_callback(value: bool):
    if value:
        from . import __version__

        console.print(f"viewgate version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging and full tracebacks."),
):
    _state["verbose"] = verbose
    _configure_logging(verbose)


_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="Instances YAML file (default: $VIEWGATE_CONFIG or .viewgate/instances.yaml).",
)
_INSTANCE_OPTION = typer.Option(
    ...,
    "--instance",
    help="Configured instance URL.",
)
_INSTANCE_OPTIONAL_OPTION = typer.Option(
    None,
    "--instance",
    help="Configured instance URL.",
)
_JSON_OPTION = typer.Option(
    False,
    "--json",
    help="Print a JSON document instead of text.",
)


def _load(config: Path | None) -> InstancesConfig:
    try:
        return load_instances(config)
    except ConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2) from e


def _transport(instances: InstancesConfig) -> HttpTransport:
    return HttpTransport(timeout_s=instances.timeout_s)


def _fail(message: str, exc: BaseException, code: int) -> NoReturn:
    if _state["verbose"]:
        logger.opt(exception=exc).debug("Command failed")
    console.print(f"[red]{message}[/red]")
    raise typer.Exit(code=code)


def _print_outcome(outcome: ConnectionOutcome, as_json: bool) -> None:
    if as_json:
        console.print_json(outcome.model_dump_json())
        return
    color = {"OK": "green", "WARNING": "yellow", "ERROR": "red"}[outcome.kind]
    text = f"[{color}]{outcome.kind}[/{color}]"
    if outcome.message:
        text += f" {outcome.message}"
    console.print(text, highlight=False)


@app.command()
def init(
    root: Path = typer.Option(Path("."), "--root", help="Directory to write .viewgate/ into."),
    force: bool = typer.Option(False, "--force", help="Overwrite existing templates."),
) -> None:
    """Write a `.viewgate/instances.yaml` template."""
    from .init import write_templates

    dest = write_templates(root, force=force)
    console.print(f"[green]Wrote template to[/green] {dest}")


@app.command()
def check(
    instance: str = _INSTANCE_OPTION,
    project: str = typer.Option(..., "--project", help="Project name on the server."),
    view: str = typer.Option(..., "--view", help="View name on the server."),
    return_issue_count: bool = typer.Option(
        False,
        "--return-issue-count",
        help="Only report found issues instead of failing the build.",
    ),
    config: Path | None = _CONFIG_OPTION,
    events_file: Path | None = typer.Option(None, "--events-file", help="Append workflow events (JSONL)."),
    as_json: bool = _JSON_OPTION,
) -> None:
    """Fail (or report) when a view contains issues."""
    instances = _load(config)
    request = IssueCheckRequest(
        instance_url=instance,
        project_name=project,
        view_name=view,
        return_issue_count=return_issue_count,
    )
    event_log = EventLog(events_file, workflow="check_for_issues") if events_file else None
    report = IssueCheckReport(instance_url=instance, project_name=project, view_name=view)

    try:
        count = check_for_issues(request, instances, _transport(instances), event_log=event_log)
    except CheckFailure as e:
        if as_json:
            failed = report.model_copy(update={"issue_count": e.issue_count, "failed": True, "message": str(e)})
            console.print_json(failed.model_dump_json())
            raise typer.Exit(code=1) from e
        _fail(str(e), e, code=1)
    except Exception as e:
        message = str(e) if isinstance(e, ConfigurationError) else f"{type(e).__name__}: {e}"
        if as_json:
            console.print_json(report.model_copy(update={"failed": True, "message": message}).model_dump_json())
            raise typer.Exit(code=2) from e
        _fail(message, e, code=2)

    if as_json:
        console.print_json(report.model_copy(update={"issue_count": count}).model_dump_json())
    else:
        console.print(str(count))


@app.command()
def validate(
    instance: str | None = _INSTANCE_OPTIONAL_OPTION,
    url: str | None = typer.Option(None, "--url", help="Server URL to test (not read from config)."),
    username: str | None = typer.Option(None, "--username", help="Username for --url."),
    password_env: str | None = typer.Option(
        None, "--password-env", help="Environment variable holding the password for --url."
    ),
    ignore_message: bool = typer.Option(False, "--ignore-message", help="Only report pass/fail."),
    config: Path | None = _CONFIG_OPTION,
    as_json: bool = _JSON_OPTION,
) -> None:
    """Validate connectivity and credentials."""
    if url and instance:
        raise typer.BadParameter("Use either --instance or --url, not both.")

    if url:
        validator = ConnectionValidator(HttpTransport())
        target = ServerInstance(url=url, username=username, password_env=password_env)
        outcome = validator.test_connection_to_instance(target)
        if ignore_message and not outcome.is_error:
            outcome = ConnectionOutcome.ok()
    else:
        instances = _load(config)
        helper = InstanceUrlFieldHelper(instances, ConnectionValidator(_transport(instances)))
        if ignore_message:
            outcome = helper.check_instance_url_ignore_message(instance)
        else:
            outcome = helper.check_instance_url(instance)

    _print_outcome(outcome, as_json)
    if outcome.is_error:
        raise typer.Exit(code=2)


@app.command()
def instances(config: Path | None = _CONFIG_OPTION) -> None:
    """List configured instances as (label, value) options."""
    snapshot = _load(config)
    helper = InstanceUrlFieldHelper(snapshot, ConnectionValidator(_transport(snapshot)))
    table = Table(title="viewgate instances")
    table.add_column("Label")
    table.add_column("Value")
    for label, value in helper.fill_instance_url_items():
        table.add_row(label, value)
    console.print(table)


@app.command()
def views(
    instance: str = _INSTANCE_OPTION,
    config: Path | None = _CONFIG_OPTION,
) -> None:
    """List views available on an instance (best effort)."""
    snapshot = _load(config)
    if snapshot.find_instance(instance) is None:
        console.print(f"[red]There are no instances configured with the name {instance}[/red]")
        raise typer.Exit(code=2)
    cache = ViewCacheData(cache_seconds=snapshot.views_cache_seconds, transport=_transport(snapshot))
    helper = ViewFieldHelper(snapshot, cache)
    for label, value in helper.fill_view_name_items(instance):
        if value:
            console.print(label, highlight=False)


@app.command()
def doctor(config: Path | None = _CONFIG_OPTION) -> None:
    """Check every configured instance."""
    snapshot = _load(config)
    report = doctor_report(snapshot, ConnectionValidator(_transport(snapshot)))
    table = Table(title="viewgate doctor")
    table.add_column("Instance")
    table.add_column("Status")
    table.add_column("Details")
    for item in report.items:
        table.add_row(item.name, item.status, item.details)
    console.print(table)
    if report.ok:
        console.print("[green]OK[/green]")
    else:
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
