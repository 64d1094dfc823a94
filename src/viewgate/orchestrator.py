from __future__ import annotations

"""Orchestrator for issue checks.

CONTRACT
- Inputs: IssueCheckRequest, InstancesConfig snapshot, Transport
- Outputs (required):
  - Issue count (int) for the requested project/view
- Invariants:
  - The connect step always runs first and gates the rest of the workflow
  - `return_issue_count=True` only reports found issues (ERROR log line)
  - `return_issue_count` False/None turns found issues into CheckFailure
  - A zero count never raises and is logged at TRACE only
- Failure:
  - Raises the workflow's failure cause (ConfigurationError, IntegrationError, ...)
  - Raises CheckFailure("Found <N> issues in view.") per the policy above
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from loguru import logger
from pydantic import BaseModel

from .config import InstancesConfig
from .errors import CheckFailure
from .steps.factory import WorkflowStepFactory
from .transport.base import Transport
from .util.events import EventLog
from .workflow.base import WorkflowEnvironment
from .workflow.engine import StepWorkflow
from .workflow.result import WorkflowResult


@dataclass(frozen=True)
class IssueCheckRequest:
    instance_url: str
    project_name: str
    view_name: str
    return_issue_count: bool | None = None


class IssueCheckReport(BaseModel):
    schema_version: int = 1
    instance_url: str
    project_name: str
    view_name: str
    issue_count: int | None = None
    failed: bool = False
    message: str = ""


@dataclass
class IssuesStepWorkflow(ABC):
    env: WorkflowEnvironment
    instance_url: str
    step_factory: WorkflowStepFactory = field(default_factory=WorkflowStepFactory)

    @abstractmethod
    def build_workflow(self) -> StepWorkflow: ...

    def run_workflow(self) -> WorkflowResult[int]:
        workflow = self.build_workflow().prepend(self.step_factory.create_step_connect(self.instance_url))
        logger.debug("Running workflow: {}", " -> ".join(workflow.step_names()))
        return workflow.run(self.env)


@dataclass
class CheckForIssuesStepWorkflow(IssuesStepWorkflow):
    project_name: str = ""
    view_name: str = ""
    return_issue_count: bool | None = None

    def build_workflow(self) -> StepWorkflow:
        return StepWorkflow.just(
            self.step_factory.create_step_get_issues_in_view(self.instance_url, self.project_name, self.view_name)
        )

    def perform(self) -> int:
        defect_count = self.run_workflow().get_data_or_throw_exception()
        if defect_count > 0:
            defect_message = f"Found {defect_count} issues in view."
            if self.return_issue_count is True:
                logger.error(defect_message)
            else:
                raise CheckFailure(defect_message, issue_count=defect_count)
        else:
            logger.trace("No issues found in view '{}'", self.view_name)
        return defect_count


def check_for_issues(
    request: IssueCheckRequest,
    instances: InstancesConfig,
    transport: Transport,
    event_log: EventLog | None = None,
) -> int:
    env = WorkflowEnvironment(instances=instances, transport=transport, event_log=event_log)
    workflow = CheckForIssuesStepWorkflow(
        env=env,
        instance_url=request.instance_url,
        project_name=request.project_name,
        view_name=request.view_name,
        return_issue_count=request.return_issue_count,
    )
    return workflow.perform()
