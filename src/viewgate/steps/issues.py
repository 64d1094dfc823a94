"""Get-issues-in-view step.

CONTRACT
- Inputs: instance URL, project name, view name; optional ServerConfig state
- Outputs (required):
  - Success(int) with the number of issues the view reports for the project
- Invariants:
  - Reuses the ServerConfig produced by the connect step when present
- Failure:
  - Failure(cause) for configuration, transport or payload errors
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from ..config import ServerConfig
from ..workflow.base import WorkflowEnvironment
from ..workflow.result import Success, WorkflowResult
from .connect import resolve_server_config


@dataclass
class GetIssuesInViewStep:
    instance_url: str
    project_name: str
    view_name: str
    name: str = "get_issues_in_view"

    def run(self, env: WorkflowEnvironment, state: Any = None) -> WorkflowResult[int]:
        config = state if isinstance(state, ServerConfig) else resolve_server_config(env, self.instance_url)
        logger.info("Retrieving issues for project '{}' in view '{}'", self.project_name, self.view_name)
        count = env.transport.get_issue_count(config, self.project_name, self.view_name)
        logger.debug("View '{}' reports {} issues", self.view_name, count)
        return Success(count)
