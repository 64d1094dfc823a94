from __future__ import annotations

from dataclasses import dataclass

from .connect import ConnectStep
from .issues import GetIssuesInViewStep


@dataclass(frozen=True)
class WorkflowStepFactory:
    """Creates the concrete steps issue workflows are assembled from."""

    def create_step_connect(self, instance_url: str) -> ConnectStep:
        return ConnectStep(instance_url=instance_url)

    def create_step_get_issues_in_view(
        self, instance_url: str, project_name: str, view_name: str
    ) -> GetIssuesInViewStep:
        return GetIssuesInViewStep(
            instance_url=instance_url,
            project_name=project_name,
            view_name=view_name,
        )
