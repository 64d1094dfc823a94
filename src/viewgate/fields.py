from __future__ import annotations

"""Form-field helpers for hosts that render instance/view pickers.

CONTRACT
- Inputs: InstancesConfig snapshot, ConnectionValidator, ViewCacheData
- Outputs (required):
  - Option lists as (label, value) pairs ending with the "- none -" entry
  - ConnectionOutcome verdicts for the selected instance / view
- Invariants:
  - Configuration problems are reported without touching the network
  - The *_ignore_message variants only say pass/fail
- Failure:
  - Never raises; problems become ERROR/WARNING outcomes
"""

from dataclasses import dataclass

from .config import InstancesConfig
from .connection import ConnectionOutcome, ConnectionValidator
from .views import ViewCacheData

NONE_OPTION = ("- none -", "")


@dataclass
class InstanceUrlFieldHelper:
    instances: InstancesConfig
    validator: ConnectionValidator

    def fill_instance_url_items(self) -> list[tuple[str, str]]:
        items = [(url, url) for url in self.instances.urls()]
        items.append(NONE_OPTION)
        return items

    def check_instance_url(self, instance_url: str | None) -> ConnectionOutcome:
        if self.instances.is_empty():
            return ConnectionOutcome.error("There are no instances configured")

        if not instance_url or not instance_url.strip():
            return ConnectionOutcome.error("Please choose one of the instances")

        return self.test_connection_ignore_success_message(instance_url)

    def check_instance_url_ignore_message(self, instance_url: str | None) -> ConnectionOutcome:
        outcome = self.check_instance_url(instance_url)
        if outcome.is_error:
            return ConnectionOutcome.error("Selected instance is invalid.")
        return ConnectionOutcome.ok()

    def test_connection_ignore_success_message(self, instance_url: str) -> ConnectionOutcome:
        instance = self.instances.find_instance(instance_url)
        if instance is None:
            return ConnectionOutcome.error(f"There are no instances configured with the name {instance_url}")
        return self.validator.test_connection_ignore_success_message(instance)


@dataclass
class ViewFieldHelper:
    instances: InstancesConfig
    views: ViewCacheData

    def fill_view_name_items(self, instance_url: str | None, refresh: bool = False) -> list[tuple[str, str]]:
        items: list[tuple[str, str]] = []
        instance = self.instances.find_instance(instance_url)
        if instance is not None:
            items = [(name, name) for name in self.views.get_cached_data(instance, refresh=refresh)]
        items.append(NONE_OPTION)
        return items

    def check_view_name(self, instance_url: str | None, view_name: str | None) -> ConnectionOutcome:
        instance = self.instances.find_instance(instance_url)
        if instance is None:
            return ConnectionOutcome.error("Please choose one of the instances")
        if not view_name or not view_name.strip():
            return ConnectionOutcome.warning("Please choose a view")
        names = self.views.get_cached_data(instance)
        if view_name not in names:
            return ConnectionOutcome.warning(f"View '{view_name}' was not found on {instance.url}")
        return ConnectionOutcome.ok()
