from __future__ import annotations

"""Instance health checks.

CONTRACT
- Inputs: InstancesConfig snapshot, ConnectionValidator
- Outputs (required):
  - DoctorReport (ok=bool, items=[(name, status, details)])
- Invariants:
  - One item per configured instance, in configuration order
  - Does not modify any state (read-only checks)
- Failure:
  - Returns DoctorReport with ok=False if no instance is configured or any
    instance check ends in ERROR
"""

from dataclasses import dataclass

from .config import InstancesConfig
from .connection import ConnectionValidator


@dataclass(frozen=True)
class DoctorItem:
    name: str
    status: str
    details: str


@dataclass(frozen=True)
class DoctorReport:
    ok: bool
    items: list[DoctorItem]


def doctor_report(instances: InstancesConfig, validator: ConnectionValidator) -> DoctorReport:
    items: list[DoctorItem] = []
    ok = True

    if instances.is_empty():
        return DoctorReport(
            ok=False,
            items=[DoctorItem("instances", "FAIL", "There are no instances configured")],
        )

    for instance in instances.instances:
        outcome = validator.test_connection_to_instance(instance)
        if outcome.is_error:
            ok = False
            status = "FAIL"
        elif outcome.kind == "WARNING":
            status = "WARN"
        else:
            status = "OK"
        items.append(DoctorItem(instance.url, status, outcome.message))

    return DoctorReport(ok=ok, items=items)
