from __future__ import annotations

"""Step protocol definition.

CONTRACT
- Inputs: WorkflowEnvironment, state produced by the previous step
- Outputs:
  - run(): WorkflowResult (Success carries the next state)
- Invariants:
  - Steps are stateless; everything mutable travels in the threaded state
  - A step may raise instead of returning Failure; the engine converts it
"""

from dataclasses import dataclass
from typing import Any, Protocol

from ..config import InstancesConfig
from ..transport.base import Transport
from ..util.events import EventLog
from .result import WorkflowResult


@dataclass(frozen=True)
class WorkflowEnvironment:
    instances: InstancesConfig
    transport: Transport
    event_log: EventLog | None = None


class WorkflowStep(Protocol):
    name: str

    def run(self, env: WorkflowEnvironment, state: Any) -> WorkflowResult[Any]: ...
