from __future__ import annotations

"""Sequential step workflow.

CONTRACT
- Inputs: ordered steps, WorkflowEnvironment, initial state
- Outputs (required):
  - WorkflowResult: Success(last step's value) or Failure(first cause)
- Invariants:
  - Steps run in order on the calling thread
  - No step runs after a failure
  - Builders are immutable: then() returns a new workflow
- Failure:
  - Never raises for step failures; exceptions raised by steps become Failure
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger

from .base import WorkflowEnvironment, WorkflowStep
from .result import Failure, Success, WorkflowResult


def _step_name(step: WorkflowStep) -> str:
    return getattr(step, "name", type(step).__name__)


@dataclass(frozen=True)
class StepWorkflow:
    steps: tuple[WorkflowStep, ...] = ()

    @staticmethod
    def just(step: WorkflowStep) -> "StepWorkflow":
        return StepWorkflow(steps=(step,))

    @staticmethod
    def first(step: WorkflowStep) -> "StepWorkflow":
        return StepWorkflow(steps=(step,))

    def then(self, step: WorkflowStep) -> "StepWorkflow":
        return StepWorkflow(steps=self.steps + (step,))

    def prepend(self, step: WorkflowStep) -> "StepWorkflow":
        return StepWorkflow(steps=(step,) + self.steps)

    def step_names(self) -> list[str]:
        return [_step_name(s) for s in self.steps]

    def run(self, env: WorkflowEnvironment, initial_state: Any = None) -> WorkflowResult[Any]:
        state = initial_state
        for index, step in enumerate(self.steps):
            name = _step_name(step)
            logger.debug("Running step {}/{}: {}", index + 1, len(self.steps), name)
            try:
                result = step.run(env, state)
            except Exception as e:
                result = Failure(e)

            if not isinstance(result, (Success, Failure)):
                result = Failure(TypeError(f"Step {name} returned {type(result).__name__}, expected a WorkflowResult"))

            if result.is_failure():
                logger.debug("Step {} failed: {}", name, result.cause)
                self._emit(env, step=name, status="FAIL", error=f"{type(result.cause).__name__}: {result.cause}")
                return result

            self._emit(env, step=name, status="OK")
            state = result.value
        return Success(state)

    @staticmethod
    def _emit(env: WorkflowEnvironment, **event: Any) -> None:
        if env.event_log is not None:
            env.event_log.emit(event="workflow_step", **event)
