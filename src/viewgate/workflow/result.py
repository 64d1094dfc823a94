from __future__ import annotations

"""Workflow results.

CONTRACT
- Outputs:
  - Success(value) or Failure(cause); both immutable
- Invariants:
  - get_data_or_throw_exception() returns the same value on every call for a
    Success and raises the identical cause object on every call for a Failure
"""

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def get_data_or_throw_exception(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    cause: BaseException

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def get_data_or_throw_exception(self) -> NoReturn:
        # Same object on every call.
        raise self.cause


WorkflowResult = Union[Success[T], Failure]
