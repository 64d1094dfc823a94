from __future__ import annotations

"""Transport protocol definition.

CONTRACT
- Inputs: ServerConfig (URL + optional credentials)
- Outputs (required):
  - connect(): None once the server accepted the session
  - attempt_connection(): ConnectionResult (failure flag, message, status code)
  - list_views(): NamedView list
  - get_issue_count(): int for a project/view pair
- Invariants:
  - attempt_connection never raises; failures are reported in the result
  - http_status_code is None when no HTTP response was received
- Failure:
  - connect raises WebServiceError when the server rejects the session and
    IntegrationError on other HTTP errors
  - list_views / get_issue_count raise IntegrationError on HTTP or payload errors
"""

from dataclasses import dataclass
from typing import Protocol

from ..config import ServerConfig


@dataclass(frozen=True)
class ConnectionResult:
    failure: bool = False
    failure_message: str | None = None
    http_status_code: int | None = None

    @staticmethod
    def success(http_status_code: int | None = None) -> "ConnectionResult":
        return ConnectionResult(failure=False, http_status_code=http_status_code)

    @staticmethod
    def failed(message: str, http_status_code: int | None = None) -> "ConnectionResult":
        return ConnectionResult(failure=True, failure_message=message, http_status_code=http_status_code)

    def is_failure(self) -> bool:
        return self.failure


@dataclass(frozen=True)
class NamedView:
    id: str
    name: str
    type: str = "issues"


class Transport(Protocol):
    def connect(self, config: ServerConfig) -> None: ...

    def attempt_connection(self, config: ServerConfig) -> ConnectionResult: ...

    def list_views(self, config: ServerConfig) -> list[NamedView]: ...

    def get_issue_count(self, config: ServerConfig, project_name: str, view_name: str) -> int: ...
