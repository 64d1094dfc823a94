from __future__ import annotations

"""Connection validation.

CONTRACT
- Inputs: server URL (+ optional Credentials) or a configured ServerInstance
- Outputs (required):
  - ConnectionOutcome (kind OK / WARNING / ERROR, message, optional status code)
- Invariants:
  - Never raises: every exception is classified into an ERROR outcome
  - A malformed URL is reported before any network call
  - Network calls run inside a scoped log context (instance=<url>) that is
    restored on every exit path
- Failure:
  - ERROR outcome with a one-line (or two-line) human readable message
"""

from dataclasses import dataclass, field
from typing import Literal

from loguru import logger
from pydantic import BaseModel, ConfigDict

from .config import Credentials, ServerConfig, ServerInstance
from .errors import IntegrationError, MalformedUrlError, WebServiceError
from .transport.base import Transport
from .util.redaction import Redactor

OutcomeKind = Literal["OK", "WARNING", "ERROR"]


class ConnectionOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    schema_version: int = 1
    kind: OutcomeKind
    message: str = ""
    status_code: int | None = None
    exception: str | None = None

    @classmethod
    def ok(cls, message: str = "") -> "ConnectionOutcome":
        return cls(kind="OK", message=message)

    @classmethod
    def warning(cls, message: str) -> "ConnectionOutcome":
        return cls(kind="WARNING", message=message)

    @classmethod
    def error(
        cls,
        message: str,
        status_code: int | None = None,
        exception: BaseException | None = None,
    ) -> "ConnectionOutcome":
        return cls(
            kind="ERROR",
            message=message,
            status_code=status_code,
            exception=type(exception).__name__ if exception is not None else None,
        )

    @property
    def is_ok(self) -> bool:
        return self.kind == "OK"

    @property
    def is_error(self) -> bool:
        return self.kind == "ERROR"


def _describe(e: BaseException) -> str:
    return f"{type(e).__name__}: {e}"


@dataclass
class ConnectionValidator:
    transport: Transport
    redactor: Redactor = field(default_factory=Redactor)

    def test_connection_to(self, url: str, credentials: Credentials | None = None) -> ConnectionOutcome:
        redactor = self.redactor.with_secrets(credentials.password if credentials else None)
        try:
            outcome = self._test_connection_to(url, credentials)
        except MalformedUrlError as e:
            outcome = ConnectionOutcome.error(_describe(e), exception=e)
        except WebServiceError as e:
            if "unauthorized" in str(e).lower():
                message = f"Web service error occurred when attempting to connect to {url}\n{_describe(e)}"
            else:
                message = f"User authentication failed when attempting to connect to {url}\n{_describe(e)}"
            outcome = ConnectionOutcome.error(message, exception=e)
        except (IntegrationError, ValueError) as e:
            outcome = ConnectionOutcome.error(str(e), exception=e)
        except Exception as e:
            outcome = ConnectionOutcome.error(
                f"An unexpected error occurred when attempting to connect to {url}\n{_describe(e)}",
                exception=e,
            )
        if outcome.is_error:
            logger.debug("Connection check for {} failed: {}", redactor.redact(url), redactor.redact(outcome.message))
        return outcome.model_copy(update={"message": redactor.redact(outcome.message)})

    def _test_connection_to(self, url: str, credentials: Credentials | None) -> ConnectionOutcome:
        config = ServerConfig.build(url, credentials)
        with logger.contextualize(instance=config.url):
            self.transport.connect(config)
            result = self.transport.attempt_connection(config)
        if result.is_failure():
            status = "" if result.http_status_code is None else result.http_status_code
            return ConnectionOutcome.error(
                f"Could not connect to {url}: {result.failure_message or ''} (Status code: {status})",
                status_code=result.http_status_code,
            )
        return ConnectionOutcome.ok(f"Successfully connected to {url}")

    def test_connection_to_instance(self, instance: ServerInstance) -> ConnectionOutcome:
        try:
            credentials = instance.credentials()
        except ValueError as e:
            return ConnectionOutcome.error(str(e), exception=e)
        return self.test_connection_to(instance.url, credentials)

    def test_connection_ignore_success_message(self, instance: ServerInstance) -> ConnectionOutcome:
        outcome = self.test_connection_to_instance(instance)
        if outcome.is_ok:
            return ConnectionOutcome.ok()
        return outcome
