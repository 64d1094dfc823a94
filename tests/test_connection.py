import pytest
import requests
from loguru import logger

from viewgate.config import Credentials, ServerInstance
from viewgate.connection import ConnectionOutcome, ConnectionValidator
from viewgate.errors import IntegrationError, WebServiceError
from viewgate.transport.base import ConnectionResult

from conftest import SERVER_URL, FakeTransport


@pytest.mark.parametrize("url", ["", "   ", "cov.example.com", "ftp://cov.example.com", "http://", "::::"])
def test_malformed_url_is_error_without_network(url):
    transport = FakeTransport()
    outcome = ConnectionValidator(transport).test_connection_to(url)

    assert outcome.kind == "ERROR"
    assert outcome.message.startswith("MalformedUrlError: ")
    assert outcome.exception == "MalformedUrlError"
    assert transport.calls == []


def test_success_reports_address(fake_transport):
    outcome = ConnectionValidator(fake_transport).test_connection_to(SERVER_URL, Credentials("u", "p"))

    assert outcome.kind == "OK"
    assert outcome.message == f"Successfully connected to {SERVER_URL}"
    assert fake_transport.calls == ["connect", "attempt_connection"]
    assert fake_transport.configs[0].credentials == Credentials("u", "p")


def test_transport_failure_with_status_code():
    transport = FakeTransport(connection_result=ConnectionResult.failed("404 Not Found", http_status_code=404))
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL)

    assert outcome.kind == "ERROR"
    assert outcome.status_code == 404
    assert outcome.message == f"Could not connect to {SERVER_URL}: 404 Not Found (Status code: 404)"


def test_transport_failure_without_status_code():
    transport = FakeTransport(connection_result=ConnectionResult.failed("Name or service not known"))
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL)

    assert outcome.kind == "ERROR"
    assert outcome.status_code is None
    assert outcome.message == f"Could not connect to {SERVER_URL}: Name or service not known (Status code: )"


@pytest.mark.parametrize("text", ["401 Unauthorized", "HTTP 401 UNAUTHORIZED", "request was unauthorized"])
def test_unauthorized_is_web_service_error(text):
    transport = FakeTransport(connect_error=WebServiceError(text))
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL)

    assert outcome.kind == "ERROR"
    assert outcome.message.startswith(f"Web service error occurred when attempting to connect to {SERVER_URL}\n")
    assert f"WebServiceError: {text}" in outcome.message
    assert transport.calls == ["connect"]


def test_other_web_service_error_is_authentication_failure():
    transport = FakeTransport(connect_error=WebServiceError("403 Forbidden"))
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL)

    assert outcome.kind == "ERROR"
    assert outcome.message == (
        f"User authentication failed when attempting to connect to {SERVER_URL}\nWebServiceError: 403 Forbidden"
    )


@pytest.mark.parametrize("error", [IntegrationError("view service unavailable"), ValueError("bad argument")])
def test_integration_and_value_errors_are_raw(error):
    transport = FakeTransport(connect_error=error)
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL)

    assert outcome.kind == "ERROR"
    assert outcome.message == str(error)
    assert outcome.exception == type(error).__name__


def test_unexpected_error_includes_class_name():
    transport = FakeTransport(connect_error=requests.ConnectionError("connection refused"))
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL)

    assert outcome.kind == "ERROR"
    assert outcome.message == (
        f"An unexpected error occurred when attempting to connect to {SERVER_URL}\nConnectionError: connection refused"
    )


def test_never_raises_on_arbitrary_exception():
    transport = FakeTransport(connect_error=RuntimeError("boom"))
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL)
    assert outcome.is_error


def test_password_redacted_from_message():
    transport = FakeTransport(connect_error=IntegrationError("login as builder:s3cret-pass refused"))
    outcome = ConnectionValidator(transport).test_connection_to(SERVER_URL, Credentials("builder", "s3cret-pass"))
    assert "s3cret-pass" not in outcome.message
    assert "[REDACTED]" in outcome.message


def test_log_context_is_scoped_to_network_call():
    seen = []

    class ContextProbe(FakeTransport):
        def connect(self, config):
            logger.info("probe")
            return super().connect(config)

    handler_id = logger.add(lambda m: seen.append(dict(m.record["extra"])), level="INFO", format="{message}")
    try:
        ConnectionValidator(ContextProbe()).test_connection_to(SERVER_URL)
        ConnectionValidator(ContextProbe(connect_error=RuntimeError("x"))).test_connection_to(SERVER_URL)
        logger.info("after")
    finally:
        logger.remove(handler_id)

    assert seen[0] == {"instance": SERVER_URL}
    assert seen[1] == {"instance": SERVER_URL}
    assert seen[-1] == {}


def test_instance_with_incomplete_credentials(fake_transport):
    instance = ServerInstance(url=SERVER_URL, username="builder")
    outcome = ConnectionValidator(fake_transport).test_connection_to_instance(instance)

    assert outcome.kind == "ERROR"
    assert "incomplete" in outcome.message
    assert fake_transport.calls == []


def test_ignore_success_message(fake_transport, instance):
    validator = ConnectionValidator(fake_transport)
    assert validator.test_connection_ignore_success_message(instance) == ConnectionOutcome.ok()

    failing = ConnectionValidator(FakeTransport(connect_error=WebServiceError("401 Unauthorized")))
    outcome = failing.test_connection_ignore_success_message(instance)
    assert outcome.kind == "ERROR"
    assert "Web service error" in outcome.message


def test_outcome_is_frozen():
    outcome = ConnectionOutcome.warning("careful")
    with pytest.raises(Exception):
        outcome.message = "changed"
    assert outcome.kind == "WARNING"
