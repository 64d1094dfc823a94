from __future__ import annotations

from dataclasses import dataclass, field

import pytest
from loguru import logger

from viewgate.config import InstancesConfig, ServerConfig, ServerInstance
from viewgate.transport.base import ConnectionResult, NamedView

SERVER_URL = "https://cov.example.com:8443"


@dataclass
class FakeTransport:
    """In-memory Transport that records every call it receives."""

    issue_count: int = 0
    connect_error: Exception | None = None
    connection_result: ConnectionResult = field(default_factory=ConnectionResult.success)
    views: list[NamedView] = field(default_factory=list)
    views_error: Exception | None = None
    issue_error: Exception | None = None
    calls: list[str] = field(default_factory=list)
    configs: list[ServerConfig] = field(default_factory=list)

    def connect(self, config: ServerConfig) -> None:
        self.calls.append("connect")
        self.configs.append(config)
        if self.connect_error is not None:
            raise self.connect_error

    def attempt_connection(self, config: ServerConfig) -> ConnectionResult:
        self.calls.append("attempt_connection")
        return self.connection_result

    def list_views(self, config: ServerConfig) -> list[NamedView]:
        self.calls.append("list_views")
        if self.views_error is not None:
            raise self.views_error
        return list(self.views)

    def get_issue_count(self, config: ServerConfig, project_name: str, view_name: str) -> int:
        self.calls.append(f"get_issue_count:{project_name}:{view_name}")
        if self.issue_error is not None:
            raise self.issue_error
        return self.issue_count


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def instance() -> ServerInstance:
    return ServerInstance(url=SERVER_URL, username="builder", password="s3cret-pass")


@pytest.fixture
def instances(instance) -> InstancesConfig:
    return InstancesConfig(instances=(instance,))


@pytest.fixture
def log_records():
    records = []
    handler_id = logger.add(lambda m: records.append(m.record), level="TRACE", format="{message}")
    yield records
    logger.remove(handler_id)
