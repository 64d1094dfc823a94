"""Connect step.

CONTRACT
- Inputs: instance URL, WorkflowEnvironment (instances snapshot, transport)
- Outputs (required):
  - Success(ServerConfig) for the instance once the connection check passed
- Invariants:
  - Gates every later step: runs first in every issue workflow
  - Uses ConnectionValidator, so transport exceptions never escape raw
- Failure:
  - Failure(ConfigurationError) when the instance is not configured
  - Failure(IntegrationError) carrying the validator's message otherwise
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from ..config import ServerConfig, ServerInstance
from ..connection import ConnectionValidator
from ..errors import ConfigurationError, IntegrationError
from ..workflow.base import WorkflowEnvironment
from ..workflow.result import Failure, Success, WorkflowResult


def find_configured_instance(env: WorkflowEnvironment, instance_url: str) -> ServerInstance:
    if env.instances.is_empty():
        raise ConfigurationError("There are no instances configured")
    instance = env.instances.find_instance(instance_url)
    if instance is None:
        raise ConfigurationError(f"There are no instances configured with the name {instance_url}")
    return instance


def resolve_server_config(env: WorkflowEnvironment, instance_url: str) -> ServerConfig:
    instance = find_configured_instance(env, instance_url)
    return ServerConfig.build(instance.url, instance.credentials())


@dataclass
class ConnectStep:
    instance_url: str
    name: str = "connect"

    def run(self, env: WorkflowEnvironment, state: Any = None) -> WorkflowResult[ServerConfig]:
        try:
            instance = find_configured_instance(env, self.instance_url)
        except ConfigurationError as e:
            return Failure(e)

        outcome = ConnectionValidator(env.transport).test_connection_to_instance(instance)
        if outcome.is_error:
            return Failure(IntegrationError(outcome.message))

        logger.info("Connected to {}", instance.url)
        return Success(ServerConfig.build(instance.url, instance.credentials()))
