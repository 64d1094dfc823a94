from __future__ import annotations

"""Configuration models.

CONTRACT
- Inputs: YAML file path (instances.yaml) or dictionary data
- Outputs (required):
  - Validated InstancesConfig snapshot (read-only, passed explicitly)
  - ServerConfig built from a URL and optional credentials
- Invariants:
  - Server URLs are absolute http/https URLs with a host
  - Credentials are both-or-neither
  - No process-wide registry: callers hold the snapshot they loaded
- Failure:
  - Raises ConfigurationError on unreadable YAML or schema violations
  - Raises MalformedUrlError on bad server addresses
  - Raises ValueError on half-configured credentials
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import yaml

from .errors import ConfigurationError, MalformedUrlError

CONFIG_ENV_VAR = "VIEWGATE_CONFIG"
DEFAULT_CONFIG_PATH = Path(".viewgate") / "instances.yaml"
DEFAULT_VIEWS_CACHE_SECONDS = 300
DEFAULT_TIMEOUT_S = 30


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class ServerConfig:
    url: str
    credentials: Credentials | None = None

    @staticmethod
    def build(url: str, credentials: Credentials | None = None) -> "ServerConfig":
        return ServerConfig(url=parse_server_url(url), credentials=credentials)

    def api_url(self, path: str) -> str:
        return self.url.rstrip("/") + "/" + path.lstrip("/")


@dataclass(frozen=True)
class ServerInstance:
    url: str
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    password_env: str | None = None

    def resolved_password(self) -> str | None:
        if self.password is not None:
            return self.password
        if self.password_env:
            return os.environ.get(self.password_env)
        return None

    def credentials(self) -> Credentials | None:
        password = self.resolved_password()
        if not self.username and not password:
            return None
        if not self.username or not password:
            raise ValueError(
                f"Credentials for {self.url} are incomplete: username and password must both be set."
            )
        return Credentials(username=self.username, password=password)


@dataclass(frozen=True)
class InstancesConfig:
    instances: tuple[ServerInstance, ...] = ()
    views_cache_seconds: int = DEFAULT_VIEWS_CACHE_SECONDS
    timeout_s: int = DEFAULT_TIMEOUT_S

    def is_empty(self) -> bool:
        return not self.instances

    def urls(self) -> list[str]:
        return [i.url for i in self.instances]

    def find_instance(self, url: str | None) -> ServerInstance | None:
        if not url:
            return None
        wanted = url.strip().rstrip("/")
        for instance in self.instances:
            if instance.url.rstrip("/") == wanted:
                return instance
        return None


def parse_server_url(url: str) -> str:
    """Return the normalized URL or raise MalformedUrlError."""
    text = (url or "").strip()
    if not text:
        raise MalformedUrlError("no protocol: ")
    try:
        parts = urlsplit(text)
    except ValueError as exc:
        raise MalformedUrlError(f"{exc}: {text}") from exc
    if not parts.scheme:
        raise MalformedUrlError(f"no protocol: {text}")
    if parts.scheme.lower() not in ("http", "https"):
        raise MalformedUrlError(f"unknown protocol: {parts.scheme}")
    try:
        parts.port
    except ValueError as exc:
        raise MalformedUrlError(f"invalid port: {text}") from exc
    if not parts.hostname:
        raise MalformedUrlError(f"no host: {text}")
    return text


INSTANCES_SCHEMA = {
    "type": "object",
    "properties": {
        "instances": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "url": {"type": "string", "minLength": 1},
                    "username": {"type": ["string", "null"]},
                    "password": {"type": ["string", "null"]},
                    "password_env": {"type": ["string", "null"]},
                },
                "required": ["url"],
                "additionalProperties": False,
            },
        },
        "views_cache_seconds": {"type": "integer", "minimum": 0},
        "timeout_s": {"type": "integer", "minimum": 1},
    },
    "required": ["instances"],
}


def instances_from_dict(data: dict[str, Any]) -> InstancesConfig:
    import jsonschema  # lazy import

    try:
        jsonschema.validate(instance=data, schema=INSTANCES_SCHEMA)
    except jsonschema.ValidationError as e:
        raise ConfigurationError(f"Invalid instances file: {e.message}") from e

    instances: list[ServerInstance] = []
    for raw in data.get("instances", []) or []:
        url = str(raw["url"]).strip()
        try:
            parse_server_url(url)
        except MalformedUrlError as e:
            raise ConfigurationError(f"Invalid instances file: {url!r} is not a valid URL ({e})") from e
        instances.append(
            ServerInstance(
                url=url,
                username=raw.get("username"),
                password=raw.get("password"),
                password_env=raw.get("password_env"),
            )
        )
    return InstancesConfig(
        instances=tuple(instances),
        views_cache_seconds=int(data.get("views_cache_seconds", DEFAULT_VIEWS_CACHE_SECONDS)),
        timeout_s=int(data.get("timeout_s", DEFAULT_TIMEOUT_S)),
    )


def load_instances_file(path: Path) -> InstancesConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid instances file: {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Invalid instances file: {path} must contain a mapping")
    return instances_from_dict(data)


def resolve_config_path(explicit: Path | None = None) -> Path | None:
    if explicit is not None:
        return explicit
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    return None


def load_instances(explicit: Path | None = None) -> InstancesConfig:
    """Load the snapshot from --config, $VIEWGATE_CONFIG or the default path.

    A missing default file yields an empty snapshot; callers report that as
    "no instances configured". An explicitly named file must exist.
    """
    path = resolve_config_path(explicit)
    if path is None:
        return InstancesConfig()
    if not path.exists():
        raise ConfigurationError(f"Instances file not found: {path}")
    return load_instances_file(path)


if __name__ == "__main__":
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Instances config loader")
    parser.add_argument("--config", required=True, help="Path to instances.yaml")
    args = parser.parse_args()

    try:
        cfg = load_instances_file(Path(args.config))
        print(f"Loaded {len(cfg.instances)} instances.")
        for url in cfg.urls():
            print(f"  {url}")
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
