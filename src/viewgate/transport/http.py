from __future__ import annotations

"""HTTP transport for Coverity Connect style analysis servers.

All network I/O lives here; parsing of the small payloads we need is kept
next to the call that fetches them.

CONTRACT
- Inputs: ServerConfig, timeout
- Outputs (required):
  - Transport protocol implementation over the server's REST API
- Invariants:
  - Every call opens its own requests.Session and closes it on exit
  - Basic auth is sent only when credentials are configured
- Failure:
  - connect(): WebServiceError on 401/403, IntegrationError on other HTTP
    errors; requests exceptions propagate
  - attempt_connection(): never raises
  - list_views()/get_issue_count(): IntegrationError on HTTP/payload errors,
    requests exceptions propagate
"""

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests
from loguru import logger

from ..config import DEFAULT_TIMEOUT_S, ServerConfig
from ..errors import IntegrationError, WebServiceError
from .base import ConnectionResult, NamedView

VIEWS_PATH = "api/views/v1"
VERSION_PATH = "api/v2/serverInfo/version"
VIEW_CONTENTS_PATH = "api/viewContents/issues/v1"


def _session(config: ServerConfig) -> requests.Session:
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    if config.credentials is not None:
        session.auth = (config.credentials.username, config.credentials.password)
    return session


def _describe(resp: requests.Response) -> str:
    reason = resp.reason or ""
    return f"{resp.status_code} {reason}".strip()


def _json(resp: requests.Response, what: str) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        raise IntegrationError(f"Could not decode {what} response as JSON") from e


@dataclass(frozen=True)
class HttpTransport:
    timeout_s: int = DEFAULT_TIMEOUT_S

    def connect(self, config: ServerConfig) -> None:
        with _session(config) as session:
            resp = session.get(config.api_url(VIEWS_PATH), timeout=self.timeout_s)
        if resp.status_code == 401:
            raise WebServiceError(f"{_describe(resp)}: the server did not accept the supplied credentials")
        if resp.status_code == 403:
            raise WebServiceError(f"{_describe(resp)}: the user may not access the web services")
        if not resp.ok:
            raise IntegrationError(f"Could not open a session with {config.url}: HTTP {_describe(resp)}")
        logger.debug("Session established with {} ({})", config.url, resp.status_code)

    def attempt_connection(self, config: ServerConfig) -> ConnectionResult:
        try:
            with _session(config) as session:
                resp = session.get(config.api_url(VERSION_PATH), timeout=self.timeout_s)
        except requests.RequestException as e:
            return ConnectionResult.failed(str(e))
        if not resp.ok:
            return ConnectionResult.failed(_describe(resp), http_status_code=resp.status_code)
        return ConnectionResult.success(http_status_code=resp.status_code)

    def list_views(self, config: ServerConfig) -> list[NamedView]:
        with _session(config) as session:
            resp = session.get(config.api_url(VIEWS_PATH), timeout=self.timeout_s)
        if not resp.ok:
            raise IntegrationError(f"Could not retrieve views from {config.url}: HTTP {_describe(resp)}")
        data = _json(resp, "views")
        views_raw = data.get("views", []) if isinstance(data, dict) else None
        if not isinstance(views_raw, list):
            raise IntegrationError(f"Views response from {config.url} did not include a view list")
        views: list[NamedView] = []
        for v in views_raw:
            if not isinstance(v, dict) or not v.get("name"):
                continue
            views.append(NamedView(id=str(v.get("id", v["name"])), name=str(v["name"]), type=str(v.get("type", "issues"))))
        return views

    def get_issue_count(self, config: ServerConfig, project_name: str, view_name: str) -> int:
        url = config.api_url(f"{VIEW_CONTENTS_PATH}/{quote(view_name, safe='')}")
        params = {"projectId": project_name, "rowCount": 1, "offset": 0}
        with _session(config) as session:
            resp = session.get(url, params=params, timeout=self.timeout_s)
        if resp.status_code == 404:
            raise IntegrationError(
                f"Could not find view '{view_name}' for project '{project_name}' on {config.url}"
            )
        if not resp.ok:
            raise IntegrationError(
                f"Could not retrieve issues in view '{view_name}' from {config.url}: HTTP {_describe(resp)}"
            )
        data = _json(resp, "view contents")
        contents = data.get("viewContentsV1") if isinstance(data, dict) else None
        total = contents.get("totalRows") if isinstance(contents, dict) else None
        if not isinstance(total, int) or isinstance(total, bool):
            raise IntegrationError(f"View contents for '{view_name}' did not include a row count")
        return total
