from __future__ import annotations

"""View retrieval and caching.

CONTRACT
- Inputs: ServerInstance, Transport, cache lifetime in seconds
- Outputs (required):
  - List of view names for the instance (possibly empty)
- Invariants:
  - Retrieval is best-effort: errors are logged, never raised
  - Cached data is reused until it is older than `cache_seconds`
  - Cache dictionary access is serialized with a lock
- Failure:
  - Returns [] when the server cannot be reached or rejects the request
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

import requests
from loguru import logger

from .config import DEFAULT_VIEWS_CACHE_SECONDS, ServerConfig, ServerInstance
from .errors import IntegrationError
from .transport.base import Transport

T = TypeVar("T")


@dataclass
class _CacheEntry(Generic[T]):
    data: list[T]
    fetched_at: float


@dataclass
class BaseCacheData(ABC, Generic[T]):
    cache_seconds: int = DEFAULT_VIEWS_CACHE_SECONDS
    clock: Callable[[], float] = time.monotonic
    _entries: dict[str, _CacheEntry[T]] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @abstractmethod
    def get_data_type(self) -> str: ...

    @abstractmethod
    def retrieve_data(self, instance: ServerInstance) -> list[T]: ...

    def get_cached_data(self, instance: ServerInstance, refresh: bool = False) -> list[T]:
        key = instance.url.rstrip("/")
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not refresh and self.clock() - entry.fetched_at < self.cache_seconds:
                return list(entry.data)

        logger.debug("Refreshing cached {} data for {}", self.get_data_type(), instance.url)
        data = self.retrieve_data(instance)
        with self._lock:
            self._entries[key] = _CacheEntry(data=list(data), fetched_at=self.clock())
        return list(data)

    def invalidate(self, instance: ServerInstance | None = None) -> None:
        with self._lock:
            if instance is None:
                self._entries.clear()
            else:
                self._entries.pop(instance.url.rstrip("/"), None)


@dataclass
class ViewCacheData(BaseCacheData[str]):
    transport: Transport | None = None

    def get_data_type(self) -> str:
        return "View"

    def retrieve_data(self, instance: ServerInstance) -> list[str]:
        if self.transport is None:
            raise ValueError("ViewCacheData needs a transport to retrieve views")
        try:
            logger.info("Attempting retrieval of views from {}", instance.url)
            config = ServerConfig.build(instance.url, instance.credentials())
            self.transport.connect(config)
            views = self.transport.list_views(config)
            logger.info("Completed retrieval of {} views", len(views))
            return [v.name for v in views]
        except (IntegrationError, ValueError, requests.RequestException) as e:
            logger.error("Could not retrieve views from {}: {}", instance.url, e)
        except Exception as e:
            logger.opt(exception=e).error("Unexpected error retrieving views from {}: {}", instance.url, e)
        return []
