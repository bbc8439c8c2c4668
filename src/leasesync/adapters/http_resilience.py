"""One ``httpx`` client per remote system: rate limited, retried, optionally cached.

Retries live in the transport (``httpx_retries``), throttling wraps every call
(``aiolimiter``) and idempotent lookups may be served from a ``hishel`` cache.
Callers only ever see a plain :class:`httpx.Response`.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from leasesync.config.storage import get_http_cache_path

if TYPE_CHECKING:
    from types import TracebackType

    from leasesync.config.http_resilience import (
        CacheConfig,
        ResilienceConfig,
        RetryPolicy,
        ShouldCacheHook,
    )

__all__ = ["ResilientClient", "build_retry"]

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=sorted(policy.allowed_methods),
        status_forcelist=sorted(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class ResilientClient:
    """Async HTTP client for a single upstream named by ``config.name``."""

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        ratelimit = config.ratelimit
        self._limiter = (
            AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds) if ratelimit else None
        )
        self._client: httpx.AsyncClient = _build_client(config)

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: httpx.QueryParams | None = None,
        json: object = None,
    ) -> httpx.Response:
        if self._limiter is None:
            response = await self._send(method, url, params=params, json=json)
        else:
            async with self._limiter:
                response = await self._send(method, url, params=params, json=json)
        log.debug(
            "%s %s %s -> %s", self.config.name, method, response.request.url, response.status_code
        )
        return response

    async def get(self, url: str, *, params: httpx.QueryParams | None = None) -> httpx.Response:
        return await self.request("GET", url, params=params)

    async def post(
        self,
        url: str,
        *,
        json: object = None,
        params: httpx.QueryParams | None = None,
    ) -> httpx.Response:
        return await self.request("POST", url, params=params, json=json)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        params: httpx.QueryParams | None,
        json: object,
    ) -> httpx.Response:
        if json is None:
            return await self._client.request(method, url, params=params)
        return await self._client.request(method, url, params=params, json=json)


def _build_client(config: ResilienceConfig) -> httpx.AsyncClient:
    kwargs: dict[str, Any] = {
        "timeout": config.timeout_seconds,
        "transport": RetryTransport(retry=build_retry(config.retry)),
    }
    if config.base_url is not None:
        kwargs["base_url"] = config.base_url
    if config.default_headers:
        kwargs["headers"] = dict(config.default_headers)

    if config.cache is None:
        return httpx.AsyncClient(**kwargs)
    storage, policy = _build_cache(config.cache)
    log.debug("Response cache enabled for %s (%s)", config.name, config.cache.backend)
    return AsyncCacheClient(**kwargs, storage=storage, policy=policy)


class _PayloadFilter(BaseFilter[HishelCacheResponse]):
    """Stores a response only when its decoded JSON body passes ``predicate``."""

    def __init__(self, predicate: ShouldCacheHook) -> None:
        self._predicate = predicate

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if not body:
            return False
        try:
            payload = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(self._predicate(payload))


def _build_cache(config: CacheConfig) -> tuple[AsyncSqliteStorage, FilterPolicy | None]:
    if config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_http_cache_path())
    elif config.backend == "memory":
        database_path = ":memory:"
    else:
        raise ValueError(f"Unsupported cache backend: {config.backend}")

    storage = AsyncSqliteStorage(database_path=database_path, default_ttl=config.ttl_seconds)
    if config.should_cache is None:
        return storage, None
    return storage, FilterPolicy(response_filters=[_PayloadFilter(config.should_cache)])
