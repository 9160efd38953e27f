"""Domain reputation lookups (disposable-domain service and DNS).

Both lookups are cached per domain with their own TTL, collapse concurrent
misses for the same domain into one in-flight call, and fail open: a
network or resolver failure never blocks a legitimate registration.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

import dns.asyncresolver
import dns.exception
import dns.resolver
import httpx

from trustgate.cache import InMemoryTTLCache, TTLCache
from trustgate.config import TrustgateConfig

logger = logging.getLogger("trustgate-reputation")


class ReputationLookup(Protocol):
    """What the email validator needs from a reputation source."""

    async def is_disposable(self, domain: str) -> bool: ...

    async def has_mail_exchanger(self, domain: str) -> bool: ...


class ReputationClient:
    """Cached, single-flight reputation lookups with fail-open policy."""

    def __init__(
        self,
        config: TrustgateConfig | None = None,
        cache: TTLCache | None = None,
        http_client: httpx.AsyncClient | None = None,
        resolver: Any | None = None,
    ):
        """Initialize the client.

        Args:
            config: Process settings. If not provided, loads from environment.
            cache: TTL cache for lookup results. Defaults to in-memory.
            http_client: Client for the disposable-domain service.
            resolver: Object exposing dnspython's async `resolve()`.
        """
        self.config = config or TrustgateConfig.from_env()
        self.cache = cache or InMemoryTTLCache()
        self._http = http_client
        self._owns_http = http_client is None
        self._resolver = resolver
        self._inflight: dict[str, asyncio.Future] = {}

    async def __aenter__(self) -> "ReputationClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    # -- disposable-domain service ---------------------------------------------

    async def is_disposable(self, domain: str) -> bool:
        """Ask the reputation service whether `domain` is disposable.

        Cached for `disposable_cache_ttl` seconds. Errors are treated as
        "not disposable" and are not cached.
        """
        key = f"disposable:{domain}"
        value, found = await self.cache.get(key)
        if found:
            return bool(value)
        return await self._single_flight(key, lambda: self._fetch_disposable(domain))

    async def _fetch_disposable(self, domain: str) -> bool:
        url = self.config.disposable_api_url.format(domain=domain)
        try:
            response = await self._http_client().get(
                url, timeout=self.config.lookup_timeout_seconds
            )
            response.raise_for_status()
            result = bool(response.json().get("disposable", False))
        except httpx.TimeoutException:
            logger.warning(f"Disposable lookup timed out for {domain}, failing open")
            return False
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.warning(f"Disposable lookup failed for {domain}: {e}, failing open")
            return False

        await self.cache.set(
            f"disposable:{domain}", result, self.config.disposable_cache_ttl
        )
        return result

    def _http_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.config.lookup_timeout_seconds)
            self._owns_http = True
        return self._http

    # -- DNS ---------------------------------------------------------------------

    async def has_mail_exchanger(self, domain: str) -> bool:
        """Check whether `domain` has an MX record, or at least an A record.

        Cached for `mx_cache_ttl` seconds. Resolver failures (timeouts,
        unreachable nameservers) are treated as "has mail exchanger" and are
        not cached.
        """
        key = f"mx:{domain}"
        value, found = await self.cache.get(key)
        if found:
            return bool(value)
        return await self._single_flight(key, lambda: self._fetch_mail_exchanger(domain))

    async def _fetch_mail_exchanger(self, domain: str) -> bool:
        try:
            result = await self._resolve_mx_or_a(domain)
        except dns.exception.DNSException as e:
            logger.warning(f"DNS lookup failed for {domain}: {e!r}, failing open")
            return True
        await self.cache.set(f"mx:{domain}", result, self.config.mx_cache_ttl)
        return result

    async def _resolve_mx_or_a(self, domain: str) -> bool:
        resolver = self._dns_resolver()
        lifetime = self.config.lookup_timeout_seconds
        try:
            await resolver.resolve(domain, "MX", lifetime=lifetime)
            return True
        except dns.resolver.NXDOMAIN:
            return False
        except dns.resolver.NoAnswer:
            pass

        try:
            await resolver.resolve(domain, "A", lifetime=lifetime)
            return True
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return False

    def _dns_resolver(self) -> Any:
        if self._resolver is None:
            self._resolver = dns.asyncresolver.Resolver()
        return self._resolver

    # -- single-flight -----------------------------------------------------------

    async def _single_flight(
        self, key: str, fetch: Callable[[], Awaitable[bool]]
    ) -> bool:
        """Run `fetch` once per key; concurrent callers share its result."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fetch())
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        else:
            logger.debug(f"Joining in-flight lookup for {key}")
        return await asyncio.shield(task)
