"""
/**
 * @file http_client.py
 * @summary Resilient outbound JSON client shared by every source adapter.
 *
 * @details
 * - Persistent httpx.AsyncClient with connection pooling, created lazily.
 * - Per-call timeout, exponential backoff on 5xx and timeouts, Retry-After
 *   honoring on 429.
 * - Per-hostname circuit breaker: 3 recorded failures open the circuit for
 *   60 seconds, during which calls fail fast without network I/O.
 * - Every attempt is reported to the upstream monitor.
 *
 * @dependencies
 * - httpx (async client with connection pooling)
 */
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol
from urllib.parse import urlsplit

import httpx

from civiclens.utils.errors import CircuitOpenError, UpstreamError, UpstreamTimeoutError
from civiclens.utils.performance_monitor import UpstreamMonitor, get_monitor

logger = logging.getLogger(__name__)

DEFAULT_RETRY_AFTER = 2.0


class JSONFetcher(Protocol):
    """
    /**
     * Capability every adapter depends on: "a thing with fetch_json".
     */
    """

    async def fetch_json(self, url: str, params: Optional[Any] = None,
                         headers: Optional[Dict[str, str]] = None,
                         not_found_ok: bool = False) -> Any:
        ...


@dataclass
class _HostState:
    failures: int = 0
    open_until: float = 0.0


class CircuitBreaker:
    """
    /**
     * Per-hostname failure counter with a cool-down window.
     *
     * @param failure_threshold: Consecutive failures that open the circuit.
     * @param cooldown_seconds: How long an open circuit rejects calls.
     * @param clock: Monotonic time source (injectable for tests).
     */
    """

    def __init__(self, failure_threshold: int = 3, cooldown_seconds: float = 60.0,
                 clock: Callable[[], float] = time.monotonic):
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self._hosts: Dict[str, _HostState] = {}

    def is_open(self, host: str) -> bool:
        state = self._hosts.get(host)
        if state is None or state.failures < self.failure_threshold:
            return False
        if self.clock() >= state.open_until:
            # Cool-down elapsed: close and let the next call through
            del self._hosts[host]
            return False
        return True

    def retry_in(self, host: str) -> float:
        state = self._hosts.get(host)
        if state is None:
            return 0.0
        return max(0.0, state.open_until - self.clock())

    def record_failure(self, host: str):
        state = self._hosts.setdefault(host, _HostState())
        state.failures += 1
        if state.failures >= self.failure_threshold:
            state.open_until = self.clock() + self.cooldown_seconds
            logger.warning(
                f"Circuit opened for {host} after {state.failures} failures "
                f"(cool-down {self.cooldown_seconds:.0f}s)"
            )

    def record_success(self, host: str):
        self._hosts.pop(host, None)

    def failure_count(self, host: str) -> int:
        state = self._hosts.get(host)
        return state.failures if state else 0


def _parse_retry_after(value: Optional[str]) -> float:
    if not value:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER
    return seconds if seconds >= 0 else DEFAULT_RETRY_AFTER


class ResilientHTTPClient:
    """
    /**
     * JSON-over-HTTPS client with timeout, retry/backoff and circuit breaking.
     *
     * @param timeout: Per-attempt timeout in seconds.
     * @param max_retries: Total attempts per call.
     * @param breaker: Circuit breaker (one per process).
     * @param client: Optional pre-built httpx.AsyncClient (tests inject one
     *        backed by httpx.MockTransport).
     * @param sleep: Awaitable sleep used for backoff (injectable for tests).
     * @param monitor: Upstream monitor receiving per-attempt timings.
     */
    """

    def __init__(self, timeout: float = 10.0, max_retries: int = 3,
                 breaker: Optional[CircuitBreaker] = None,
                 client: Optional[httpx.AsyncClient] = None,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                 monitor: Optional[UpstreamMonitor] = None):
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.breaker = breaker or CircuitBreaker()
        self.sleep = sleep
        self.monitor = monitor or get_monitor()
        self.headers = {
            "User-Agent": "CivicLens/0.1",
            "Accept": "application/json",
        }
        self._http_client = client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """
        /**
         * Get or create a persistent httpx.AsyncClient with pooling limits.
         */
        """
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                limits=httpx.Limits(
                    max_connections=50,
                    max_keepalive_connections=20
                )
            )
        return self._http_client

    async def close(self):
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def fetch_json(self, url: str, params: Optional[Any] = None,
                         headers: Optional[Dict[str, str]] = None,
                         not_found_ok: bool = False) -> Any:
        """
        /**
         * GET a URL and decode its JSON body.
         *
         * @param url: Absolute URL.
         * @param params: Query string params.
         * @param headers: Extra request headers (merged over the defaults).
         * @param not_found_ok: Return None on 404 instead of raising.
         * @return Decoded JSON, or None for an accepted 404.
         */
        """
        host = urlsplit(url).hostname or url
        if self.breaker.is_open(host):
            raise CircuitOpenError(host, retry_in=self.breaker.retry_in(host))

        request_headers = {**self.headers, **(headers or {})}
        client = await self._get_http_client()

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            start_time = time.time()
            try:
                response = await client.get(url, params=params, headers=request_headers,
                                            timeout=self.timeout)
            except httpx.TimeoutException:
                await self.monitor.record_call(host, time.time() - start_time, success=False,
                                               error="timeout")
                if last_attempt:
                    self.breaker.record_failure(host)
                    raise UpstreamTimeoutError(
                        f"Request to {host} timed out after {self.max_retries} attempts",
                        host=host,
                    )
                await self.sleep(2 ** attempt)
                continue
            except httpx.RequestError as e:
                await self.monitor.record_call(host, time.time() - start_time, success=False,
                                               error=type(e).__name__)
                if last_attempt:
                    self.breaker.record_failure(host)
                    raise UpstreamError(
                        f"Request to {host} failed after {self.max_retries} attempts: {type(e).__name__}",
                        host=host,
                    )
                await self.sleep(2 ** attempt)
                continue

            duration = time.time() - start_time
            status = response.status_code

            if status == 429:
                await self.monitor.record_call(host, duration, success=False, error="429")
                if last_attempt:
                    raise UpstreamError(f"{host} rate limited the request", status=429, host=host)
                wait_time = _parse_retry_after(response.headers.get("Retry-After"))
                logger.info(f"Rate limited by {host}. Waiting {wait_time:.0f} seconds...")
                await self.sleep(wait_time)
                continue

            if status >= 500:
                await self.monitor.record_call(host, duration, success=False, error=str(status))
                if last_attempt:
                    self.breaker.record_failure(host)
                    raise UpstreamError(f"{host} returned HTTP {status}", status=status, host=host)
                await self.sleep(2 ** attempt)
                continue

            if status == 404 and not_found_ok:
                await self.monitor.record_call(host, duration)
                self.breaker.record_success(host)
                return None

            if status >= 400 or status < 200:
                await self.monitor.record_call(host, duration, success=False, error=str(status))
                self.breaker.record_failure(host)
                raise UpstreamError(f"{host} returned HTTP {status}", status=status, host=host)

            try:
                data = response.json()
            except ValueError:
                await self.monitor.record_call(host, duration, success=False, error="invalid json")
                self.breaker.record_failure(host)
                raise UpstreamError(f"{host} returned a non-JSON body", status=status, host=host)

            await self.monitor.record_call(host, duration)
            self.breaker.record_success(host)
            return data

        raise UpstreamError(f"Max retries exceeded for {host}", host=host)
