"""
/**
 * @file test_http_client.py
 * @summary Retry, backoff and circuit-breaker behavior of the resilient
 *          HTTP client, driven through httpx.MockTransport.
 */
"""

import pytest
import httpx
from pathlib import Path

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from civiclens.services.http_client import CircuitBreaker, ResilientHTTPClient
from civiclens.utils.errors import CircuitOpenError, UpstreamError, UpstreamTimeoutError
from civiclens.utils.performance_monitor import UpstreamMonitor

URL = "https://api.example.gov/v3/member/C001117"


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_client(handler, breaker=None, max_retries=3):
    """
    /**
     * Build a client over a mock transport; recorded sleeps are returned.
     */
    """
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)

    client = ResilientHTTPClient(
        max_retries=max_retries,
        breaker=breaker or CircuitBreaker(),
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        sleep=fake_sleep,
        monitor=UpstreamMonitor(),
    )
    return client, sleeps


class TestFetchJson:
    """
    /**
     * Status handling and retries.
     */
    """

    @pytest.mark.asyncio
    async def test_success_returns_decoded_json(self):
        def handler(request):
            assert request.url.params["api_key"] == "k"
            assert request.headers["user-agent"] == "CivicLens/0.1"
            return httpx.Response(200, json={"member": {"bioguideId": "C001117"}})

        client, sleeps = make_client(handler)
        data = await client.fetch_json(URL, params={"api_key": "k"})
        assert data == {"member": {"bioguideId": "C001117"}}
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_retries_5xx_with_exponential_backoff(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"ok": True})

        client, sleeps = make_client(handler)
        assert await client.fetch_json(URL) == {"ok": True}
        assert len(calls) == 3
        assert sleeps == [1, 2]

    @pytest.mark.asyncio
    async def test_exhausted_5xx_raises_and_records_failure(self):
        breaker = CircuitBreaker()
        client, _ = make_client(lambda request: httpx.Response(500), breaker=breaker)

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_json(URL)
        assert exc_info.value.status == 500
        assert breaker.failure_count("api.example.gov") == 1

    @pytest.mark.asyncio
    async def test_honors_retry_after_on_429(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                return httpx.Response(429, headers={"Retry-After": "7"})
            return httpx.Response(200, json=[])

        breaker = CircuitBreaker()
        client, sleeps = make_client(handler, breaker=breaker)
        assert await client.fetch_json(URL) == []
        assert sleeps == [7.0]
        assert breaker.failure_count("api.example.gov") == 0

    @pytest.mark.asyncio
    async def test_persistent_429_never_trips_breaker(self):
        breaker = CircuitBreaker()
        client, _ = make_client(lambda request: httpx.Response(429), breaker=breaker)

        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_json(URL)
        assert exc_info.value.status == 429
        assert breaker.failure_count("api.example.gov") == 0

    @pytest.mark.asyncio
    async def test_404_with_not_found_ok_returns_none(self):
        client, _ = make_client(lambda request: httpx.Response(404))
        assert await client.fetch_json(URL, not_found_ok=True) is None

    @pytest.mark.asyncio
    async def test_other_4xx_fails_without_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(403)

        client, sleeps = make_client(handler)
        with pytest.raises(UpstreamError) as exc_info:
            await client.fetch_json(URL)
        assert exc_info.value.status == 403
        assert len(calls) == 1
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_timeouts_are_retried_then_raised(self):
        def handler(request):
            raise httpx.ConnectTimeout("slow", request=request)

        client, sleeps = make_client(handler)
        with pytest.raises(UpstreamTimeoutError):
            await client.fetch_json(URL)
        assert sleeps == [1, 2]

    @pytest.mark.asyncio
    async def test_non_json_body_is_an_upstream_error(self):
        client, _ = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(UpstreamError):
            await client.fetch_json(URL)

    @pytest.mark.asyncio
    async def test_attempts_are_reported_to_monitor(self):
        client, _ = make_client(lambda request: httpx.Response(200, json={}))
        await client.fetch_json(URL)
        snapshot = await client.monitor.get_snapshot()
        assert snapshot.total_calls == 1
        assert snapshot.hosts[0].host == "api.example.gov"


class TestCircuitBreaker:
    """
    /**
     * Open after three failures, fail fast, close after the cool-down.
     */
    """

    def test_opens_after_threshold(self):
        breaker = CircuitBreaker(clock=FakeClock())
        for _ in range(2):
            breaker.record_failure("h")
        assert not breaker.is_open("h")
        breaker.record_failure("h")
        assert breaker.is_open("h")

    def test_success_resets_counter(self):
        breaker = CircuitBreaker()
        breaker.record_failure("h")
        breaker.record_failure("h")
        breaker.record_success("h")
        assert breaker.failure_count("h") == 0

    def test_closes_after_cooldown(self):
        clock = FakeClock()
        breaker = CircuitBreaker(clock=clock)
        for _ in range(3):
            breaker.record_failure("h")
        clock.now += 59
        assert breaker.is_open("h")
        clock.now += 2
        assert not breaker.is_open("h")
        assert breaker.failure_count("h") == 0

    @pytest.mark.asyncio
    async def test_open_circuit_fails_fast_without_network(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500)

        breaker = CircuitBreaker(clock=FakeClock())
        client, _ = make_client(handler, breaker=breaker, max_retries=1)

        for _ in range(3):
            with pytest.raises(UpstreamError):
                await client.fetch_json(URL)
        assert len(calls) == 3

        with pytest.raises(CircuitOpenError):
            await client.fetch_json(URL)
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_hosts_are_isolated(self):
        breaker = CircuitBreaker(clock=FakeClock())
        for _ in range(3):
            breaker.record_failure("api.example.gov")

        client, _ = make_client(lambda request: httpx.Response(200, json={"ok": 1}), breaker=breaker)
        assert await client.fetch_json("https://other.example.org/x") == {"ok": 1}


class TestUpstreamMonitor:
    """
    /**
     * Per-host aggregates stay fixed-size however many calls are recorded.
     */
    """

    @pytest.mark.asyncio
    async def test_running_averages(self):
        monitor = UpstreamMonitor()
        for _ in range(5000):
            await monitor.record_call("api.congress.gov", 0.2)
        await monitor.record_call("api.open.fec.gov", 0.1, success=False, error="HTTP 500")
        await monitor.record_call("api.open.fec.gov", 0.3)

        snapshot = await monitor.get_snapshot()
        hosts = {h.host: h for h in snapshot.hosts}
        assert hosts["api.congress.gov"].calls == 5000
        assert hosts["api.congress.gov"].avg_latency == pytest.approx(0.2)
        assert hosts["api.open.fec.gov"].avg_latency == pytest.approx(0.2)
        assert hosts["api.open.fec.gov"].failures == 1
        assert hosts["api.open.fec.gov"].last_error == "HTTP 500"
        assert snapshot.total_calls == 5002
        assert monitor.call_counts["api.congress.gov"] == 5000
        assert isinstance(monitor.latency_totals["api.congress.gov"], float)
