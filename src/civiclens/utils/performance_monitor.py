"""
/**
 * @file performance_monitor.py
 * @summary Lightweight monitoring of outbound provider calls (latency and
 *          failures per host).
 *
 * @details
 * - Asyncio-lock protected per-host call counts and latency totals; memory
 *   stays constant however long the process runs.
 * - Global monitor instance helpers for easy import and use.
 * - Snapshot is surfaced by the health endpoint.
 */
"""

import time
from typing import Dict, List, Optional
from dataclasses import dataclass, field
from collections import defaultdict
import asyncio


@dataclass
class HostStats:
    """
    /**
     * Aggregated statistics for one upstream host.
     */
    """
    host: str
    calls: int = 0
    failures: int = 0
    avg_latency: float = 0.0
    last_error: Optional[str] = None


@dataclass
class MonitorSnapshot:
    """
    /**
     * Point-in-time view of every host seen since start.
     */
    """
    uptime_seconds: float = 0.0
    total_calls: int = 0
    total_failures: int = 0
    hosts: List[HostStats] = field(default_factory=list)


class UpstreamMonitor:
    """
    /**
     * Track latency and outcome of every outbound provider call.
     */
    """

    def __init__(self):
        self.start_time = time.time()
        self.call_counts: Dict[str, int] = defaultdict(int)
        self.latency_totals: Dict[str, float] = defaultdict(float)
        self.failures: Dict[str, int] = defaultdict(int)
        self.last_errors: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def record_call(self, host: str, duration: float, success: bool = True, error: Optional[str] = None):
        """
        /**
         * Record one attempt against a host.
         */
        """
        async with self._lock:
            self.call_counts[host] += 1
            self.latency_totals[host] += duration
            if not success:
                self.failures[host] += 1
                if error:
                    self.last_errors[host] = error

    async def get_snapshot(self) -> MonitorSnapshot:
        """
        /**
         * Compute and return a statistics snapshot.
         */
        """
        async with self._lock:
            hosts = []
            for host, calls in sorted(self.call_counts.items()):
                hosts.append(HostStats(
                    host=host,
                    calls=calls,
                    failures=self.failures.get(host, 0),
                    avg_latency=self.latency_totals[host] / calls if calls else 0.0,
                    last_error=self.last_errors.get(host),
                ))
            return MonitorSnapshot(
                uptime_seconds=time.time() - self.start_time,
                total_calls=sum(h.calls for h in hosts),
                total_failures=sum(h.failures for h in hosts),
                hosts=hosts,
            )

    def format_snapshot(self, snapshot: MonitorSnapshot) -> str:
        return " | ".join(
            f"{h.host}: {h.calls} calls, {h.failures} failed, avg {h.avg_latency * 1000:.0f}ms"
            for h in snapshot.hosts
        ) or "no upstream calls"


# Global monitor instance
_global_monitor: Optional[UpstreamMonitor] = None


def get_monitor() -> UpstreamMonitor:
    """
    /**
     * Get or create the global upstream monitor instance.
     */
    """
    global _global_monitor
    if _global_monitor is None:
        _global_monitor = UpstreamMonitor()
    return _global_monitor


def reset_monitor():
    """
    /**
     * Reset the global upstream monitor instance.
     */
    """
    global _global_monitor
    _global_monitor = UpstreamMonitor()
