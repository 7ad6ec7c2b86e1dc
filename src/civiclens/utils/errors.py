"""
/**
 * @file errors.py
 * @summary Exception taxonomy shared by the HTTP client, adapters,
 *          orchestrator and API boundary.
 *
 * @details
 * - Transient upstream failures (timeouts, 5xx) are retried inside the HTTP
 *   client and only surface here once retries are exhausted.
 * - "Not found" is never an exception: adapters return None or an empty list.
 * - ValidationMismatch is raised and caught inside the payload validator; it is
 *   logged as a warning and never escapes to callers.
 */
"""

from typing import Optional


class CivicLensError(Exception):
    """Base class for all application errors."""
    pass


class ConfigurationError(CivicLensError):
    """A required API key or setting is missing."""
    pass


class UpstreamError(CivicLensError):
    """
    /**
     * A call to an external provider failed.
     *
     * @param message: Human-readable summary (never the raw response body).
     * @param status: HTTP status code when the provider answered.
     * @param host: Hostname of the provider.
     */
    """

    def __init__(self, message: str, status: Optional[int] = None, host: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.host = host


class UpstreamTimeoutError(UpstreamError, TimeoutError):
    """The provider did not answer within the per-call timeout."""
    pass


class CircuitOpenError(UpstreamError):
    """Calls to a host are short-circuited after repeated failures."""

    def __init__(self, host: str, retry_in: float = 0.0):
        super().__init__(
            f"Circuit breaker open for {host} (too many recent failures, retry in {retry_in:.0f}s)",
            host=host,
        )
        self.retry_in = retry_in


class ValidationMismatch(CivicLensError):
    """A provider payload did not match its expected shape."""
    pass


class ProfileFetchError(CivicLensError):
    """The load-bearing member + bills fetch failed."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found


class ZipLookupError(CivicLensError):
    """
    /**
     * Both legs of the zip lookup failed.
     *
     * @param state_unresolved: True when the static table could not map the
     *        zip to a state, so the fallback provider was never tried.
     */
    """

    def __init__(self, message: str, state_unresolved: bool = False):
        super().__init__(message)
        self.state_unresolved = state_unresolved


class DurableCacheError(CivicLensError):
    """The persistent cache store could not be reached."""
    pass
