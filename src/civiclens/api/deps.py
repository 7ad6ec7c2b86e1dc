"""
/**
 * @file deps.py
 * @summary Request-scoped dependencies for the API routes: shared state,
 *          caller tier context and rate limiting.
 */
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import Depends, Request

from civiclens.access.gating import require_feature
from civiclens.access.rate_limit import RateLimiter, rate_limit_key
from civiclens.access.tiers import Tier, parse_tier
from civiclens.engines.compare import CompareEngine
from civiclens.engines.issues import IssuesEngine
from civiclens.engines.scorecard import ScorecardEngine
from civiclens.services.cache import CategoryCache
from civiclens.services.durable_cache import DurableCache
from civiclens.services.orchestrator import Orchestrator
from civiclens.utils.config import Settings

logger = logging.getLogger(__name__)

BIOGUIDE_PATTERN = re.compile(r"^[A-Z]\d{6}$")
ZIP_CODE_PATTERN = re.compile(r"^\d{5}(-\d{4})?$")


class ApiError(Exception):
    """
    /**
     * An error response with a JSON body of {"error": message, ...extra}.
     */
    """

    def __init__(self, status: int, message: str, headers: Optional[Dict[str, str]] = None, **extra):
        super().__init__(message)
        self.status = status
        self.message = message
        self.headers = headers or {}
        self.extra = extra


@dataclass
class ApiState:
    """
    /**
     * Everything a route needs, built once per application.
     */
    """
    settings: Settings
    orchestrator: Orchestrator
    rate_limiter: RateLimiter
    durable_cache: DurableCache
    route_cache: CategoryCache
    scorecard: ScorecardEngine = field(default_factory=ScorecardEngine)
    compare: CompareEngine = field(default_factory=CompareEngine)
    issues: IssuesEngine = field(default_factory=IssuesEngine)


@dataclass
class CallerContext:
    tier: Optional[Tier] = None  # None = anonymous
    user_id: Optional[str] = None

    @property
    def effective_tier(self) -> Tier:
        return self.tier or Tier.FREE


def get_state(request: Request) -> ApiState:
    return request.app.state.civiclens


def get_caller(request: Request, state: ApiState = Depends(get_state)) -> CallerContext:
    """
    /**
     * Resolve the caller's tier.
     *
     * Stub mode forces the configured tier. Otherwise the upstream auth
     * gateway passes X-User-Tier / X-User-Id; the headers are honoured only
     * when the socket peer is in TRUSTED_PROXIES, and any other caller is
     * anonymous.
     */
    """
    if state.settings.auth_provider == "stub":
        return CallerContext(tier=parse_tier(state.settings.force_tier))

    peer = request.client.host if request.client else None
    if peer not in state.settings.trusted_proxies:
        if request.headers.get("x-user-tier") or request.headers.get("x-user-id"):
            logger.warning(f"Ignoring identity headers from untrusted peer {peer}")
        return CallerContext()

    raw_tier = request.headers.get("x-user-tier")
    user_id = request.headers.get("x-user-id") or None
    if not raw_tier and not user_id:
        return CallerContext()
    return CallerContext(tier=parse_tier(raw_tier), user_id=user_id)


def enforce_rate_limit(request: Request, state: ApiState = Depends(get_state),
                       caller: CallerContext = Depends(get_caller)):
    key = rate_limit_key(
        user_id=caller.user_id,
        forwarded_for=request.headers.get("x-forwarded-for"),
        client_host=request.client.host if request.client else None,
    )
    result = state.rate_limiter.check_rate_limit(key, caller.effective_tier)
    if result.allowed:
        return

    logger.info(f"Rate limit exceeded for {key} ({caller.effective_tier.value})")
    retry_after_ms = result.retry_after_ms if result.retry_after_ms is not None else 60_000
    raise ApiError(
        429,
        "Rate limit exceeded. Please try again later.",
        headers={
            "Retry-After": str(math.ceil(retry_after_ms / 1000)),
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": "0",
        },
    )


def check_feature(feature: str, caller: CallerContext):
    denial = require_feature(feature, caller.tier)
    if denial is not None:
        raise ApiError(denial.status, denial.error)


def validate_bioguide_id(value: Optional[str], message: str = "Invalid bioguide ID format. Expected pattern: A000000") -> str:
    if not value or not BIOGUIDE_PATTERN.match(value):
        raise ApiError(400, message)
    return value
