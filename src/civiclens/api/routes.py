"""
/**
 * @file routes.py
 * @summary Civic data routes under /api/civics plus the health probe.
 *
 * @details
 * - Every civics route is rate-limited per caller.
 * - Route payloads are cached ungated per category; tier gating runs on
 *   every response so a cached premium payload never leaks to a free caller.
 * - Durable cache failures are logged and never fail a request.
 */
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from civiclens.access.gating import gate_profile_response
from civiclens.engines.categories import ISSUE_CATEGORIES, ISSUE_IDS
from civiclens.engines.scorecard import build_metrics_input
from civiclens.api.deps import (
    ZIP_CODE_PATTERN, ApiError, ApiState, CallerContext, check_feature, enforce_rate_limit,
    get_caller, get_state, validate_bioguide_id,
)
from civiclens.services.durable_cache import DurableCache
from civiclens.utils.concurrency import gather_settled
from civiclens.utils.errors import CivicLensError, DurableCacheError, ZipLookupError
from civiclens.utils.performance_monitor import get_monitor
from civiclens.utils.schemas import Chamber

logger = logging.getLogger(__name__)

MAX_VOTES = 50
NEWS_FETCH_LIMIT = 10

router = APIRouter(prefix="/api/civics", dependencies=[Depends(enforce_rate_limit)])
health_router = APIRouter()


def _chamber(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.lower()
    if value not in (Chamber.HOUSE.value, Chamber.SENATE.value):
        raise ApiError(400, "Invalid chamber. Use 'house' or 'senate'")
    return value


async def _durable_get(cache: DurableCache, method: str, key: str) -> Optional[Dict[str, Any]]:
    try:
        return await getattr(cache, method)(key)
    except DurableCacheError as e:
        logger.warning(f"Durable cache read skipped: {e}")
        return None


async def _durable_set(cache: DurableCache, method: str, key: str, payload: Dict[str, Any]):
    try:
        await getattr(cache, method)(key, payload)
    except DurableCacheError as e:
        logger.warning(f"Durable cache write skipped: {e}")


async def _member_name(state: ApiState, bioguide_id: str, name: Optional[str]) -> str:
    if name and name.strip():
        return name.strip()
    profile = await state.orchestrator.get_member_profile(bioguide_id)
    return profile.member.name


# ===========================
# Member
# ===========================

@router.get("/member/{bioguide_id}")
async def member_profile(bioguide_id: str, state: ApiState = Depends(get_state),
                         caller: CallerContext = Depends(get_caller)):
    """
    /**
     * Member detail, sponsored bills and biography.
     */
    """
    validate_bioguide_id(bioguide_id)

    payload = await _durable_get(state.durable_cache, "get_profile", bioguide_id)
    if payload is None:
        orchestrator = state.orchestrator
        core = await orchestrator.get_member_profile(bioguide_id)
        bio = await orchestrator.get_member_biography(core.member.name)
        overview = await orchestrator.biography_overview(core.member, bio.wikipedia, bio.wikidata)
        payload = {
            "member": core.member.model_dump(mode="json"),
            "bills": [b.model_dump(mode="json") for b in core.bills],
            "biography": bio.wikipedia.model_dump(mode="json") if bio.wikipedia else None,
            "wikidata_facts": bio.wikidata.model_dump(mode="json") if bio.wikidata else None,
            "biography_overview": overview,
        }
        await _durable_set(state.durable_cache, "set_profile", bioguide_id, payload)

    return gate_profile_response(payload, caller.effective_tier)


@router.get("/member/{bioguide_id}/full")
async def member_full_profile(bioguide_id: str, state: ApiState = Depends(get_state),
                              caller: CallerContext = Depends(get_caller)):
    validate_bioguide_id(bioguide_id)

    profile = await state.orchestrator.get_full_profile(bioguide_id)
    scorecard = state.scorecard.generate(
        build_metrics_input(profile.member, profile.votes, profile.committees, profile.bills)
    )
    payload = profile.model_dump(mode="json")
    payload["scorecard"] = scorecard.model_dump(mode="json")
    return gate_profile_response(payload, caller.effective_tier)


@router.get("/member/{bioguide_id}/votes")
async def member_votes(bioguide_id: str, chamber: str = Query("house"), limit: int = Query(20, ge=1),
                       state: ApiState = Depends(get_state),
                       caller: CallerContext = Depends(get_caller)):
    validate_bioguide_id(bioguide_id)
    chamber = _chamber(chamber)
    limit = min(limit, MAX_VOTES)

    cache_key = f"votes:{bioguide_id}:{chamber}:{limit}"
    payload = state.route_cache.get(cache_key)
    if payload is None:
        votes = await state.orchestrator.get_member_votes(bioguide_id, chamber, limit)
        payload = {"bioguide_id": bioguide_id, "votes": [v.model_dump(mode="json") for v in votes]}
        state.route_cache.set(cache_key, payload, "votes")

    return gate_profile_response(payload, caller.effective_tier)


@router.get("/member/{bioguide_id}/committees")
async def member_committees(bioguide_id: str, state: ApiState = Depends(get_state)):
    validate_bioguide_id(bioguide_id)

    cache_key = f"committees:{bioguide_id}"
    payload = state.route_cache.get(cache_key)
    if payload is None:
        committees = await state.orchestrator.get_member_committees(bioguide_id)
        payload = {"bioguide_id": bioguide_id,
                   "committees": [c.model_dump(mode="json") for c in committees]}
        state.route_cache.set(cache_key, payload, "committees")
    return payload


@router.get("/member/{bioguide_id}/finance")
async def member_finance(bioguide_id: str, name: Optional[str] = None,
                         state: ApiState = Depends(get_state),
                         caller: CallerContext = Depends(get_caller)):
    validate_bioguide_id(bioguide_id)
    check_feature("finance.summary", caller)

    cache_key = f"finance:{bioguide_id}"
    payload = state.route_cache.get(cache_key)
    if payload is None:
        member_name = await _member_name(state, bioguide_id, name)
        result = await state.orchestrator.get_member_finance(bioguide_id, member_name)
        payload = {"bioguide_id": bioguide_id, **result.model_dump(mode="json")}
        state.route_cache.set(cache_key, payload, "finance")
    return payload


@router.get("/member/{bioguide_id}/metrics")
async def member_metrics(bioguide_id: str, chamber: Optional[str] = None,
                         state: ApiState = Depends(get_state),
                         caller: CallerContext = Depends(get_caller)):
    """
    /**
     * Benchmarked scorecard; votes and committees degrade to empty on failure.
     */
    """
    validate_bioguide_id(bioguide_id)
    chamber = _chamber(chamber)
    check_feature("metrics.scorecard", caller)

    cache_key = f"metrics:{bioguide_id}:{chamber or 'default'}"
    payload = state.route_cache.get(cache_key)
    if payload is not None:
        return payload

    orchestrator = state.orchestrator
    core = await orchestrator.get_member_profile(bioguide_id)
    votes, committees = await gather_settled(
        orchestrator.get_member_votes(bioguide_id, chamber or core.member.chamber.value, MAX_VOTES),
        orchestrator.get_member_committees(bioguide_id),
    )
    for label, outcome in (("votes", votes), ("committees", committees)):
        if not outcome.ok:
            logger.warning(f"Scorecard for {bioguide_id} built without {label}: {outcome.error}")

    scorecard = state.scorecard.generate(
        build_metrics_input(core.member, votes.unwrap_or([]), committees.unwrap_or([]), core.bills)
    )
    payload = scorecard.model_dump(mode="json")
    state.route_cache.set(cache_key, payload, "metrics")
    return payload


@router.get("/member/{bioguide_id}/news")
async def member_news(bioguide_id: str, name: Optional[str] = None,
                      state: ApiState = Depends(get_state),
                      caller: CallerContext = Depends(get_caller)):
    validate_bioguide_id(bioguide_id)

    cache_key = f"news:{bioguide_id}"
    payload = state.route_cache.get(cache_key)
    if payload is None:
        member_name = await _member_name(state, bioguide_id, name)
        articles = await state.orchestrator.get_member_news(member_name, NEWS_FETCH_LIMIT)
        payload = {"bioguide_id": bioguide_id, "news": [a.model_dump(mode="json") for a in articles]}
        state.route_cache.set(cache_key, payload, "news")

    return gate_profile_response(payload, caller.effective_tier)


# ===========================
# Zip, compare, issues, categories
# ===========================

@router.get("/zip")
async def zip_lookup(code: Optional[str] = None, state: ApiState = Depends(get_state)):
    if not code or not ZIP_CODE_PATTERN.match(code):
        raise ApiError(400, "Invalid zip code. Use 5-digit format (e.g., 60188)")

    cached = await _durable_get(state.durable_cache, "get_zip_lookup", code)
    if cached is not None:
        return cached

    try:
        result = await state.orchestrator.lookup_by_zip_code(code)
    except ZipLookupError as e:
        logger.error(f"Zip lookup failed for {code}: {e}")
        raise ApiError(400 if e.state_unresolved else 502,
                       "Failed to look up representatives. Please try again later.",
                       detail=str(e))

    payload = result.model_dump(mode="json")
    if result.officials:
        await _durable_set(state.durable_cache, "set_zip_lookup", code, payload)
    return payload


@router.get("/compare")
async def compare_officials(a: Optional[str] = None, b: Optional[str] = None,
                            state: ApiState = Depends(get_state),
                            caller: CallerContext = Depends(get_caller)):
    message = "Two valid bioguide IDs required (params: a, b). Expected pattern: A000000"
    validate_bioguide_id(a, message)
    validate_bioguide_id(b, message)
    if a == b:
        raise ApiError(400, "Cannot compare an official with themselves")
    check_feature("compare.side_by_side", caller)

    cache_key = f"compare:{a}:{b}"
    payload = state.route_cache.get(cache_key)
    if payload is None:
        profile1, profile2 = await asyncio.gather(
            state.orchestrator.get_full_profile(a),
            state.orchestrator.get_full_profile(b),
        )
        comparison = state.compare.compare(profile1, profile2)
        payload = comparison.model_dump(mode="json")
        state.route_cache.set(cache_key, payload, "compare")
    return payload


@router.get("/issues")
async def issue_report(official: Optional[str] = None, issue: Optional[str] = None,
                       chamber: Optional[str] = None,
                       state: ApiState = Depends(get_state),
                       caller: CallerContext = Depends(get_caller)):
    validate_bioguide_id(official, 'Invalid or missing "official" bioguide ID parameter')
    if not issue or issue not in ISSUE_IDS:
        raise ApiError(400, f"Invalid issue. Valid issues: {', '.join(ISSUE_IDS)}")
    chamber = _chamber(chamber)
    check_feature("issues.report", caller)

    cache_key = f"issues:{official}:{issue}:{chamber or 'default'}"
    payload = state.route_cache.get(cache_key)
    if payload is not None:
        return payload

    orchestrator = state.orchestrator
    core = await orchestrator.get_member_profile(official)
    try:
        votes = await orchestrator.get_member_votes(official, chamber or core.member.chamber.value, MAX_VOTES)
    except CivicLensError as e:
        logger.warning(f"Issue report for {official} built without votes: {e}")
        votes = []

    report = state.issues.generate_report(core.member.name, issue, core.bills, votes)
    payload = report.model_dump(mode="json")
    state.route_cache.set(cache_key, payload, "issues")
    return payload


@router.get("/categories")
async def issue_categories():
    return {"categories": [c.model_dump() for c in ISSUE_CATEGORIES]}


# ===========================
# Health
# ===========================

@health_router.get("/api/health")
async def health(state: ApiState = Depends(get_state)):
    """
    /**
     * Durable cache reachability plus per-host upstream statistics.
     * Degraded (503) only when a configured durable cache is down.
     */
    """
    cache_check: Dict[str, Any] = {"configured": state.durable_cache.enabled, "ok": True}
    if state.durable_cache.enabled:
        try:
            cache_check["ok"] = await state.durable_cache.ping()
        except DurableCacheError as e:
            logger.error(f"Health check: {e}")
            cache_check["ok"] = False

    monitor = get_monitor()
    snapshot = await monitor.get_snapshot()
    healthy = cache_check["ok"]
    body = {
        "status": "healthy" if healthy else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "durable_cache": cache_check,
            "upstream": {
                "uptime_seconds": round(snapshot.uptime_seconds, 1),
                "total_calls": snapshot.total_calls,
                "total_failures": snapshot.total_failures,
                "summary": monitor.format_snapshot(snapshot),
                "hosts": [
                    {"host": h.host, "calls": h.calls, "failures": h.failures,
                     "avg_latency_ms": round(h.avg_latency * 1000, 1), "last_error": h.last_error}
                    for h in snapshot.hosts
                ],
            },
        },
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
