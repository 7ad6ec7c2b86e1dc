"""
/**
 * @file gating.py
 * @summary Tier enforcement for API responses.
 *
 * @details
 * - require_feature() decides whether a caller may use a feature at all.
 * - gate_profile_response() strips or truncates parts of an already
 *   serialized profile according to the caller's tier, and flags every
 *   truncated list so the client can render an upgrade prompt.
 */
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from civiclens.access.tiers import (
    FEATURES, FeatureBehavior, Tier, can_access, get_feature_limit,
)

# (list key, flag key, full-access feature, teaser feature)
TRUNCATED_SECTIONS = (
    ("votes", "votes_limited", "votes.full_history", "votes.recent"),
    ("bills", "bills_limited", "legislation.bill_details", "legislation.sponsored_bills"),
    ("news", "news_limited", "news.archive", "news.recent"),
)

# (profile key, feature required to see it)
HIDDEN_SECTIONS = (
    ("finance", "finance.summary"),
    ("scorecard", "metrics.scorecard"),
)


@dataclass
class AccessDenial:
    error: str
    status: int


def require_feature(feature: str, tier: Optional[Tier]) -> Optional[AccessDenial]:
    """
    /**
     * Check a caller against one feature.
     *
     * @param feature: Feature ID from the FEATURES table.
     * @param tier: Caller's tier, or None for an anonymous caller.
     * @return None when allowed, otherwise the denial to send.
     */
    """
    definition = FEATURES.get(feature)
    if definition is None:
        return AccessDenial(error=f"Unknown feature: {feature}", status=404)

    if tier is None and definition.behavior == FeatureBehavior.AUTH_REQUIRED:
        return AccessDenial(error="Sign in to use this feature", status=401)

    if can_access(feature, tier or Tier.FREE):
        return None

    return AccessDenial(
        error=f"This feature requires a {definition.tier.value} subscription",
        status=403,
    )


def truncate_for_tier(items: List[Any], full_feature: str, teaser_feature: str,
                      tier: Tier) -> Tuple[List[Any], bool]:
    """
    /**
     * Cut a list down to the teaser limit unless the tier has full access.
     *
     * @return (items, limited) where limited is True when the teaser policy
     *         applied to this tier.
     */
    """
    if can_access(full_feature, tier):
        return items, False
    limit = get_feature_limit(teaser_feature, tier)
    if limit is None:
        return items, False
    return items[:limit], True


def gate_profile_response(profile: Dict[str, Any], tier: Tier) -> Dict[str, Any]:
    """
    /**
     * Apply tier policy to a serialized profile; the input is not modified.
     */
    """
    gated = dict(profile)

    for key, feature in HIDDEN_SECTIONS:
        if key in gated and not can_access(feature, tier):
            del gated[key]

    for key, flag, full_feature, teaser_feature in TRUNCATED_SECTIONS:
        items = gated.get(key)
        if not isinstance(items, list):
            continue
        items, limited = truncate_for_tier(items, full_feature, teaser_feature, tier)
        gated[key] = items
        if limited:
            gated[flag] = True

    return gated
