"""
/**
 * @file tiers.py
 * @summary Subscription tiers, the static feature table and rate limits.
 *
 * @details
 * - Tiers are totally ordered: free < premium < institutional; a higher
 *   tier can access everything a lower one can.
 * - FEATURES is process-wide, read-only configuration.
 */
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict


class Tier(str, Enum):
    FREE = "free"
    PREMIUM = "premium"
    INSTITUTIONAL = "institutional"

    @property
    def rank(self) -> int:
        return TIER_RANK[self]


TIER_RANK = {Tier.FREE: 0, Tier.PREMIUM: 1, Tier.INSTITUTIONAL: 2}


class FeatureBehavior(str, Enum):
    """
    /**
     * How a feature presents to a caller below its required tier.
     */
    """
    OPEN = "open"
    TEASER = "teaser"
    HIDDEN = "hidden"
    AUTH_REQUIRED = "auth_required"


class FeatureDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    tier: Tier
    behavior: FeatureBehavior
    limit: Optional[int] = None


class RateLimitConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    requests_per_minute: int
    requests_per_day: int  # -1 = unlimited


def _feature(id: str, label: str, tier: Tier, behavior: FeatureBehavior,
             limit: Optional[int] = None) -> FeatureDefinition:
    return FeatureDefinition(id=id, label=label, tier=tier, behavior=behavior, limit=limit)


_F, _P, _I = Tier.FREE, Tier.PREMIUM, Tier.INSTITUTIONAL
_OPEN, _TEASER, _HIDDEN, _AUTH = (FeatureBehavior.OPEN, FeatureBehavior.TEASER,
                                  FeatureBehavior.HIDDEN, FeatureBehavior.AUTH_REQUIRED)

_FEATURE_LIST = [
    # Profile
    _feature("profile.overview", "Profile Overview", _F, _OPEN),
    _feature("profile.biography", "Biography", _F, _OPEN),
    _feature("profile.contact", "Contact Information", _F, _OPEN),
    # Legislation
    _feature("legislation.sponsored_bills", "Sponsored Bills", _F, _TEASER, limit=5),
    _feature("legislation.cosponsored_bills", "Cosponsored Bills", _P, _HIDDEN),
    _feature("legislation.bill_details", "Bill Details", _P, _HIDDEN),
    _feature("legislation.bill_search", "Bill Search", _P, _HIDDEN),
    # Finance
    _feature("finance.summary", "Finance Summary", _P, _HIDDEN),
    _feature("finance.top_contributors", "Top Contributors", _P, _HIDDEN),
    _feature("finance.pac_contributions", "PAC Contributions", _P, _HIDDEN),
    _feature("finance.expenditures", "Expenditures", _I, _HIDDEN),
    # Votes
    _feature("votes.recent", "Recent Votes", _F, _TEASER, limit=5),
    _feature("votes.full_history", "Full Vote History", _P, _HIDDEN),
    _feature("votes.party_alignment", "Party Alignment", _P, _HIDDEN),
    # Committees
    _feature("committees.list", "Committee List", _F, _OPEN),
    _feature("committees.details", "Committee Details", _P, _HIDDEN),
    # Metrics
    _feature("metrics.scorecard", "Metrics Dashboard", _P, _TEASER),
    _feature("metrics.benchmarks", "Benchmark Comparisons", _P, _HIDDEN),
    # News
    _feature("news.recent", "Recent News", _F, _TEASER, limit=3),
    _feature("news.archive", "News Archive", _P, _HIDDEN),
    # Compare
    _feature("compare.side_by_side", "Side-by-Side Comparison", _P, _HIDDEN),
    _feature("compare.voting_alignment", "Voting Alignment", _P, _HIDDEN),
    _feature("compare.funding_comparison", "Funding Comparison", _P, _HIDDEN),
    # Issues
    _feature("issues.list", "Issue Categories", _F, _OPEN),
    _feature("issues.report", "Issue Reports", _P, _HIDDEN),
    _feature("issues.voting_record", "Issue Voting Record", _P, _HIDDEN),
    # User
    _feature("user.saved_officials", "Saved Officials", _F, _AUTH),
    _feature("user.alerts", "Alerts", _P, _HIDDEN),
    _feature("user.issue_preferences", "Issue Preferences", _F, _AUTH),
    _feature("user.search_history", "Search History", _F, _AUTH),
    # Export
    _feature("export.pdf", "PDF Export", _P, _HIDDEN),
    _feature("export.csv", "CSV Export", _I, _HIDDEN),
    _feature("export.api", "API Access", _I, _HIDDEN),
    # Search
    _feature("search.basic", "Basic Search", _F, _OPEN),
    _feature("search.advanced", "Advanced Search", _P, _HIDDEN),
    # Zip lookup
    _feature("zip.lookup", "Find Representatives", _F, _OPEN),
    _feature("zip.history", "Lookup History", _F, _AUTH),
]

FEATURES: Mapping[str, FeatureDefinition] = MappingProxyType({f.id: f for f in _FEATURE_LIST})

RATE_LIMITS: Mapping[Tier, RateLimitConfig] = MappingProxyType({
    Tier.FREE: RateLimitConfig(requests_per_minute=20, requests_per_day=500),
    Tier.PREMIUM: RateLimitConfig(requests_per_minute=60, requests_per_day=5000),
    Tier.INSTITUTIONAL: RateLimitConfig(requests_per_minute=200, requests_per_day=-1),
})


def parse_tier(value: Optional[str], default: Tier = Tier.FREE) -> Tier:
    try:
        return Tier((value or "").strip().lower())
    except ValueError:
        return default


def can_access(feature: str, tier: Tier) -> bool:
    """
    /**
     * True when the tier's rank reaches the feature's required tier.
     * Unknown features are never accessible.
     */
    """
    definition = FEATURES.get(feature)
    if definition is None:
        return False
    return Tier(tier).rank >= definition.tier.rank


def get_feature_limit(feature: str, tier: Tier) -> Optional[int]:
    """
    /**
     * Truncation limit for the tier, or None when access is unlimited.
     */
    """
    definition = FEATURES.get(feature)
    if definition is None:
        return None
    if can_access(feature, tier) and Tier(tier) != Tier.FREE:
        return None
    return definition.limit


def get_feature_behavior(feature: str, tier: Tier) -> FeatureBehavior:
    definition = FEATURES.get(feature)
    if definition is None:
        return FeatureBehavior.HIDDEN
    if can_access(feature, tier):
        return FeatureBehavior.OPEN
    return definition.behavior
