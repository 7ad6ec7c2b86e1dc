"""
/**
 * @file test_access.py
 * @summary Tier ordering, the feature table and response gating.
 */
"""

import pytest
from pathlib import Path

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from civiclens.access.gating import gate_profile_response, require_feature, truncate_for_tier
from civiclens.access.tiers import (
    FEATURES, RATE_LIMITS, FeatureBehavior, Tier, can_access, get_feature_behavior,
    get_feature_limit, parse_tier,
)

TIERS = [Tier.FREE, Tier.PREMIUM, Tier.INSTITUTIONAL]


class TestTiers:

    def test_feature_table(self):
        assert len(FEATURES) == 37
        assert FEATURES["votes.recent"].limit == 5
        assert FEATURES["news.recent"].limit == 3
        assert FEATURES["export.csv"].tier == Tier.INSTITUTIONAL

    def test_access_is_monotonic_in_tier(self):
        """
        /**
         * Anything a lower tier can access, every higher tier can too.
         */
        """
        for feature in FEATURES:
            for lower, higher in zip(TIERS, TIERS[1:]):
                if can_access(feature, lower):
                    assert can_access(feature, higher), feature

    def test_unknown_feature_is_never_accessible(self):
        assert not can_access("nope.nothing", Tier.INSTITUTIONAL)
        assert get_feature_limit("nope.nothing", Tier.FREE) is None
        assert get_feature_behavior("nope.nothing", Tier.FREE) == FeatureBehavior.HIDDEN

    def test_limits_apply_only_to_free(self):
        assert get_feature_limit("votes.recent", Tier.FREE) == 5
        assert get_feature_limit("votes.recent", Tier.PREMIUM) is None
        assert get_feature_limit("profile.overview", Tier.FREE) is None

    def test_behavior_for_locked_features(self):
        assert get_feature_behavior("finance.summary", Tier.FREE) == FeatureBehavior.HIDDEN
        assert get_feature_behavior("metrics.scorecard", Tier.FREE) == FeatureBehavior.TEASER
        assert get_feature_behavior("metrics.scorecard", Tier.PREMIUM) == FeatureBehavior.OPEN

    def test_rate_limits(self):
        assert RATE_LIMITS[Tier.FREE].requests_per_minute == 20
        assert RATE_LIMITS[Tier.FREE].requests_per_day == 500
        assert RATE_LIMITS[Tier.INSTITUTIONAL].requests_per_day == -1

    def test_parse_tier(self):
        assert parse_tier("Premium") == Tier.PREMIUM
        assert parse_tier(None) == Tier.FREE
        assert parse_tier("platinum") == Tier.FREE


class TestRequireFeature:

    def test_allowed(self):
        assert require_feature("profile.overview", Tier.FREE) is None
        assert require_feature("finance.summary", Tier.PREMIUM) is None

    def test_premium_feature_for_free_caller(self):
        denial = require_feature("finance.summary", Tier.FREE)
        assert denial.status == 403
        assert denial.error == "This feature requires a premium subscription"

    def test_institutional_feature_names_tier(self):
        denial = require_feature("export.api", Tier.PREMIUM)
        assert denial.status == 403
        assert "institutional" in denial.error

    def test_anonymous_caller_on_auth_required_feature(self):
        assert require_feature("user.saved_officials", None).status == 401
        assert require_feature("user.saved_officials", Tier.FREE) is None

    def test_anonymous_caller_is_treated_as_free_otherwise(self):
        assert require_feature("zip.lookup", None) is None
        assert require_feature("compare.side_by_side", None).status == 403

    def test_unknown_feature(self):
        assert require_feature("nope.nothing", Tier.PREMIUM).status == 404


class TestGating:

    def profile(self):
        return {
            "member": {"bioguide_id": "C001117"},
            "bills": [{"number": n} for n in range(12)],
            "votes": [{"roll_number": n} for n in range(30)],
            "news": [{"title": str(n)} for n in range(8)],
            "finance": {"found": True},
            "scorecard": {"dimensions": []},
        }

    def test_free_caller_gets_teaser(self):
        gated = gate_profile_response(self.profile(), Tier.FREE)

        assert len(gated["votes"]) == 5
        assert gated["votes_limited"] is True
        assert len(gated["bills"]) == 5
        assert gated["bills_limited"] is True
        assert len(gated["news"]) == 3
        assert gated["news_limited"] is True
        assert "finance" not in gated
        assert "scorecard" not in gated
        assert gated["member"] == {"bioguide_id": "C001117"}

    def test_premium_caller_gets_everything(self):
        gated = gate_profile_response(self.profile(), Tier.PREMIUM)

        assert len(gated["votes"]) == 30
        assert "votes_limited" not in gated
        assert len(gated["news"]) == 8
        assert gated["finance"] == {"found": True}
        assert "scorecard" in gated

    def test_input_is_not_modified(self):
        profile = self.profile()
        gate_profile_response(profile, Tier.FREE)
        assert len(profile["votes"]) == 30
        assert "finance" in profile

    def test_missing_sections_are_left_alone(self):
        gated = gate_profile_response({"member": {}}, Tier.FREE)
        assert gated == {"member": {}}

    def test_truncate_for_tier(self):
        items, limited = truncate_for_tier(list(range(10)), "votes.full_history", "votes.recent", Tier.FREE)
        assert items == [0, 1, 2, 3, 4]
        assert limited
        items, limited = truncate_for_tier(list(range(10)), "votes.full_history", "votes.recent",
                                           Tier.INSTITUTIONAL)
        assert len(items) == 10
        assert not limited
