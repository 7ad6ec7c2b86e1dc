"""
/**
 * @file scorecard.py
 * @summary Benchmarked metrics for one official: raw numbers paired with
 *          chamber averages, no letter grades.
 *
 * @details
 * - Six dimensions: legislative activity, collaboration, vote participation,
 *   cross-party voting, legislative effectiveness, committee engagement.
 * - Deterministic given its inputs; the generation timestamp is injectable.
 */
"""

import math
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from civiclens.utils.schemas import (
    BillSummary, Chamber, CommitteeAssignment, MemberDetail, VotePosition, VoteRecord,
)

# Chamber averages (approximate, updated periodically)
CHAMBER_BENCHMARKS: Dict[str, Dict[str, float]] = {
    "house": {
        "sponsored": 12,
        "cosponsored": 300,
        "participation_rate": 95,
        "bipartisan_rate": 15,
        "bills_enacted": 2,
        "committees": 2,
    },
    "senate": {
        "sponsored": 15,
        "cosponsored": 200,
        "participation_rate": 96,
        "bipartisan_rate": 20,
        "bills_enacted": 3,
        "committees": 3,
    },
}


class MetricDimension(BaseModel):
    id: str
    label: str
    description: str
    value: float
    benchmark: float
    unit: str
    context: str


class Scorecard(BaseModel):
    bioguide_id: str
    name: str
    chamber: Chamber
    dimensions: List[MetricDimension] = Field(default_factory=list)
    generated_at: str


class VoteStats(BaseModel):
    votes_with_party: int = 0
    votes_against_party: int = 0
    missed_votes: int = 0
    total_votes: int = 0


class MemberMetricsInput(BaseModel):
    bioguide_id: str
    name: str
    chamber: Chamber = Chamber.HOUSE
    sponsored_count: int = 0
    cosponsored_count: int = 0
    votes_with_party: int = 0
    votes_against_party: int = 0
    missed_votes: int = 0
    total_votes: int = 0
    bills_enacted: int = 0
    committee_memberships: int = 0


def _round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def compute_vote_stats(member: MemberDetail, votes: List[VoteRecord]) -> VoteStats:
    """
    /**
     * Party-line alignment and missed votes.
     *
     * A cast vote matches the party when it equals the majority position of
     * the member's party (Yea if yea > nay, else Nay).
     */
    """
    stats = VoteStats(total_votes=len(votes))
    party_key = "democratic" if "democrat" in member.party.lower() else "republican"

    for vote in votes:
        if vote.member_position == VotePosition.NOT_VOTING:
            stats.missed_votes += 1
            continue
        tally = getattr(vote.party_breakdown, party_key)
        majority = VotePosition.YEA if tally.yea > tally.nay else VotePosition.NAY
        if vote.member_position == majority:
            stats.votes_with_party += 1
        else:
            stats.votes_against_party += 1
    return stats


def count_committee_memberships(committees: List[CommitteeAssignment]) -> int:
    return len(committees) + sum(len(c.subcommittees or []) for c in committees)


def count_bills_enacted(bills: List[BillSummary]) -> int:
    return sum(1 for b in bills if "became public law" in b.latest_action.lower())


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScorecardEngine:
    """
    /**
     * Produce a scorecard from pre-computed member metrics.
     *
     * @param now: Timestamp factory for generated_at.
     */
    """

    def __init__(self, now: Optional[Callable[[], str]] = None):
        self.now = now or _utc_now

    def generate(self, data: MemberMetricsInput) -> Scorecard:
        chamber = data.chamber.value
        benchmarks = CHAMBER_BENCHMARKS[chamber]

        participation = 0.0
        if data.total_votes > 0:
            participation = (data.total_votes - data.missed_votes) / data.total_votes * 100

        cast = data.votes_with_party + data.votes_against_party
        bipartisan = data.votes_against_party / cast * 100 if cast > 0 else 0.0

        def dimension(metric_id, label, description, value, key, unit, context):
            return MetricDimension(id=metric_id, label=label, description=description, value=value,
                                   benchmark=benchmarks[key], unit=unit, context=context)

        dimensions = [
            dimension("legislative_activity", "Legislative Activity", "Bills sponsored this Congress",
                      data.sponsored_count, "sponsored", "bills",
                      f"The average {chamber} member sponsors {benchmarks['sponsored']:g} bills per Congress."),
            dimension("collaboration", "Collaboration", "Bills cosponsored this Congress",
                      data.cosponsored_count, "cosponsored", "bills",
                      f"The average {chamber} member cosponsors {benchmarks['cosponsored']:g} bills per Congress."),
            dimension("participation", "Vote Participation", "Percentage of roll call votes attended",
                      _round1(participation), "participation_rate", "%",
                      f"The average {chamber} member participates in "
                      f"{benchmarks['participation_rate']:g}% of votes."),
            dimension("bipartisan", "Cross-Party Voting", "Percentage of votes against party line",
                      _round1(bipartisan), "bipartisan_rate", "%",
                      f"The average {chamber} member votes against their party "
                      f"{benchmarks['bipartisan_rate']:g}% of the time."),
            dimension("effectiveness", "Legislative Effectiveness", "Sponsored bills signed into law",
                      data.bills_enacted, "bills_enacted", "laws",
                      f"The average {chamber} member gets {benchmarks['bills_enacted']:g} bills enacted per Congress."),
            dimension("committee_engagement", "Committee Engagement", "Committee and subcommittee memberships",
                      data.committee_memberships, "committees", "committees",
                      f"The average {chamber} member serves on {benchmarks['committees']:g} committees."),
        ]

        return Scorecard(
            bioguide_id=data.bioguide_id,
            name=data.name,
            chamber=data.chamber,
            dimensions=dimensions,
            generated_at=self.now(),
        )


def build_metrics_input(member: MemberDetail, votes: List[VoteRecord],
                        committees: List[CommitteeAssignment],
                        bills: Optional[List[BillSummary]] = None) -> MemberMetricsInput:
    """
    /**
     * Assemble scorecard inputs from fetched profile parts.
     */
    """
    stats = compute_vote_stats(member, votes)
    return MemberMetricsInput(
        bioguide_id=member.bioguide_id,
        name=member.name,
        chamber=member.chamber,
        sponsored_count=member.sponsored_count,
        cosponsored_count=member.cosponsored_count,
        votes_with_party=stats.votes_with_party,
        votes_against_party=stats.votes_against_party,
        missed_votes=stats.missed_votes,
        total_votes=stats.total_votes,
        bills_enacted=count_bills_enacted(bills or []),
        committee_memberships=count_committee_memberships(committees),
    )
