"""
/**
 * @file compare.py
 * @summary Side-by-side comparison of two official profiles.
 *
 * @details
 * - Shared bills: intersection by type + number.
 * - Voting alignment: over votes both members cast on the same date and
 *   question, excluding Not Voting on either side; symmetric in its inputs.
 * - Funding: receipts and the individual/PAC percentage split.
 * - Legislative focus: bill counts per policy area, largest combined first.
 */
"""

import math
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from civiclens.utils.schemas import BillSummary, OfficialProfile, VotePosition, VoteRecord


class ComparedOfficial(BaseModel):
    bioguide_id: str
    name: str
    party: str = ""
    state: str = ""
    chamber: str = ""
    sponsored_count: int = 0
    cosponsored_count: int = 0


class FundingSplit(BaseModel):
    total_receipts: float = 0.0
    individual_pct: int = 0
    pac_pct: int = 0


class FundingComparison(BaseModel):
    official1: FundingSplit = Field(default_factory=FundingSplit)
    official2: FundingSplit = Field(default_factory=FundingSplit)


class FocusComparison(BaseModel):
    issue_id: str
    label: str
    official1_bill_count: int = 0
    official2_bill_count: int = 0


class ComparisonResult(BaseModel):
    officials: Tuple[ComparedOfficial, ComparedOfficial]
    shared_bills: List[BillSummary] = Field(default_factory=list)
    voting_alignment: Optional[int] = None
    funding_comparison: FundingComparison = Field(default_factory=FundingComparison)
    legislative_focus_comparison: List[FocusComparison] = Field(default_factory=list)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _vote_key(vote: VoteRecord) -> str:
    return f"{vote.date}:{vote.question}"


class CompareEngine:
    """
    /**
     * Compare two assembled profiles.
     */
    """

    def compare(self, profile1: OfficialProfile, profile2: OfficialProfile) -> ComparisonResult:
        return ComparisonResult(
            officials=(self.extract_official(profile1), self.extract_official(profile2)),
            shared_bills=self.find_shared_bills(profile1.bills, profile2.bills),
            voting_alignment=self.voting_alignment(profile1.votes, profile2.votes),
            funding_comparison=FundingComparison(
                official1=self.funding_split(profile1),
                official2=self.funding_split(profile2),
            ),
            legislative_focus_comparison=self.compare_focus(profile1.bills, profile2.bills),
        )

    def extract_official(self, profile: OfficialProfile) -> ComparedOfficial:
        member = profile.member
        return ComparedOfficial(
            bioguide_id=member.bioguide_id,
            name=member.name,
            party=member.party,
            state=member.state,
            chamber=member.chamber.value,
            sponsored_count=member.sponsored_count,
            cosponsored_count=member.cosponsored_count,
        )

    def find_shared_bills(self, bills1: List[BillSummary], bills2: List[BillSummary]) -> List[BillSummary]:
        keys2 = {b.bill_key for b in bills2}
        return [b for b in bills1 if b.bill_key in keys2]

    def voting_alignment(self, votes1: List[VoteRecord], votes2: List[VoteRecord]) -> Optional[int]:
        """
        /**
         * Percentage of shared votes where both members took the same position.
         *
         * @return Rounded percentage, or None when there are no shared votes.
         */
        """
        if not votes1 or not votes2:
            return None

        positions1: Dict[str, VotePosition] = {_vote_key(v): v.member_position for v in votes1}
        positions2: Dict[str, VotePosition] = {_vote_key(v): v.member_position for v in votes2}

        shared = aligned = 0
        for key in positions1.keys() & positions2.keys():
            first, second = positions1[key], positions2[key]
            if VotePosition.NOT_VOTING in (first, second):
                continue
            shared += 1
            if first == second:
                aligned += 1

        return round_half_up(aligned / shared * 100) if shared else None

    def funding_split(self, profile: OfficialProfile) -> FundingSplit:
        candidate = profile.finance.candidate if profile.finance else None
        total = candidate.total_receipts if candidate else 0.0
        if not candidate or total <= 0:
            return FundingSplit(total_receipts=total)
        return FundingSplit(
            total_receipts=total,
            individual_pct=round_half_up(candidate.individual_contributions / total * 100),
            pac_pct=round_half_up(candidate.pac_contributions / total * 100),
        )

    def compare_focus(self, bills1: List[BillSummary], bills2: List[BillSummary]) -> List[FocusComparison]:
        areas: List[str] = []
        for bill in bills1 + bills2:
            if bill.policy_area and bill.policy_area not in areas:
                areas.append(bill.policy_area)

        focus = [
            FocusComparison(
                issue_id="-".join(area.lower().split()),
                label=area,
                official1_bill_count=sum(1 for b in bills1 if b.policy_area == area),
                official2_bill_count=sum(1 for b in bills2 if b.policy_area == area),
            )
            for area in areas
        ]
        focus.sort(key=lambda f: f.official1_bill_count + f.official2_bill_count, reverse=True)
        return focus
