"""
/**
 * @file issues.py
 * @summary Issue-specific reports across the twelve categories.
 *
 * @details
 * - Bills are matched through the legislation engine.
 * - Votes carry no policy area, so they are matched by keyword against the
 *   question text plus bill number.
 */
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from civiclens.engines.categories import ISSUE_CATEGORIES, get_category
from civiclens.engines.legislation import CategorizedBill, LegislationEngine
from civiclens.utils.schemas import BillSummary, VotePosition, VoteRecord

ISSUE_KEYWORDS: Dict[str, List[str]] = {
    "healthcare": ["health", "medicare", "medicaid", "hospital", "drug", "pharmaceutical"],
    "economy": ["economy", "jobs", "employment", "labor", "wage", "business", "commerce", "trade"],
    "education": ["education", "school", "student", "university", "college", "teacher"],
    "environment": ["climate", "environment", "energy", "emission", "pollution", "conservation"],
    "defense": ["defense", "military", "armed forces", "veteran", "national security"],
    "immigration": ["immigration", "border", "visa", "asylum", "refugee", "citizenship"],
    "civil-rights": ["civil rights", "voting rights", "discrimination", "equality", "justice"],
    "taxation": ["tax", "revenue", "irs", "fiscal", "budget", "deficit"],
    "infrastructure": ["infrastructure", "highway", "bridge", "broadband", "transportation", "water"],
    "technology": ["technology", "privacy", "cyber", "data", "artificial intelligence", "internet"],
    "agriculture": ["farm", "agriculture", "food", "crop", "rural"],
    "foreign-policy": ["foreign", "international", "treaty", "diplomatic", "sanction", "nato"],
}


class IssueSummary(BaseModel):
    total_bills: int = 0
    total_votes: int = 0
    yea_votes: int = 0
    nay_votes: int = 0


class IssueReport(BaseModel):
    issue_id: str
    label: str
    official_name: str
    related_bills: List[CategorizedBill] = Field(default_factory=list)
    related_votes: List[VoteRecord] = Field(default_factory=list)
    summary: IssueSummary = Field(default_factory=IssueSummary)


class IssuesEngine:
    """
    /**
     * Build per-issue views of an official's bills and votes.
     */
    """

    def __init__(self, legislation: Optional[LegislationEngine] = None):
        self.legislation = legislation or LegislationEngine()

    def filter_votes_by_issue(self, votes: List[VoteRecord], issue_id: str) -> List[VoteRecord]:
        keywords = ISSUE_KEYWORDS.get(issue_id, [])
        if not keywords:
            return []
        related = []
        for vote in votes:
            text = f"{vote.question} {vote.bill_number or ''}".lower()
            if any(keyword in text for keyword in keywords):
                related.append(vote)
        return related

    def generate_report(self, official_name: str, issue_id: str,
                        bills: List[BillSummary], votes: List[VoteRecord]) -> IssueReport:
        """
        /**
         * Report for one issue.
         *
         * @param official_name: Display name of the official.
         * @param issue_id: One of the twelve category IDs.
         * @param bills: Sponsored bills.
         * @param votes: Recorded votes.
         */
        """
        category = get_category(issue_id)
        related_bills = self.legislation.filter_by_issue(self.legislation.categorize_bills(bills), issue_id)
        related_votes = self.filter_votes_by_issue(votes, issue_id)

        return IssueReport(
            issue_id=issue_id,
            label=category.label if category else issue_id,
            official_name=official_name,
            related_bills=related_bills,
            related_votes=related_votes,
            summary=IssueSummary(
                total_bills=len(related_bills),
                total_votes=len(related_votes),
                yea_votes=sum(1 for v in related_votes if v.member_position == VotePosition.YEA),
                nay_votes=sum(1 for v in related_votes if v.member_position == VotePosition.NAY),
            ),
        )

    def generate_all_reports(self, official_name: str, bills: List[BillSummary],
                             votes: List[VoteRecord]) -> List[IssueReport]:
        """
        /**
         * Reports for every category with at least one related bill or vote.
         */
        """
        reports = [self.generate_report(official_name, c.id, bills, votes) for c in ISSUE_CATEGORIES]
        return [r for r in reports if r.summary.total_bills > 0 or r.summary.total_votes > 0]
