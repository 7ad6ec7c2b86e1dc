"""
/**
 * @file legislation.py
 * @summary Bill to issue-category mapping.
 *
 * @details
 * - A bill's categories come from its policy area (static table) plus
 *   substring keyword matches against its title; a bill may land in several
 *   categories or none.
 * - Pure and synchronous: no I/O, no caching.
 */
"""

from typing import Dict, List

from pydantic import Field

from civiclens.engines.categories import ISSUE_CATEGORIES
from civiclens.utils.schemas import BillSummary

POLICY_AREA_MAP: Dict[str, List[str]] = {
    "Health": ["healthcare"],
    "Economics and Public Finance": ["economy", "taxation"],
    "Education": ["education"],
    "Environmental Protection": ["environment"],
    "Energy": ["environment", "infrastructure"],
    "Armed Forces and National Security": ["defense"],
    "Immigration": ["immigration"],
    "Civil Rights and Liberties, Minority Issues": ["civil-rights"],
    "Taxation": ["taxation"],
    "Transportation and Public Works": ["infrastructure"],
    "Science, Technology, Communications": ["technology"],
    "Agriculture and Food": ["agriculture"],
    "International Affairs": ["foreign-policy"],
    "Crime and Law Enforcement": ["civil-rights"],
    "Labor and Employment": ["economy"],
    "Housing and Community Development": ["economy", "infrastructure"],
    "Social Welfare": ["healthcare", "economy"],
    "Finance and Financial Sector": ["economy"],
    "Commerce": ["economy", "technology"],
    "Government Operations and Politics": ["civil-rights"],
    "Native Americans": ["civil-rights"],
    "Public Lands and Natural Resources": ["environment"],
    "Water Resources Development": ["environment", "infrastructure"],
    "Emergency Management": ["defense"],
}

TITLE_KEYWORDS: Dict[str, str] = {
    "health": "healthcare", "medicare": "healthcare", "medicaid": "healthcare",
    "tax": "taxation", "revenue": "taxation",
    "education": "education", "school": "education", "student": "education",
    "climate": "environment", "energy": "environment", "emissions": "environment",
    "defense": "defense", "military": "defense", "veterans": "defense",
    "immigra": "immigration", "border": "immigration", "visa": "immigration",
    "civil rights": "civil-rights", "voting rights": "civil-rights",
    "infrastructure": "infrastructure", "highway": "infrastructure", "broadband": "infrastructure",
    "technology": "technology", "privacy": "technology", "cyber": "technology",
    "farm": "agriculture", "agriculture": "agriculture",
    "foreign": "foreign-policy", "international": "foreign-policy", "treaty": "foreign-policy",
}


class CategorizedBill(BillSummary):
    categories: List[str] = Field(default_factory=list)
    summary: str = ""


class LegislationEngine:
    """
    /**
     * Categorize bills into issue areas.
     */
    """

    def infer_categories(self, bill: BillSummary) -> List[str]:
        categories: List[str] = []

        for category in POLICY_AREA_MAP.get(bill.policy_area or "", []):
            if category not in categories:
                categories.append(category)

        title = bill.title.lower()
        for keyword, category in TITLE_KEYWORDS.items():
            if keyword in title and category not in categories:
                categories.append(category)

        return categories

    def categorize_bill(self, bill: BillSummary) -> CategorizedBill:
        return CategorizedBill(**bill.model_dump(), categories=self.infer_categories(bill))

    def categorize_bills(self, bills: List[BillSummary]) -> List[CategorizedBill]:
        return [self.categorize_bill(b) for b in bills]

    def filter_by_issue(self, bills: List[CategorizedBill], issue_id: str) -> List[CategorizedBill]:
        return [b for b in bills if issue_id in b.categories]

    def get_issue_summary(self, bills: List[CategorizedBill]) -> Dict[str, int]:
        """
        /**
         * Bill count per issue category (every category present, zero or more).
         */
        """
        return {
            category.id: sum(1 for b in bills if category.id in b.categories)
            for category in ISSUE_CATEGORIES
        }
