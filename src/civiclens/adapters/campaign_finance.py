"""
/**
 * @file campaign_finance.py
 * @summary Adapter for the OpenFEC API: candidate search, cycle totals and
 *          top individual contributors.
 *
 * @details
 * - Candidate matching keeps the simple "contains" heuristic: prefer a result
 *   whose name contains the query or whose surname the query contains, else
 *   the first result.
 * - Contributors come from the principal campaign committee's Schedule A.
 */
"""

import logging
from typing import List, Optional

from civiclens.services.http_client import JSONFetcher
from civiclens.utils.errors import ConfigurationError
from civiclens.utils.provider_schemas import (
    FECCandidate, FECCommittee, FECResults, FECScheduleA, FECTotals, parse_payload, parse_records,
)
from civiclens.utils.schemas import CandidateMatch, ContributorRecord, FinanceSummary

logger = logging.getLogger(__name__)


def pick_candidate(name: str, candidates: List[FECCandidate]) -> Optional[FECCandidate]:
    """
    /**
     * Best-effort fuzzy match of a search query against candidate results.
     */
    """
    if not candidates:
        return None
    query = name.lower()
    for candidate in candidates:
        candidate_name = candidate.name.lower()
        if not candidate_name:
            continue
        # FEC names are "LAST, FIRST"
        if query in candidate_name or candidate_name.split(",")[0] in query:
            return candidate
    return candidates[0]


class CampaignFinanceAdapter:
    """
    /**
     * OpenFEC adapter.
     *
     * @param http: Resilient JSON fetcher.
     * @param api_key: FEC API key (required by every method).
     */
    """

    def __init__(self, http: JSONFetcher, api_key: Optional[str] = None,
                 base_url: str = "https://api.open.fec.gov/v1"):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url

    async def _results(self, path: str, context: str, **params) -> list:
        if not self.api_key:
            raise ConfigurationError("FEC_API_KEY is not configured")
        query = {"api_key": self.api_key}
        query.update({k: v for k, v in params.items() if v is not None})
        data = await self.http.fetch_json(f"{self.base_url}{path}", params=query)
        envelope = parse_payload(FECResults, data, context)
        return envelope.results if envelope else []

    async def find_candidate(self, name: str, state: Optional[str] = None) -> Optional[CandidateMatch]:
        """
        /**
         * Search active candidates by name.
         *
         * @param name: Display name of the official.
         * @param state: Optional two-letter state filter.
         * @return The matched candidate, or None when the search is empty.
         */
        """
        results = await self._results(
            "/candidates/search", "fec.candidates",
            q=name, sort="-election_year", per_page=5, is_active_candidate="true", state=state,
        )
        match = pick_candidate(name, parse_records(FECCandidate, results, "fec.candidates"))
        if match is None:
            return None
        return CandidateMatch(
            candidate_id=match.candidate_id,
            name=match.name,
            party=match.party_full or match.party or "",
            office=match.office_full or match.office or "",
            state=match.state,
            cycles=match.cycles,
        )

    async def get_finance_totals(self, candidate_id: str, cycle: Optional[int] = None) -> Optional[FinanceSummary]:
        """
        /**
         * Most recent (or requested) cycle totals for a candidate.
         */
        """
        results = await self._results(
            f"/candidate/{candidate_id}/totals", "fec.totals", per_page=1, sort="-cycle", cycle=cycle,
        )
        totals = parse_records(FECTotals, results[:1], "fec.totals")
        if not totals:
            return None
        total = totals[0]

        info = parse_records(FECCandidate, (await self._results(f"/candidate/{candidate_id}", "fec.candidate"))[:1],
                             "fec.candidate")
        candidate = info[0] if info else None

        return FinanceSummary(
            candidate_id=candidate_id,
            name=candidate.name if candidate else "",
            party=(candidate.party_full or candidate.party or "") if candidate else "",
            office=(candidate.office_full or candidate.office or "") if candidate else "",
            cycle=total.cycle,
            total_receipts=total.receipts or 0.0,
            total_disbursements=total.disbursements or 0.0,
            cash_on_hand=total.cash_on_hand_end_period or 0.0,
            individual_contributions=total.individual_contributions or 0.0,
            pac_contributions=total.other_political_committee_contributions or 0.0,
            last_report_date=total.coverage_end_date,
            fec_url=f"https://www.fec.gov/data/candidate/{candidate_id}/",
        )

    async def get_top_contributors(self, candidate_id: str, limit: int = 20) -> List[ContributorRecord]:
        """
        /**
         * Largest individual contributions to the principal campaign committee.
         */
        """
        committees = parse_records(
            FECCommittee,
            await self._results(f"/candidate/{candidate_id}/committees", "fec.committees",
                                per_page=1, designation="P"),
            "fec.committees",
        )
        if not committees:
            return []

        results = await self._results(
            "/schedules/schedule_a", "fec.schedule_a",
            committee_id=committees[0].committee_id, sort="-contribution_receipt_amount",
            per_page=limit, is_individual="true",
        )
        return [
            ContributorRecord(
                name=item.contributor_name or "",
                employer=item.contributor_employer,
                amount=item.contribution_receipt_amount or 0.0,
                date=item.contribution_receipt_date or "",
            )
            for item in parse_records(FECScheduleA, results, "fec.schedule_a")
        ]
