"""
/**
 * @file congress.py
 * @summary Adapter for the Congress.gov API: members, sponsored bills,
 *          roll-call votes and committee assignments.
 *
 * @details
 * - All I/O goes through an injected JSONFetcher (resilient client).
 * - Member vote positions require one detail fetch per vote (no bulk
 *   endpoint); these run in bounded batches of 5, a failed detail is skipped.
 * - Committee assignments come from the member record when present, else from
 *   the committee listing plus a per-committee membership check.
 *
 * @dependencies
 * - pydantic wire models (utils.provider_schemas)
 */
"""

import logging
from typing import Any, Dict, List, Optional

from civiclens.services.http_client import JSONFetcher
from civiclens.utils.concurrency import gather_settled, run_in_batches
from civiclens.utils.errors import CivicLensError, ConfigurationError
from civiclens.utils.provider_schemas import (
    CongressBill, CongressBillList, CongressCommittee, CongressCommitteeList,
    CongressCommitteeMember, CongressMember, CongressMemberList, CongressMemberResponse,
    CongressPosition, CongressTerm, CongressVoteDetail, CongressVoteList, CongressVoteListItem,
    parse_payload, parse_records,
)
from civiclens.utils.schemas import (
    BillSummary, Chamber, CommitteeAssignment, CommitteeRole, MemberDetail, MemberTerm,
    PartyBreakdown, Subcommittee, VotePosition, VoteRecord,
)

logger = logging.getLogger(__name__)

VOTE_DETAIL_BATCH_SIZE = 5


def normalize_vote_position(raw: Optional[str]) -> VotePosition:
    """
    /**
     * Map a provider vote string onto the four recorded positions.
     */
    """
    value = (raw or "").strip().lower()
    if value in ("yea", "aye", "yes"):
        return VotePosition.YEA
    if value in ("nay", "no"):
        return VotePosition.NAY
    if value == "present":
        return VotePosition.PRESENT
    return VotePosition.NOT_VOTING


def normalize_committee_role(raw: Optional[str]) -> CommitteeRole:
    value = (raw or "").lower()
    if "ranking" in value:
        return CommitteeRole.RANKING_MEMBER
    if "chair" in value and "vice" not in value:
        return CommitteeRole.CHAIR
    return CommitteeRole.MEMBER


def extract_party_breakdown(positions: List[CongressPosition]) -> PartyBreakdown:
    """
    /**
     * Tally yea/nay/not-voting per major party from a vote's positions.
     * Members outside the two major parties are not counted.
     */
    """
    breakdown = PartyBreakdown()
    for position in positions:
        party = (position.member.party_name or "").lower()
        if "democrat" in party:
            tally = breakdown.democratic
        elif "republican" in party:
            tally = breakdown.republican
        else:
            continue

        vote = (position.vote_position or "").lower()
        if vote in ("yea", "aye"):
            tally.yea += 1
        elif vote in ("nay", "no"):
            tally.nay += 1
        else:
            tally.not_voting += 1
    return breakdown


def _term_list(terms: Any) -> List[CongressTerm]:
    # Member detail returns a list; roster listings wrap it as {"item": [...]}
    if isinstance(terms, dict):
        terms = terms.get("item") or []
    return parse_records(CongressTerm, terms, "congress.terms")


def _chamber_from_terms(terms: List[CongressTerm]) -> Chamber:
    if terms and "senate" in (terms[-1].chamber or "").lower():
        return Chamber.SENATE
    return Chamber.HOUSE


def _display_name(member: CongressMember) -> str:
    if member.direct_order_name:
        return member.direct_order_name
    if member.first_name or member.last_name:
        return f"{member.first_name} {member.last_name}".strip()
    # Roster listings use "Last, First"
    name = member.name or ""
    if "," in name:
        last, first = name.split(",", 1)
        return f"{first.strip()} {last.strip()}"
    return name


class CongressAdapter:
    """
    /**
     * Congress.gov adapter.
     *
     * @param http: Resilient JSON fetcher.
     * @param api_key: Congress.gov API key (required by every method).
     * @param congress: Congress number used for vote and committee listings.
     */
    """

    def __init__(self, http: JSONFetcher, api_key: Optional[str] = None, congress: int = 119,
                 base_url: str = "https://api.congress.gov/v3"):
        self.http = http
        self.api_key = api_key
        self.congress = congress
        self.base_url = base_url

    def _params(self, **extra) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError("CONGRESS_API_KEY is not configured")
        params = {"api_key": self.api_key, "format": "json"}
        params.update({k: v for k, v in extra.items() if v is not None})
        return params

    async def _get(self, path: str, not_found_ok: bool = False, **params) -> Any:
        return await self.http.fetch_json(f"{self.base_url}{path}", params=self._params(**params),
                                          not_found_ok=not_found_ok)

    # ===========================
    # Members
    # ===========================

    def _to_member_detail(self, member: CongressMember) -> MemberDetail:
        terms = _term_list(member.terms)
        return MemberDetail(
            bioguide_id=member.bioguide_id,
            name=_display_name(member),
            first_name=member.first_name,
            last_name=member.last_name,
            party=member.party_name or member.party or "",
            state=member.state,
            district=str(member.district) if member.district is not None else None,
            chamber=_chamber_from_terms(terms),
            depiction=member.depiction.image_url if member.depiction else None,
            official_url=member.official_website_url,
            current_member=member.current_member if member.current_member is not None else True,
            birth_year=member.birth_year,
            terms=[MemberTerm(chamber=t.chamber or "", congress=t.congress, start_year=t.start_year)
                   for t in terms],
            sponsored_count=(member.sponsored_legislation.count or 0) if member.sponsored_legislation else 0,
            cosponsored_count=(member.cosponsored_legislation.count or 0) if member.cosponsored_legislation else 0,
        )

    async def get_member(self, bioguide_id: str) -> Optional[MemberDetail]:
        """
        /**
         * Fetch one member's detail record.
         *
         * @return MemberDetail, or None when the member does not exist.
         */
        """
        data = await self._get(f"/member/{bioguide_id}", not_found_ok=True)
        if data is None:
            return None
        envelope = parse_payload(CongressMemberResponse, data, "congress.member")
        if envelope is None:
            return None
        member = parse_payload(CongressMember, envelope.member, "congress.member")
        return self._to_member_detail(member) if member else None

    async def get_members_by_state(self, state: str) -> List[MemberDetail]:
        """
        /**
         * Current members (both chambers) representing a state.
         *
         * @param state: Two-letter postal code.
         */
        """
        data = await self._get(f"/member/{state.upper()}", currentMember="true", limit=250)
        listing = parse_payload(CongressMemberList, data, "congress.members_by_state")
        if listing is None:
            return []
        members = parse_records(CongressMember, listing.members, "congress.members_by_state")
        return [self._to_member_detail(m) for m in members]

    # ===========================
    # Bills
    # ===========================

    async def get_sponsored_bills(self, bioguide_id: str, limit: int = 20) -> List[BillSummary]:
        data = await self._get(f"/member/{bioguide_id}/sponsored-legislation",
                               limit=limit, sort="updateDate+desc")
        listing = parse_payload(CongressBillList, data, "congress.sponsored")
        if listing is None:
            return []

        bills = []
        # Amendments appear in this listing without a bill type; skip them
        for bill in parse_records(CongressBill, listing.sponsored_legislation, "congress.sponsored"):
            bills.append(BillSummary(
                congress=bill.congress,
                type=bill.type,
                number=bill.number,
                title=bill.title or "Untitled",
                introduced_date=bill.introduced_date,
                latest_action=(bill.latest_action.text or "") if bill.latest_action else "",
                policy_area=bill.policy_area.name if bill.policy_area else None,
                url=bill.url or f"https://congress.gov/bill/{bill.congress}th-congress/"
                                f"{bill.type.lower()}-bill/{bill.number}",
            ))
        return bills

    # ===========================
    # Votes
    # ===========================

    async def get_recent_votes(self, chamber: str, limit: int = 20) -> List[CongressVoteListItem]:
        path = "/senate-vote" if chamber == Chamber.SENATE.value else "/house-vote"
        data = await self._get(path, congress=self.congress, limit=limit, sort="date+desc")
        listing = parse_payload(CongressVoteList, data, "congress.votes")
        if listing is None:
            return []
        return parse_records(CongressVoteListItem, listing.votes, "congress.votes")

    async def _member_vote(self, bioguide_id: str, chamber: str,
                           vote: CongressVoteListItem) -> Optional[VoteRecord]:
        prefix = "senate-vote" if chamber == Chamber.SENATE.value else "house-vote"
        session = vote.session_number
        url = vote.url or (
            f"{self.base_url}/{prefix}/{self.congress}/{session}/{vote.roll_number}" if session
            else f"{self.base_url}/{prefix}/{self.congress}/{vote.roll_number}"
        )
        data = await self.http.fetch_json(url, params=self._params())
        if isinstance(data, dict) and isinstance(data.get("vote"), dict):
            data = data["vote"]
        detail = parse_payload(CongressVoteDetail, data, "congress.vote_detail")
        if detail is None:
            return None

        position = next((p for p in detail.positions if p.member.bioguide_id == bioguide_id), None)
        if position is None:
            return None

        bill_number = None
        if detail.bill and detail.bill.number:
            bill_number = f"{detail.bill.type or ''}{detail.bill.number}"

        return VoteRecord(
            date=detail.date or vote.date or "",
            question=detail.question or vote.question or "",
            result=detail.result or vote.result or "",
            member_position=normalize_vote_position(position.vote_position),
            party_breakdown=extract_party_breakdown(detail.positions),
            bill_number=bill_number,
            url=vote.url,
            roll_number=vote.roll_number,
        )

    async def get_member_votes(self, bioguide_id: str, chamber: str, limit: int = 20) -> List[VoteRecord]:
        """
        /**
         * Recent roll-call votes joined with one member's position.
         *
         * Batches are processed in submission order; order within a batch is
         * not guaranteed, so callers needing chronology must re-sort.
         */
        """
        recent = await self.get_recent_votes(chamber, limit * 2)
        results: List[VoteRecord] = []

        for start in range(0, len(recent), VOTE_DETAIL_BATCH_SIZE):
            if len(results) >= limit:
                break
            batch = recent[start:start + VOTE_DETAIL_BATCH_SIZE]
            settled = await gather_settled(*(self._member_vote(bioguide_id, chamber, v) for v in batch))
            for outcome in settled:
                if not outcome.ok:
                    logger.debug(f"Skipping vote detail: {outcome.error}")
                    continue
                if outcome.value is not None:
                    results.append(outcome.value)

        return results[:limit]

    # ===========================
    # Committees
    # ===========================

    def _to_assignment(self, committee: CongressCommittee, role: Optional[str] = None,
                       include_subcommittees: bool = True) -> CommitteeAssignment:
        code = committee.system_code or committee.code or ""
        subcommittees = None
        if include_subcommittees and committee.subcommittees is not None:
            subcommittees = [
                Subcommittee(name=sc.get("name", ""),
                             role=normalize_committee_role(sc.get("role")).value)
                for sc in committee.subcommittees if isinstance(sc, dict) and sc.get("name")
            ]
        return CommitteeAssignment(
            name=committee.name,
            code=code,
            role=normalize_committee_role(role if role is not None else committee.role),
            chamber=committee.chamber or "",
            url=f"https://congress.gov/committee/{code}",
            subcommittees=subcommittees,
        )

    async def _committee_membership(self, bioguide_id: str,
                                    committee: CongressCommittee) -> Optional[CommitteeAssignment]:
        data = await self._get(f"/committee/{committee.system_code}", congress=self.congress)
        members = ((data or {}).get("committee") or {}).get("members") or []
        for member in parse_records(CongressCommitteeMember, members, "congress.committee_members"):
            if member.bioguide_id == bioguide_id:
                return self._to_assignment(committee, role=member.role, include_subcommittees=False)
        return None

    async def get_member_committees(self, bioguide_id: str) -> List[CommitteeAssignment]:
        """
        /**
         * Committee assignments for a member.
         */
        """
        try:
            data = await self._get(f"/member/{bioguide_id}", not_found_ok=True)
        except ConfigurationError:
            raise
        except CivicLensError as e:
            logger.warning(f"Member record for {bioguide_id} unavailable, scanning committees: {e}")
            data = None
        member = (data or {}).get("member") if isinstance(data, dict) else None
        if isinstance(member, dict) and isinstance(member.get("committees"), list):
            committees = parse_records(CongressCommittee, member["committees"], "congress.member_committees")
            return [self._to_assignment(c) for c in committees]

        # Fallback: committee listing + membership check per committee
        try:
            raw_listing = await self._get("/committee", congress=self.congress, limit=250)
        except CivicLensError as e:
            logger.warning(f"Committee listing unavailable for {bioguide_id}: {e}")
            return []
        listing = parse_payload(CongressCommitteeList, raw_listing, "congress.committees")
        if listing is None:
            return []
        committees = [c for c in parse_records(CongressCommittee, listing.committees, "congress.committees")
                      if c.system_code]

        settled = await run_in_batches(
            [lambda c=c: self._committee_membership(bioguide_id, c) for c in committees],
            batch_size=VOTE_DETAIL_BATCH_SIZE,
        )
        return [s.value for s in settled if s.ok and s.value is not None]
