"""
/**
 * @file orchestrator.py
 * @summary Composes source adapters and in-process caches into unified
 *          per-official aggregates.
 *
 * @details
 * - Read-through/write-through caching for profiles (30 min), zip lookups
 *   (24 h) and finance (6 h).
 * - The core profile (member + sponsored bills) is load-bearing: either
 *   failing aborts the call. Supplementary fetches run concurrently and each
 *   one degrades to None/[] on failure without affecting its siblings.
 * - Zip lookups fall back from the civic provider to the legislative state
 *   roster, resolving the state from a static table.
 */
"""

import asyncio
import logging
from typing import Dict, List, Optional

import httpx
from pydantic import ValidationError

from civiclens.adapters.campaign_finance import CampaignFinanceAdapter
from civiclens.adapters.civic_info import CivicInfoAdapter
from civiclens.adapters.congress import CongressAdapter
from civiclens.adapters.news import NewsAdapter
from civiclens.adapters.wikidata import WikidataAdapter
from civiclens.adapters.wikipedia import WikipediaAdapter
from civiclens.adapters.zip_state import resolve_state
from civiclens.services.cache import LRUCache
from civiclens.services.http_client import ResilientHTTPClient
from civiclens.services.synthesis import SynthesisService
from civiclens.utils.concurrency import gather_settled
from civiclens.utils.config import Settings
from civiclens.utils.errors import CivicLensError, ProfileFetchError, ZipLookupError
from civiclens.utils.schemas import (
    BillSummary, BiographyResult, Chamber, CommitteeAssignment, FinanceResult, MemberDetail,
    MemberProfile, NewsArticle, OfficialProfile, RepresentativeInfo, VoteRecord, WikidataFacts,
    WikipediaBio, ZipLookupResult,
)

logger = logging.getLogger(__name__)

PROFILE_CACHE_TTL = 30 * 60
ZIP_CACHE_TTL = 24 * 60 * 60
FINANCE_CACHE_TTL = 6 * 60 * 60


# Provider failures that send the zip lookup to the roster fallback
ZIP_PROVIDER_ERRORS = (CivicLensError, httpx.HTTPError, ValidationError)


def _describe(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"


def _roster_order(member: MemberDetail):
    # Senators first, then representatives by district
    district = int(member.district) if (member.district or "").isdigit() else 0
    return (member.chamber != Chamber.SENATE, district)


def member_to_representative(member: MemberDetail) -> RepresentativeInfo:
    """
    /**
     * Reduce a roster member record to the zip-lookup representative shape.
     */
    """
    if member.chamber == Chamber.SENATE:
        title = "U.S. Senator"
    elif member.district:
        title = f"U.S. Representative (District {member.district})"
    else:
        title = "U.S. Representative"
    return RepresentativeInfo(
        name=member.name,
        title=title,
        party=member.party,
        chamber=member.chamber.value,
        photo_url=member.depiction,
        bioguide_id=member.bioguide_id,
        urls=[member.official_url] if member.official_url else [],
    )


class Orchestrator:
    """
    /**
     * Higher-level civic data operations over the source adapters.
     *
     * @param congress: Legislative data adapter.
     * @param finance: Campaign finance adapter.
     * @param civic_info: Zip to representatives adapter.
     * @param wikipedia: Biography text adapter.
     * @param wikidata: Structured facts adapter.
     * @param news: News adapter.
     * @param synthesis: Optional generative-text helper.
     * @param http: Shared resilient client, closed by close().
     */
    """

    def __init__(self, congress: CongressAdapter, finance: CampaignFinanceAdapter,
                 civic_info: CivicInfoAdapter, wikipedia: WikipediaAdapter,
                 wikidata: WikidataAdapter, news: NewsAdapter,
                 synthesis: Optional[SynthesisService] = None,
                 profile_cache: Optional[LRUCache] = None,
                 zip_cache: Optional[LRUCache] = None,
                 finance_cache: Optional[LRUCache] = None,
                 http: Optional[ResilientHTTPClient] = None):
        self.congress = congress
        self.finance = finance
        self.civic_info = civic_info
        self.wikipedia = wikipedia
        self.wikidata = wikidata
        self.news = news
        self.synthesis = synthesis or SynthesisService()
        self.profile_cache = profile_cache if profile_cache is not None else LRUCache(max_entries=200, default_ttl=PROFILE_CACHE_TTL)
        self.zip_cache = zip_cache if zip_cache is not None else LRUCache(max_entries=1000, default_ttl=ZIP_CACHE_TTL)
        self.finance_cache = finance_cache if finance_cache is not None else LRUCache(max_entries=200, default_ttl=FINANCE_CACHE_TTL)
        self.http = http

    @classmethod
    def from_settings(cls, settings: Settings, http: Optional[ResilientHTTPClient] = None) -> "Orchestrator":
        """
        /**
         * Wire every adapter to one shared resilient client.
         */
        """
        http = http or ResilientHTTPClient(timeout=settings.http_timeout,
                                           max_retries=settings.http_max_retries)
        return cls(
            congress=CongressAdapter(http, api_key=settings.congress_api_key,
                                     congress=settings.congress_number),
            finance=CampaignFinanceAdapter(http, api_key=settings.fec_api_key),
            civic_info=CivicInfoAdapter(http, api_key=settings.google_civic_api_key),
            wikipedia=WikipediaAdapter(http),
            wikidata=WikidataAdapter(http),
            news=NewsAdapter(http, api_key=settings.news_api_key),
            synthesis=SynthesisService(api_key=settings.openai_api_key,
                                       model=settings.synthesis_model,
                                       base_url=settings.openai_base_url),
            http=http,
        )

    async def close(self):
        if self.http is not None:
            await self.http.close()
        await self.synthesis.close()

    # ===========================
    # Zip code lookup
    # ===========================

    async def lookup_by_zip_code(self, zip_code: str) -> ZipLookupResult:
        """
        /**
         * Representatives for a postal code, with state-roster fallback.
         *
         * @raises ZipLookupError naming the failed provider(s).
         */
        """
        cached = self.zip_cache.get(zip_code)
        if cached is not None:
            return cached

        try:
            result = await self.civic_info.lookup_by_zip(zip_code)
        except ZIP_PROVIDER_ERRORS as primary_error:
            result = await self._zip_fallback(zip_code, primary_error)
            if not result.officials:
                return result
        self.zip_cache.set(zip_code, result)
        return result

    async def _zip_fallback(self, zip_code: str, primary_error: Exception) -> ZipLookupResult:
        state = resolve_state(zip_code)
        if state is None:
            raise ZipLookupError(
                f"Civic information lookup failed ({_describe(primary_error)}); "
                f"Unable to determine state for zip {zip_code}",
                state_unresolved=True,
            )

        logger.warning(f"Civic information lookup failed for {zip_code}, "
                       f"falling back to {state} roster: {_describe(primary_error)}")
        try:
            members = await self.congress.get_members_by_state(state)
        except ZIP_PROVIDER_ERRORS as roster_error:
            raise ZipLookupError(
                f"Civic information lookup failed ({_describe(primary_error)}); "
                f"state roster lookup for {state} failed ({_describe(roster_error)})"
            )

        members.sort(key=_roster_order)
        return ZipLookupResult(
            zip_code=zip_code,
            state=state,
            officials=[member_to_representative(m) for m in members],
            source="congress_roster",
        )

    # ===========================
    # Member profile
    # ===========================

    async def get_member_profile(self, bioguide_id: str) -> MemberProfile:
        """
        /**
         * Member detail + sponsored bills, fetched concurrently.
         *
         * @raises ProfileFetchError when either fetch fails or the member does
         *         not exist.
         */
        """
        cache_key = f"member:{bioguide_id}"
        cached = self.profile_cache.get(cache_key)
        if cached is not None:
            return cached

        member_result, bills_result = await gather_settled(
            self.congress.get_member(bioguide_id),
            self.congress.get_sponsored_bills(bioguide_id),
        )
        failures = []
        if not member_result.ok:
            failures.append(f"member detail ({_describe(member_result.error)})")
        if not bills_result.ok:
            failures.append(f"sponsored bills ({_describe(bills_result.error)})")
        if failures:
            raise ProfileFetchError(f"Congress.gov fetch failed for {bioguide_id}: " + "; ".join(failures))
        if member_result.value is None:
            raise ProfileFetchError(f"Member {bioguide_id} not found", not_found=True)

        profile = MemberProfile(member=member_result.value, bills=bills_result.value)
        self.profile_cache.set(cache_key, profile)
        return profile

    # ===========================
    # Finance
    # ===========================

    async def get_member_finance(self, bioguide_id: str, member_name: str) -> FinanceResult:
        """
        /**
         * Campaign finance for a member; found=False when no candidate matches.
         */
        """
        cache_key = f"finance:{bioguide_id}"
        cached = self.finance_cache.get(cache_key)
        if cached is not None:
            return cached

        candidate = await self.finance.find_candidate(member_name)
        if candidate is None:
            result = FinanceResult(found=False)
            self.finance_cache.set(cache_key, result)
            return result

        totals, contributors = await asyncio.gather(
            self.finance.get_finance_totals(candidate.candidate_id),
            self.finance.get_top_contributors(candidate.candidate_id),
        )
        result = FinanceResult(found=True, candidate=totals, top_contributors=contributors)
        self.finance_cache.set(cache_key, result)
        return result

    # ===========================
    # Biography, news, votes, committees
    # ===========================

    async def get_member_biography(self, name: str) -> BiographyResult:
        wiki, facts = await gather_settled(
            self.wikipedia.get_biography(name),
            self.wikidata.get_facts_by_name(name),
        )
        if not wiki.ok:
            logger.warning(f"Wikipedia lookup failed for {name}: {_describe(wiki.error)}")
        if not facts.ok:
            logger.warning(f"Wikidata lookup failed for {name}: {_describe(facts.error)}")
        return BiographyResult(wikipedia=wiki.unwrap_or(None), wikidata=facts.unwrap_or(None))

    async def get_member_news(self, name: str, limit: int = 5) -> List[NewsArticle]:
        return await self.news.get_articles_about(name, limit)

    async def get_member_votes(self, bioguide_id: str, chamber: str, limit: int = 20) -> List[VoteRecord]:
        return await self.congress.get_member_votes(bioguide_id, chamber, limit)

    async def get_member_committees(self, bioguide_id: str) -> List[CommitteeAssignment]:
        return await self.congress.get_member_committees(bioguide_id)

    # ===========================
    # Full profile
    # ===========================

    async def get_full_profile(self, bioguide_id: str) -> OfficialProfile:
        """
        /**
         * Core profile plus every supplementary source.
         *
         * The core fetch completes first (its name and chamber feed the
         * others); the five supplementary fetches are independent and a
         * failure in one only empties its own field.
         */
        """
        core = await self.get_member_profile(bioguide_id)
        member = core.member

        finance, biography, news, votes, committees = await gather_settled(
            self.get_member_finance(bioguide_id, member.name),
            self.get_member_biography(member.name),
            self.get_member_news(member.name),
            self.get_member_votes(bioguide_id, member.chamber.value),
            self.get_member_committees(bioguide_id),
        )

        for label, outcome in (("finance", finance), ("biography", biography), ("news", news),
                               ("votes", votes), ("committees", committees)):
            if not outcome.ok:
                logger.warning(f"Degraded {label} for {bioguide_id}: {_describe(outcome.error)}")

        bio: BiographyResult = biography.unwrap_or(BiographyResult())
        return OfficialProfile(
            member=member,
            bills=core.bills,
            finance=finance.unwrap_or(None),
            biography=bio.wikipedia,
            wikidata_facts=bio.wikidata,
            news=news.unwrap_or([]),
            votes=votes.unwrap_or([]),
            committees=committees.unwrap_or([]),
        )

    # ===========================
    # Synthesis
    # ===========================

    async def summarize_bills(self, bills: List[BillSummary]) -> Dict[str, str]:
        """
        /**
         * Plain-language summary per bill key; titles when synthesis is off.
         */
        """
        summaries = await asyncio.gather(*(self.synthesis.summarize_bill(b) for b in bills))
        return {bill.bill_key: summary for bill, summary in zip(bills, summaries)}

    async def biography_overview(self, member: MemberDetail, bio: Optional[WikipediaBio],
                                 facts: Optional[WikidataFacts]) -> str:
        return await self.synthesis.generate_biography_context(
            name=member.name,
            party=member.party,
            state=member.state,
            chamber=member.chamber.value,
            wikipedia=bio.extract if bio else None,
            education=(facts.alma_mater or facts.education) if facts else None,
            career_before=facts.occupation if facts else None,
        )
