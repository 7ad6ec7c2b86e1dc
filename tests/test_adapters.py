"""
/**
 * @file test_adapters.py
 * @summary Source adapters against canned provider payloads.
 *
 * @details
 * - A fake JSONFetcher maps URLs to responses (or exceptions) and records
 *   every call, so no network access is needed.
 */
"""

import pytest
from pathlib import Path

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from civiclens.adapters.campaign_finance import CampaignFinanceAdapter, pick_candidate
from civiclens.adapters.civic_info import (
    CivicInfoAdapter, chamber_from_title, extract_bioguide_from_photo,
)
from civiclens.adapters.congress import (
    CongressAdapter, normalize_committee_role, normalize_vote_position,
)
from civiclens.adapters.news import NewsAdapter
from civiclens.adapters.wikidata import WikidataAdapter
from civiclens.adapters.wikipedia import WikipediaAdapter
from civiclens.adapters.zip_state import resolve_state
from civiclens.utils.errors import CircuitOpenError, ConfigurationError, UpstreamError
from civiclens.utils.provider_schemas import FECCandidate
from civiclens.utils.schemas import Chamber, CommitteeRole, VotePosition

CONGRESS = "https://api.congress.gov/v3"


class FakeFetcher:
    """
    /**
     * JSONFetcher stand-in: responses keyed by exact URL.
     */
    """

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.calls = []

    async def fetch_json(self, url, params=None, headers=None, not_found_ok=False):
        self.calls.append({"url": url, "params": params, "headers": headers})
        response = self.responses.get(url)
        if isinstance(response, Exception):
            raise response
        if response is None and not not_found_ok and url not in self.responses:
            raise UpstreamError(f"unexpected url {url}", status=404)
        return response


def member_payload(**overrides):
    member = {
        "bioguideId": "C001117",
        "firstName": "Sean",
        "lastName": "Casten",
        "directOrderName": "Sean Casten",
        "partyName": "Democratic",
        "state": "IL",
        "district": 6,
        "depiction": {"imageUrl": "https://www.congress.gov/img/member/c001117.jpg"},
        "terms": [{"chamber": "House of Representatives", "congress": 119, "startYear": 2025}],
        "sponsoredLegislation": {"count": 40},
        "cosponsoredLegislation": {"count": 310},
    }
    member.update(overrides)
    return {"member": member}


def vote_detail(positions, question="On Passage", date="2025-03-01"):
    return {"vote": {"date": date, "question": question, "result": "Passed",
                     "bill": {"type": "HR", "number": 1234}, "positions": positions}}


def position(bioguide_id, party, vote):
    return {"member": {"bioguideId": bioguide_id, "partyName": party}, "votePosition": vote}


class TestCongressNormalization:

    def test_vote_position_mapping(self):
        assert normalize_vote_position("Aye") == VotePosition.YEA
        assert normalize_vote_position("yes") == VotePosition.YEA
        assert normalize_vote_position("No") == VotePosition.NAY
        assert normalize_vote_position("Present") == VotePosition.PRESENT
        assert normalize_vote_position("Not Voting") == VotePosition.NOT_VOTING
        assert normalize_vote_position(None) == VotePosition.NOT_VOTING

    def test_committee_role_mapping(self):
        assert normalize_committee_role("Chairman") == CommitteeRole.CHAIR
        assert normalize_committee_role("Vice Chair") == CommitteeRole.MEMBER
        assert normalize_committee_role("Ranking Member") == CommitteeRole.RANKING_MEMBER
        assert normalize_committee_role(None) == CommitteeRole.MEMBER


class TestCongressAdapter:
    """
    /**
     * Members, bills, votes and committees.
     */
    """

    @pytest.mark.asyncio
    async def test_missing_key_is_a_configuration_error(self):
        adapter = CongressAdapter(FakeFetcher(), api_key=None)
        with pytest.raises(ConfigurationError):
            await adapter.get_member("C001117")

    @pytest.mark.asyncio
    async def test_get_member_normalizes_record(self):
        http = FakeFetcher({f"{CONGRESS}/member/C001117": member_payload()})
        member = await CongressAdapter(http, api_key="k").get_member("C001117")

        assert member.bioguide_id == "C001117"
        assert member.name == "Sean Casten"
        assert member.party == "Democratic"
        assert member.district == "6"
        assert member.chamber == Chamber.HOUSE
        assert member.sponsored_count == 40
        assert member.cosponsored_count == 310
        assert http.calls[0]["params"]["api_key"] == "k"

    @pytest.mark.asyncio
    async def test_get_member_senate_from_latest_term(self):
        payload = member_payload(terms=[{"chamber": "House of Representatives"}, {"chamber": "Senate"}])
        http = FakeFetcher({f"{CONGRESS}/member/D000563": payload})
        member = await CongressAdapter(http, api_key="k").get_member("D000563")
        assert member.chamber == Chamber.SENATE

    @pytest.mark.asyncio
    async def test_get_member_not_found_returns_none(self):
        http = FakeFetcher({f"{CONGRESS}/member/Z999999": None})
        assert await CongressAdapter(http, api_key="k").get_member("Z999999") is None

    @pytest.mark.asyncio
    async def test_get_member_missing_required_field_returns_none(self):
        http = FakeFetcher({f"{CONGRESS}/member/C001117": {"member": {"firstName": "Sean"}}})
        assert await CongressAdapter(http, api_key="k").get_member("C001117") is None

    @pytest.mark.asyncio
    async def test_members_by_state_uses_roster_name_format(self):
        http = FakeFetcher({f"{CONGRESS}/member/IL": {"members": [
            {"bioguideId": "D000563", "name": "Durbin, Richard J.", "partyName": "Democratic",
             "state": "Illinois", "terms": {"item": [{"chamber": "Senate"}]}},
            {"bioguideId": "C001117", "name": "Casten, Sean", "partyName": "Democratic",
             "state": "Illinois", "district": 6,
             "terms": {"item": [{"chamber": "House of Representatives"}]}},
        ]}})
        members = await CongressAdapter(http, api_key="k").get_members_by_state("il")

        assert [m.name for m in members] == ["Richard J. Durbin", "Sean Casten"]
        assert members[0].chamber == Chamber.SENATE
        assert http.calls[0]["params"]["currentMember"] == "true"

    @pytest.mark.asyncio
    async def test_sponsored_bills_skip_amendments(self):
        http = FakeFetcher({f"{CONGRESS}/member/C001117/sponsored-legislation": {"sponsoredLegislation": [
            {"congress": 119, "type": "HR", "number": 1234, "title": "Clean Energy Act",
             "latestAction": {"text": "Referred to committee"}, "policyArea": {"name": "Energy"}},
            {"congress": 119, "number": 55, "amendmentNumber": "55"},
        ]}})
        bills = await CongressAdapter(http, api_key="k").get_sponsored_bills("C001117")

        assert len(bills) == 1
        assert bills[0].bill_key == "HR1234"
        assert bills[0].policy_area == "Energy"
        assert bills[0].latest_action == "Referred to committee"
        assert bills[0].url.endswith("/119th-congress/hr-bill/1234")

    @pytest.mark.asyncio
    async def test_member_votes_join_positions_and_skip_failures(self):
        """
        /**
         * Three recent votes: one detail fails, one lacks the member, one is
         * usable. Only the usable vote is returned.
         */
        """
        votes = [{"rollNumber": n, "sessionNumber": 1} for n in (10, 11, 12)]
        http = FakeFetcher({
            f"{CONGRESS}/house-vote": {"votes": votes},
            f"{CONGRESS}/house-vote/119/1/10": vote_detail([
                position("C001117", "Democratic", "Yea"),
                position("A000001", "Democratic", "Yea"),
                position("B000002", "Republican", "Nay"),
                position("B000003", "Republican", "Not Voting"),
            ]),
            f"{CONGRESS}/house-vote/119/1/11": UpstreamError("boom", status=500),
            f"{CONGRESS}/house-vote/119/1/12": vote_detail([position("A000001", "Democratic", "Nay")]),
        })
        records = await CongressAdapter(http, api_key="k").get_member_votes("C001117", "house", limit=5)

        assert len(records) == 1
        record = records[0]
        assert record.member_position == VotePosition.YEA
        assert record.bill_number == "HR1234"
        assert record.roll_number == 10
        assert record.party_breakdown.democratic.yea == 2
        assert record.party_breakdown.republican.nay == 1
        assert record.party_breakdown.republican.not_voting == 1

    @pytest.mark.asyncio
    async def test_member_votes_respect_limit(self):
        votes = [{"rollNumber": n} for n in range(1, 7)]
        responses = {f"{CONGRESS}/senate-vote": {"votes": votes}}
        for n in range(1, 7):
            responses[f"{CONGRESS}/senate-vote/119/{n}"] = vote_detail([position("S000001", "Republican", "Nay")])
        http = FakeFetcher(responses)

        records = await CongressAdapter(http, api_key="k").get_member_votes("S000001", "senate", limit=3)
        assert len(records) == 3
        assert http.calls[0]["params"]["limit"] == 6

    @pytest.mark.asyncio
    async def test_committees_from_member_record(self):
        payload = member_payload(committees=[
            {"name": "Financial Services", "systemCode": "hsba00", "role": "Member",
             "subcommittees": [{"name": "Capital Markets", "role": "Ranking Member"}]},
        ])
        http = FakeFetcher({f"{CONGRESS}/member/C001117": payload})
        committees = await CongressAdapter(http, api_key="k").get_member_committees("C001117")

        assert len(committees) == 1
        assert committees[0].code == "hsba00"
        assert committees[0].subcommittees[0].role == "Ranking Member"

    @pytest.mark.asyncio
    async def test_committees_fallback_to_membership_scan(self):
        http = FakeFetcher({
            f"{CONGRESS}/member/C001117": member_payload(),
            f"{CONGRESS}/committee": {"committees": [
                {"name": "Science", "systemCode": "hssy00"},
                {"name": "Energy and Commerce", "systemCode": "hsif00"},
            ]},
            f"{CONGRESS}/committee/hssy00": {"committee": {"members": [{"bioguideId": "C001117",
                                                                       "role": "Chair"}]}},
            f"{CONGRESS}/committee/hsif00": {"committee": {"members": [{"bioguideId": "X000001"}]}},
        })
        committees = await CongressAdapter(http, api_key="k").get_member_committees("C001117")

        assert [c.name for c in committees] == ["Science"]
        assert committees[0].role == CommitteeRole.CHAIR

    @pytest.mark.asyncio
    async def test_committees_scan_when_member_record_fails(self):
        http = FakeFetcher({
            f"{CONGRESS}/member/C001117": CircuitOpenError("api.congress.gov", retry_in=30.0),
            f"{CONGRESS}/committee": {"committees": [{"name": "Science", "systemCode": "hssy00"}]},
            f"{CONGRESS}/committee/hssy00": {"committee": {"members": [{"bioguideId": "C001117"}]}},
        })
        committees = await CongressAdapter(http, api_key="k").get_member_committees("C001117")

        assert [c.name for c in committees] == ["Science"]
        assert committees[0].role == CommitteeRole.MEMBER

    @pytest.mark.asyncio
    async def test_committees_empty_when_listing_fails(self):
        http = FakeFetcher({
            f"{CONGRESS}/member/C001117": member_payload(),
            f"{CONGRESS}/committee": UpstreamError("api.congress.gov returned HTTP 503", status=503),
        })
        committees = await CongressAdapter(http, api_key="k").get_member_committees("C001117")
        assert committees == []

    @pytest.mark.asyncio
    async def test_committees_without_key_still_raises(self):
        with pytest.raises(ConfigurationError):
            await CongressAdapter(FakeFetcher(), api_key=None).get_member_committees("C001117")


class TestCampaignFinanceAdapter:

    def test_pick_candidate_prefers_name_match(self):
        candidates = [FECCandidate(candidate_id="H1", name="SMITH, JOHN"),
                      FECCandidate(candidate_id="H2", name="CASTEN, SEAN")]
        assert pick_candidate("Sean Casten", candidates).candidate_id == "H2"

    def test_pick_candidate_falls_back_to_first(self):
        candidates = [FECCandidate(candidate_id="H1", name="DOE, JANE")]
        assert pick_candidate("Nobody Known", candidates).candidate_id == "H1"
        assert pick_candidate("Anyone", []) is None

    @pytest.mark.asyncio
    async def test_missing_key_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            await CampaignFinanceAdapter(FakeFetcher()).find_candidate("Sean Casten")

    @pytest.mark.asyncio
    async def test_finance_totals_and_contributors(self):
        base = "https://api.open.fec.gov/v1"
        http = FakeFetcher({
            f"{base}/candidates/search": {"results": [
                {"candidate_id": "H8IL06154", "name": "CASTEN, SEAN", "party_full": "DEMOCRATIC PARTY",
                 "office_full": "House", "state": "IL", "cycles": [2020, 2022]},
            ]},
            f"{base}/candidate/H8IL06154/totals": {"results": [
                {"cycle": 2024, "receipts": 1000.0, "disbursements": 400.0, "cash_on_hand_end_period": 600.0,
                 "individual_contributions": 700.0, "other_political_committee_contributions": 250.0},
            ]},
            f"{base}/candidate/H8IL06154": {"results": [{"candidate_id": "H8IL06154", "name": "CASTEN, SEAN"}]},
            f"{base}/candidate/H8IL06154/committees": {"results": [{"committee_id": "C00650000"}]},
            f"{base}/schedules/schedule_a": {"results": [
                {"contributor_name": "DOE, JANE", "contributor_employer": "ACME",
                 "contribution_receipt_amount": 3300.0, "contribution_receipt_date": "2024-01-02"},
            ]},
        })
        adapter = CampaignFinanceAdapter(http, api_key="k")

        match = await adapter.find_candidate("Sean Casten")
        assert match.candidate_id == "H8IL06154"
        assert match.party == "DEMOCRATIC PARTY"

        totals = await adapter.get_finance_totals(match.candidate_id)
        assert totals.total_receipts == 1000.0
        assert totals.pac_contributions == 250.0
        assert totals.cycle == 2024
        assert totals.fec_url == "https://www.fec.gov/data/candidate/H8IL06154/"

        contributors = await adapter.get_top_contributors(match.candidate_id)
        assert contributors[0].name == "DOE, JANE"
        assert contributors[0].amount == 3300.0

    @pytest.mark.asyncio
    async def test_no_totals_returns_none(self):
        base = "https://api.open.fec.gov/v1"
        http = FakeFetcher({f"{base}/candidate/H1/totals": {"results": []}})
        assert await CampaignFinanceAdapter(http, api_key="k").get_finance_totals("H1") is None


class TestCivicInfoAdapter:

    def test_helpers(self):
        assert extract_bioguide_from_photo("https://bioguide.congress.gov/photo/C/C001117.jpg") == "C001117"
        assert extract_bioguide_from_photo(None) is None
        assert chamber_from_title("U.S. Senator") == "senate"
        assert chamber_from_title("U.S. Representative") == "house"
        assert chamber_from_title("Governor") == "unknown"

    @pytest.mark.asyncio
    async def test_lookup_by_zip(self):
        http = FakeFetcher({"https://www.googleapis.com/civicinfo/v2/representatives": {
            "normalizedInput": {"state": "IL", "city": "Wheaton"},
            "offices": [
                {"name": "U.S. Senator", "officialIndices": [0]},
                {"name": "U.S. Representative", "officialIndices": [1, 7]},
            ],
            "officials": [
                {"name": "Dick Durbin", "party": "Democratic Party",
                 "photoUrl": "https://bioguide.congress.gov/photo/D/D000563.jpg"},
                {"name": "Sean Casten", "party": "Democratic Party", "phones": ["(202) 225-4561"],
                 "channels": [{"type": "Twitter", "id": "RepCasten"}]},
            ],
        }})
        result = await CivicInfoAdapter(http, api_key="k").lookup_by_zip("60188")

        assert result.state == "IL"
        assert result.city == "Wheaton"
        assert result.source == "civic_info"
        assert [o.name for o in result.officials] == ["Dick Durbin", "Sean Casten"]
        assert result.officials[0].bioguide_id == "D000563"
        assert result.officials[1].chamber == "house"
        assert result.officials[1].channels[0].id == "RepCasten"
        assert ("roles", "legislatorLowerBody") in http.calls[0]["params"]

    @pytest.mark.asyncio
    async def test_missing_key_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            await CivicInfoAdapter(FakeFetcher()).lookup_by_zip("60188")


class TestWikipediaAdapter:

    @pytest.mark.asyncio
    async def test_direct_page(self):
        base = "https://en.wikipedia.org/api/rest_v1/page/summary"
        http = FakeFetcher({f"{base}/Sean_Casten": {
            "title": "Sean Casten", "type": "standard", "extract": "Sean Casten is an American politician.",
            "thumbnail": {"source": "https://upload.wikimedia.org/casten.jpg"},
            "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Sean_Casten"}},
        }})
        bio = await WikipediaAdapter(http).get_biography("Sean Casten")
        assert bio.title == "Sean Casten"
        assert bio.thumbnail == "https://upload.wikimedia.org/casten.jpg"
        assert bio.page_url == "https://en.wikipedia.org/wiki/Sean_Casten"

    @pytest.mark.asyncio
    async def test_disambiguation_tries_politician_suffix(self):
        base = "https://en.wikipedia.org/api/rest_v1/page/summary"
        http = FakeFetcher({
            f"{base}/John_Smith": {"title": "John Smith", "type": "disambiguation"},
            f"{base}/John_Smith_%28politician%29": None,
            f"{base}/John_Smith_%28American_politician%29": {"title": "John Smith (American politician)",
                                                              "extract": "A politician."},
        })
        bio = await WikipediaAdapter(http).get_biography("John Smith")
        assert bio.title == "John Smith (American politician)"
        assert bio.page_url == "https://en.wikipedia.org/wiki/John_Smith_(American_politician)"

    @pytest.mark.asyncio
    async def test_nothing_usable_returns_none(self):
        class MissingEverything(FakeFetcher):
            async def fetch_json(self, url, params=None, headers=None, not_found_ok=False):
                self.calls.append({"url": url})
                return None

        http = MissingEverything()
        assert await WikipediaAdapter(http).get_biography("Nobody") is None
        assert len(http.calls) == 4


class TestWikidataAdapter:

    @pytest.mark.asyncio
    async def test_facts_by_name(self):
        http = FakeFetcher({
            "https://www.wikidata.org/w/api.php": {"search": [
                {"id": "Q1", "description": "American actor"},
                {"id": "Q2", "description": "American politician"},
            ]},
            "https://query.wikidata.org/sparql": {"results": {"bindings": [{
                "birthDate": {"value": "1971-11-23T00:00:00Z"},
                "birthPlaceLabel": {"value": "Dublin"},
                "almaMaters": {"value": "Middlebury College|Dartmouth College"},
                "occupations": {"value": "politician"},
                "childCount": {"value": "3"},
            }]}},
        })
        facts = await WikidataAdapter(http).get_facts_by_name("Sean Casten")

        assert facts.wikidata_id == "Q2"
        assert facts.birth_date == "1971-11-23"
        assert facts.alma_mater == ["Middlebury College", "Dartmouth College"]
        assert facts.children == 3
        assert facts.spouse is None
        assert http.calls[1]["headers"]["Accept"] == "application/sparql-results+json"

    @pytest.mark.asyncio
    async def test_no_search_hits(self):
        http = FakeFetcher({"https://www.wikidata.org/w/api.php": {"search": []}})
        assert await WikidataAdapter(http).get_facts_by_name("Nobody") is None


class TestNewsAdapter:

    @pytest.mark.asyncio
    async def test_articles(self):
        http = FakeFetcher({"https://newsapi.org/v2/everything": {"articles": [
            {"title": "Casten votes", "source": {"name": "Tribune"}, "url": "https://x/1",
             "publishedAt": "2025-03-01T00:00:00Z", "urlToImage": "https://x/1.jpg"},
            {"title": "No source"},
        ]}})
        articles = await NewsAdapter(http, api_key="k").get_articles_about("Sean Casten", limit=5)

        assert articles[0].source == "Tribune"
        assert articles[0].image_url == "https://x/1.jpg"
        assert articles[1].source == ""
        assert http.calls[0]["params"]["q"] == '"Sean Casten"'

    @pytest.mark.asyncio
    async def test_missing_key_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            await NewsAdapter(FakeFetcher()).get_articles_about("Sean Casten")


class TestZipState:

    def test_resolves_known_prefixes(self):
        assert resolve_state("60188") == "IL"
        assert resolve_state("10001") == "NY"
        assert resolve_state("94105-1234") == "CA"
        assert resolve_state("73301") == "TX"

    def test_unassigned_or_malformed(self):
        assert resolve_state("00001") is None
        assert resolve_state("6018") is None
        assert resolve_state("abcde") is None
