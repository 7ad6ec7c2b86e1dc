"""
/**
 * @file schemas.py
 * @summary Domain models shared by adapters, orchestrator, engines and the
 *          API boundary.
 *
 * @details
 * - Enum types define chambers, vote positions and committee roles.
 * - Pydantic models capture normalized provider records (members, bills,
 *   votes, committees, finance, biography, news) and the aggregates the
 *   orchestrator assembles from them.
 * - Upstream snapshots (members, bills) are frozen: a refresh replaces them.
 */
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


class Chamber(str, Enum):
    """
    /**
     * Legislative chamber of a member.
     */
    """
    HOUSE = "house"
    SENATE = "senate"


class VotePosition(str, Enum):
    """
    /**
     * The four recorded positions a member can take on a roll-call vote.
     */
    """
    YEA = "Yea"
    NAY = "Nay"
    NOT_VOTING = "Not Voting"
    PRESENT = "Present"


class CommitteeRole(str, Enum):
    CHAIR = "Chair"
    RANKING_MEMBER = "Ranking Member"
    MEMBER = "Member"


class MemberSummary(BaseModel):
    """
    /**
     * Identity of an elected official.
     */
    """
    model_config = ConfigDict(frozen=True)

    bioguide_id: str = Field(..., description="Stable external identifier (e.g., C001117)")
    name: str
    first_name: str = ""
    last_name: str = ""
    party: str = ""
    state: str = ""
    district: Optional[str] = None
    chamber: Chamber = Chamber.HOUSE
    depiction: Optional[str] = Field(None, description="Portrait image URL")
    official_url: Optional[str] = None
    current_member: bool = True


class MemberTerm(BaseModel):
    model_config = ConfigDict(frozen=True)

    chamber: str = ""
    congress: Optional[int] = None
    start_year: Optional[int] = None


class MemberDetail(MemberSummary):
    """
    /**
     * Member summary plus service history and legislation counts.
     */
    """
    birth_year: Optional[str] = None
    terms: List[MemberTerm] = Field(default_factory=list)
    sponsored_count: int = 0
    cosponsored_count: int = 0


class BillSummary(BaseModel):
    """
    /**
     * A piece of legislation; (type, number) is unique within a congress.
     */
    """
    model_config = ConfigDict(frozen=True)

    congress: int
    type: str
    number: int
    title: str = "Untitled"
    introduced_date: Optional[str] = None
    latest_action: str = ""
    policy_area: Optional[str] = None
    url: str = ""

    @property
    def bill_key(self) -> str:
        return f"{self.type}{self.number}"


class PartyTally(BaseModel):
    yea: int = 0
    nay: int = 0
    not_voting: int = 0


class PartyBreakdown(BaseModel):
    democratic: PartyTally = Field(default_factory=PartyTally)
    republican: PartyTally = Field(default_factory=PartyTally)


class VoteRecord(BaseModel):
    """
    /**
     * One roll-call vote joined with the tracked member's position.
     */
    """
    date: str = ""
    question: str = ""
    result: str = ""
    member_position: VotePosition
    party_breakdown: PartyBreakdown = Field(default_factory=PartyBreakdown)
    bill_number: Optional[str] = None
    url: Optional[str] = None
    roll_number: Optional[int] = None


class Subcommittee(BaseModel):
    name: str
    role: str = CommitteeRole.MEMBER.value


class CommitteeAssignment(BaseModel):
    name: str
    code: str = ""
    role: CommitteeRole = CommitteeRole.MEMBER
    chamber: str = ""
    url: str = ""
    subcommittees: Optional[List[Subcommittee]] = None


class CandidateMatch(BaseModel):
    """
    /**
     * Campaign finance candidate chosen from a name search.
     */
    """
    candidate_id: str
    name: str = ""
    party: str = ""
    office: str = ""
    state: str = ""
    cycles: List[int] = Field(default_factory=list)


class FinanceSummary(BaseModel):
    """
    /**
     * One funding-cycle snapshot for a candidate.
     */
    """
    candidate_id: str
    name: str = ""
    party: str = ""
    office: str = ""
    cycle: Optional[int] = None
    total_receipts: float = 0.0
    total_disbursements: float = 0.0
    cash_on_hand: float = 0.0
    individual_contributions: float = 0.0
    pac_contributions: float = 0.0
    last_report_date: Optional[str] = None
    fec_url: str = ""


class ContributorRecord(BaseModel):
    name: str = ""
    employer: Optional[str] = None
    amount: float = 0.0
    date: str = ""


class FinanceResult(BaseModel):
    """
    /**
     * Finance lookup outcome; found=False is a valid "no candidate" answer.
     */
    """
    found: bool
    candidate: Optional[FinanceSummary] = None
    top_contributors: List[ContributorRecord] = Field(default_factory=list)


class Channel(BaseModel):
    type: str
    id: str


class RepresentativeInfo(BaseModel):
    name: str
    title: str = ""
    party: str = ""
    chamber: str = "unknown"
    photo_url: Optional[str] = None
    bioguide_id: Optional[str] = None
    phones: List[str] = Field(default_factory=list)
    urls: List[str] = Field(default_factory=list)
    channels: List[Channel] = Field(default_factory=list)


class ZipLookupResult(BaseModel):
    """
    /**
     * Representatives for a postal code.
     */
    """
    zip_code: str
    state: str = ""
    city: Optional[str] = None
    officials: List[RepresentativeInfo] = Field(default_factory=list)
    source: str = Field("civic_info", description="civic_info or congress_roster")


class WikipediaBio(BaseModel):
    title: str
    summary: str = ""
    thumbnail: Optional[str] = None
    page_url: str = ""
    extract: str = ""


class WikidataFacts(BaseModel):
    wikidata_id: str
    birth_date: Optional[str] = None
    birth_place: Optional[str] = None
    education: List[str] = Field(default_factory=list)
    alma_mater: List[str] = Field(default_factory=list)
    spouse: Optional[str] = None
    children: Optional[int] = None
    religion: Optional[str] = None
    occupation: List[str] = Field(default_factory=list)
    website: Optional[str] = None


class NewsArticle(BaseModel):
    title: str = ""
    description: str = ""
    source: str = ""
    url: str = ""
    published_at: str = ""
    image_url: Optional[str] = None


class BiographyResult(BaseModel):
    wikipedia: Optional[WikipediaBio] = None
    wikidata: Optional[WikidataFacts] = None


class MemberProfile(BaseModel):
    """
    /**
     * The load-bearing core of every profile: member detail + sponsored bills.
     */
    """
    member: MemberDetail
    bills: List[BillSummary] = Field(default_factory=list)


class OfficialProfile(BaseModel):
    """
    /**
     * Unified per-official aggregate. Supplementary fields degrade to None or
     * an empty list when their provider fails.
     */
    """
    member: MemberDetail
    bills: List[BillSummary] = Field(default_factory=list)
    finance: Optional[FinanceResult] = None
    biography: Optional[WikipediaBio] = None
    wikidata_facts: Optional[WikidataFacts] = None
    news: List[NewsArticle] = Field(default_factory=list)
    votes: List[VoteRecord] = Field(default_factory=list)
    committees: List[CommitteeAssignment] = Field(default_factory=list)
