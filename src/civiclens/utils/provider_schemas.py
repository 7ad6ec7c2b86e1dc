"""
/**
 * @file provider_schemas.py
 * @summary Wire models for external provider responses and the validation
 *          fallback policy applied to them.
 *
 * @details
 * - One pydantic model per external shape (Congress.gov, FEC, Google Civic
 *   Information, Wikipedia, Wikidata, NewsAPI). Unknown fields pass through.
 * - parse_payload: valid payloads return the model; invalid optional fields
 *   are dropped (defaults apply) with a warning; a missing or invalid
 *   required field yields None, the callers' "not found" answer.
 * - parse_records validates list items individually so one bad item does not
 *   discard its siblings.
 */
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from civiclens.utils.errors import ValidationMismatch

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class _Passthrough(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class _CamelPassthrough(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)


# ===========================
# Congress.gov
# ===========================

class CongressNamed(_CamelPassthrough):
    name: Optional[str] = None
    text: Optional[str] = None
    image_url: Optional[str] = None
    count: Optional[int] = None


class CongressTerm(_CamelPassthrough):
    chamber: Optional[str] = None
    congress: Optional[int] = None
    start_year: Optional[int] = None


class CongressMember(_CamelPassthrough):
    bioguide_id: str
    first_name: str = ""
    last_name: str = ""
    direct_order_name: Optional[str] = None
    name: Optional[str] = None
    party_name: Optional[str] = None
    party: Optional[str] = None
    state: str = ""
    district: Optional[Union[int, str]] = None
    birth_year: Optional[str] = None
    current_member: Optional[bool] = None
    depiction: Optional[CongressNamed] = None
    official_website_url: Optional[str] = None
    terms: Union[List[CongressTerm], Dict[str, Any]] = Field(default_factory=list)
    sponsored_legislation: Optional[CongressNamed] = None
    cosponsored_legislation: Optional[CongressNamed] = None
    committees: Optional[List[Dict[str, Any]]] = None


class CongressMemberResponse(_CamelPassthrough):
    member: Dict[str, Any]


class CongressMemberList(_CamelPassthrough):
    members: List[Dict[str, Any]] = Field(default_factory=list)


class CongressBill(_CamelPassthrough):
    congress: int
    type: str
    number: int
    title: str = "Untitled"
    introduced_date: Optional[str] = None
    latest_action: Optional[CongressNamed] = None
    policy_area: Optional[CongressNamed] = None
    url: Optional[str] = None


class CongressBillList(_CamelPassthrough):
    sponsored_legislation: List[Dict[str, Any]] = Field(default_factory=list)


class CongressVoteList(_CamelPassthrough):
    votes: List[Dict[str, Any]] = Field(default_factory=list)


class CongressVoteListItem(_CamelPassthrough):
    roll_number: int
    session_number: Optional[int] = None
    date: Optional[str] = None
    question: Optional[str] = None
    result: Optional[str] = None
    url: Optional[str] = None


class CongressPositionMember(_CamelPassthrough):
    bioguide_id: Optional[str] = None
    party_name: Optional[str] = None


class CongressPosition(_CamelPassthrough):
    member: CongressPositionMember = Field(default_factory=CongressPositionMember)
    vote_position: Optional[str] = None


class CongressVoteBill(_CamelPassthrough):
    type: Optional[str] = None
    number: Optional[Union[int, str]] = None


class CongressVoteDetail(_CamelPassthrough):
    date: Optional[str] = None
    question: Optional[str] = None
    result: Optional[str] = None
    positions: List[CongressPosition] = Field(default_factory=list)
    bill: Optional[CongressVoteBill] = None


class CongressCommittee(_CamelPassthrough):
    name: str
    system_code: Optional[str] = None
    code: Optional[str] = None
    role: Optional[str] = None
    chamber: Optional[str] = None
    subcommittees: Optional[List[Dict[str, Any]]] = None


class CongressCommitteeList(_CamelPassthrough):
    committees: List[Dict[str, Any]] = Field(default_factory=list)


class CongressCommitteeMember(_CamelPassthrough):
    bioguide_id: str
    role: Optional[str] = None


# ===========================
# FEC
# ===========================

class FECResults(_Passthrough):
    results: List[Dict[str, Any]] = Field(default_factory=list)


class FECCandidate(_Passthrough):
    candidate_id: str
    name: str = ""
    party_full: Optional[str] = None
    party: Optional[str] = None
    office_full: Optional[str] = None
    office: Optional[str] = None
    state: str = ""
    cycles: List[int] = Field(default_factory=list)


class FECTotals(_Passthrough):
    cycle: Optional[int] = None
    receipts: Optional[float] = None
    disbursements: Optional[float] = None
    cash_on_hand_end_period: Optional[float] = None
    individual_contributions: Optional[float] = None
    other_political_committee_contributions: Optional[float] = None
    coverage_end_date: Optional[str] = None


class FECCommittee(_Passthrough):
    committee_id: str


class FECScheduleA(_Passthrough):
    contributor_name: Optional[str] = None
    contributor_employer: Optional[str] = None
    contribution_receipt_amount: Optional[float] = None
    contribution_receipt_date: Optional[str] = None


# ===========================
# Google Civic Info
# ===========================

class CivicChannel(_CamelPassthrough):
    type: str
    id: str


class CivicOfficial(_CamelPassthrough):
    name: str = ""
    party: Optional[str] = None
    photo_url: Optional[str] = None
    phones: List[str] = Field(default_factory=list)
    urls: List[str] = Field(default_factory=list)
    channels: List[CivicChannel] = Field(default_factory=list)


class CivicOffice(_CamelPassthrough):
    name: str = ""
    official_indices: List[int] = Field(default_factory=list)


class CivicNormalizedInput(_CamelPassthrough):
    state: Optional[str] = None
    city: Optional[str] = None


class CivicInfoResponse(_CamelPassthrough):
    offices: List[Dict[str, Any]] = Field(default_factory=list)
    officials: List[Dict[str, Any]] = Field(default_factory=list)
    normalized_input: Optional[CivicNormalizedInput] = None


# ===========================
# Wikipedia / Wikidata
# ===========================

class WikipediaSummary(_Passthrough):
    title: str
    type: Optional[str] = None
    extract: str = ""
    thumbnail: Optional[Dict[str, Any]] = None
    content_urls: Optional[Dict[str, Any]] = None


class WikidataSearchHit(_Passthrough):
    id: str
    label: Optional[str] = None
    description: Optional[str] = None


class WikidataSearch(_Passthrough):
    search: List[Dict[str, Any]] = Field(default_factory=list)


class SparqlResults(_Passthrough):
    bindings: List[Dict[str, Any]] = Field(default_factory=list)


class SparqlResponse(_Passthrough):
    results: SparqlResults = Field(default_factory=SparqlResults)


# ===========================
# NewsAPI
# ===========================

class NewsSource(_Passthrough):
    name: Optional[str] = None


class NewsApiArticle(_CamelPassthrough):
    title: Optional[str] = None
    description: Optional[str] = None
    source: Optional[NewsSource] = None
    url: Optional[str] = None
    published_at: Optional[str] = None
    url_to_image: Optional[str] = None


class NewsApiResponse(_Passthrough):
    articles: List[Dict[str, Any]] = Field(default_factory=list)


# ===========================
# Validation helpers
# ===========================

def _required_keys(model: Type[BaseModel]) -> set:
    keys = set()
    for name, info in model.model_fields.items():
        if info.is_required():
            keys.add(name)
            if info.alias:
                keys.add(info.alias)
    return keys


def _describe(exc: ValidationError) -> str:
    return ", ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )


def _validate(model: Type[M], data: Any, context: str) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValidationMismatch(f"[{context}] Validation issues: {_describe(exc)}") from exc


def parse_payload(model: Type[M], data: Any, context: str) -> Optional[M]:
    """
    /**
     * Validate a provider payload, recovering from optional-field mismatches.
     *
     * @param model: Expected wire model.
     * @param data: Decoded JSON.
     * @param context: Label used in the warning (e.g., "congress.member").
     * @return The model, or None when a required field is missing/invalid.
     */
    """
    try:
        return _validate(model, data, context)
    except ValidationMismatch as mismatch:
        logger.warning(str(mismatch))
        cause = mismatch.__cause__

    if not isinstance(data, dict) or not isinstance(cause, ValidationError):
        return None

    bad_keys = {err["loc"][0] for err in cause.errors() if err["loc"]}
    if bad_keys & _required_keys(model):
        return None

    cleaned = {k: v for k, v in data.items() if k not in bad_keys}
    try:
        return _validate(model, cleaned, context)
    except ValidationMismatch:
        return None


def parse_records(model: Type[M], items: Iterable[Any], context: str) -> List[M]:
    """
    /**
     * Validate each list item independently; invalid items are skipped.
     */
    """
    records = []
    for index, item in enumerate(items or []):
        record = parse_payload(model, item, f"{context}[{index}]")
        if record is not None:
            records.append(record)
    return records
