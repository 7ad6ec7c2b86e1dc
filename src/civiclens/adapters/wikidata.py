"""
/**
 * @file wikidata.py
 * @summary Adapter for Wikidata structured biographical facts.
 *
 * @details
 * - get_facts_by_name: entity search, preferring a result whose description
 *   suggests an office-holder, then a SPARQL detail query.
 * - Multi-valued properties are concatenated with "|" server-side.
 */
"""

from typing import Any, Dict, List, Optional

from civiclens.services.http_client import JSONFetcher
from civiclens.utils.provider_schemas import (
    SparqlResponse, WikidataSearch, WikidataSearchHit, parse_payload, parse_records,
)
from civiclens.utils.schemas import WikidataFacts

POLITICAL_HINTS = ("politician", "senator", "representative", "member of")

FACTS_QUERY = """
SELECT ?birthDate ?birthPlaceLabel ?spouseLabel ?religionLabel ?websiteUrl
       (GROUP_CONCAT(DISTINCT ?educationLabel; separator="|") AS ?educations)
       (GROUP_CONCAT(DISTINCT ?almaMaterLabel; separator="|") AS ?almaMaters)
       (GROUP_CONCAT(DISTINCT ?occupationLabel; separator="|") AS ?occupations)
       (COUNT(DISTINCT ?child) AS ?childCount)
WHERE {{
  OPTIONAL {{ wd:{id} wdt:P569 ?birthDate. }}
  OPTIONAL {{ wd:{id} wdt:P19 ?birthPlace. }}
  OPTIONAL {{ wd:{id} wdt:P26 ?spouse. }}
  OPTIONAL {{ wd:{id} wdt:P140 ?religion. }}
  OPTIONAL {{ wd:{id} wdt:P856 ?websiteUrl. }}
  OPTIONAL {{ wd:{id} wdt:P40 ?child. }}
  OPTIONAL {{ wd:{id} wdt:P69 ?almaMater. ?almaMater rdfs:label ?almaMaterLabel. FILTER(LANG(?almaMaterLabel)="en") }}
  OPTIONAL {{ wd:{id} wdt:P512 ?education. ?education rdfs:label ?educationLabel. FILTER(LANG(?educationLabel)="en") }}
  OPTIONAL {{ wd:{id} wdt:P106 ?occupation. ?occupation rdfs:label ?occupationLabel. FILTER(LANG(?occupationLabel)="en") }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
GROUP BY ?birthDate ?birthPlaceLabel ?spouseLabel ?religionLabel ?websiteUrl
LIMIT 1
"""


def pick_entity(hits: List[WikidataSearchHit]) -> Optional[WikidataSearchHit]:
    for hit in hits:
        description = (hit.description or "").lower()
        if any(hint in description for hint in POLITICAL_HINTS):
            return hit
    return hits[0] if hits else None


def _value(binding: Dict[str, Any], name: str) -> Optional[str]:
    cell = binding.get(name)
    if isinstance(cell, dict) and cell.get("value"):
        return str(cell["value"])
    return None


def _split(binding: Dict[str, Any], name: str) -> List[str]:
    return [part for part in (_value(binding, name) or "").split("|") if part]


class WikidataAdapter:
    """
    /**
     * Wikidata adapter (no API key).
     */
    """

    def __init__(self, http: JSONFetcher,
                 search_url: str = "https://www.wikidata.org/w/api.php",
                 sparql_url: str = "https://query.wikidata.org/sparql"):
        self.http = http
        self.search_url = search_url
        self.sparql_url = sparql_url

    async def get_facts_by_name(self, name: str) -> Optional[WikidataFacts]:
        data = await self.http.fetch_json(self.search_url, params={
            "action": "wbsearchentities",
            "search": name,
            "language": "en",
            "type": "item",
            "limit": 5,
            "format": "json",
        })
        search = parse_payload(WikidataSearch, data, "wikidata.search")
        if search is None:
            return None
        entity = pick_entity(parse_records(WikidataSearchHit, search.search, "wikidata.search"))
        if entity is None:
            return None
        return await self.get_facts_by_id(entity.id)

    async def get_facts_by_id(self, wikidata_id: str) -> Optional[WikidataFacts]:
        """
        /**
         * Structured facts for one entity via SPARQL.
         *
         * @param wikidata_id: Entity ID (e.g., Q22686).
         */
        """
        data = await self.http.fetch_json(
            self.sparql_url,
            params={"query": FACTS_QUERY.format(id=wikidata_id), "format": "json"},
            headers={"Accept": "application/sparql-results+json"},
        )
        response = parse_payload(SparqlResponse, data, "wikidata.sparql")
        if response is None or not response.results.bindings:
            return None
        binding = response.results.bindings[0]

        birth_date = _value(binding, "birthDate")
        child_count = _value(binding, "childCount")
        return WikidataFacts(
            wikidata_id=wikidata_id,
            birth_date=birth_date.split("T")[0] if birth_date else None,
            birth_place=_value(binding, "birthPlaceLabel"),
            education=_split(binding, "educations"),
            alma_mater=_split(binding, "almaMaters"),
            spouse=_value(binding, "spouseLabel"),
            children=int(child_count) if child_count and child_count.isdigit() and int(child_count) > 0 else None,
            religion=_value(binding, "religionLabel"),
            occupation=_split(binding, "occupations"),
            website=_value(binding, "websiteUrl"),
        )
