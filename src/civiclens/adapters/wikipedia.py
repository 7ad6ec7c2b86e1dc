"""
/**
 * @file wikipedia.py
 * @summary Adapter for Wikipedia page summaries (REST v1).
 *
 * @details
 * - Titles use underscores; a 404 or a disambiguation page is retried with
 *   the politician suffixes in order.
 */
"""

import re
from typing import Any, Optional
from urllib.parse import quote

from civiclens.services.http_client import JSONFetcher
from civiclens.utils.provider_schemas import WikipediaSummary, parse_payload
from civiclens.utils.schemas import WikipediaBio

DISAMBIGUATION_SUFFIXES = ["(politician)", "(American politician)", "(U.S. politician)"]


def to_title(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip())


class WikipediaAdapter:
    """
    /**
     * Wikipedia summary adapter (no API key).
     */
    """

    def __init__(self, http: JSONFetcher, base_url: str = "https://en.wikipedia.org/api/rest_v1"):
        self.http = http
        self.base_url = base_url

    async def _summary(self, title: str) -> Optional[WikipediaSummary]:
        data: Any = await self.http.fetch_json(
            f"{self.base_url}/page/summary/{quote(title, safe='')}", not_found_ok=True,
        )
        if data is None:
            return None
        return parse_payload(WikipediaSummary, data, "wikipedia.summary")

    def _to_bio(self, summary: WikipediaSummary, title: str) -> WikipediaBio:
        desktop = (summary.content_urls or {}).get("desktop") or {}
        return WikipediaBio(
            title=summary.title,
            summary=summary.extract,
            thumbnail=(summary.thumbnail or {}).get("source"),
            page_url=desktop.get("page") or f"https://en.wikipedia.org/wiki/{title}",
            extract=summary.extract,
        )

    async def get_biography(self, name: str) -> Optional[WikipediaBio]:
        """
        /**
         * Page summary for a person, trying politician disambiguations.
         *
         * @return WikipediaBio, or None when no usable page exists.
         */
        """
        title = to_title(name)
        summary = await self._summary(title)
        if summary is not None and summary.type != "disambiguation":
            return self._to_bio(summary, title)

        for suffix in DISAMBIGUATION_SUFFIXES:
            candidate = to_title(f"{name} {suffix}")
            summary = await self._summary(candidate)
            if summary is not None and summary.type != "disambiguation":
                return self._to_bio(summary, candidate)
        return None
