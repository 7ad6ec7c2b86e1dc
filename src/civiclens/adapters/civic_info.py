"""
/**
 * @file civic_info.py
 * @summary Adapter for the Google Civic Information API (zip code to federal
 *          representatives).
 */
"""

import re
from typing import Optional

from civiclens.services.http_client import JSONFetcher
from civiclens.utils.errors import ConfigurationError
from civiclens.utils.provider_schemas import (
    CivicInfoResponse, CivicOffice, CivicOfficial, parse_payload, parse_records,
)
from civiclens.utils.schemas import Channel, RepresentativeInfo, ZipLookupResult

# Congress portraits follow /photo/X/X000123.jpg
_BIOGUIDE_IN_PHOTO = re.compile(r"/([A-Z]\d{6})\.")


def extract_bioguide_from_photo(photo_url: Optional[str]) -> Optional[str]:
    if not photo_url:
        return None
    match = _BIOGUIDE_IN_PHOTO.search(photo_url)
    return match.group(1) if match else None


def chamber_from_title(title: str) -> str:
    lowered = (title or "").lower()
    if "senator" in lowered:
        return "senate"
    if "representative" in lowered:
        return "house"
    return "unknown"


class CivicInfoAdapter:
    """
    /**
     * Civic Information adapter.
     *
     * @param http: Resilient JSON fetcher.
     * @param api_key: Google API key (required).
     */
    """

    def __init__(self, http: JSONFetcher, api_key: Optional[str] = None,
                 base_url: str = "https://www.googleapis.com/civicinfo/v2"):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url

    async def lookup_by_zip(self, zip_code: str) -> ZipLookupResult:
        """
        /**
         * Federal legislators for a postal code, in office order.
         */
        """
        if not self.api_key:
            raise ConfigurationError("GOOGLE_CIVIC_API_KEY is not configured")

        params = [
            ("key", self.api_key),
            ("address", zip_code),
            ("levels", "country"),
            ("roles", "legislatorUpperBody"),
            ("roles", "legislatorLowerBody"),
        ]
        raw = await self.http.fetch_json(f"{self.base_url}/representatives", params=params)
        data = parse_payload(CivicInfoResponse, raw, "civic_info.representatives") or CivicInfoResponse()

        offices = parse_records(CivicOffice, data.offices, "civic_info.offices")
        # Keep positions stable: officialIndices point into the raw list
        officials = [parse_payload(CivicOfficial, o, f"civic_info.officials[{i}]")
                     for i, o in enumerate(data.officials)]

        representatives = []
        for office in offices:
            for index in office.official_indices:
                if index < 0 or index >= len(officials) or officials[index] is None:
                    continue
                official = officials[index]
                representatives.append(RepresentativeInfo(
                    name=official.name,
                    title=office.name,
                    party=official.party or "",
                    chamber=chamber_from_title(office.name),
                    photo_url=official.photo_url,
                    bioguide_id=extract_bioguide_from_photo(official.photo_url),
                    phones=official.phones,
                    urls=official.urls,
                    channels=[Channel(type=c.type, id=c.id) for c in official.channels],
                ))

        normalized = data.normalized_input
        return ZipLookupResult(
            zip_code=zip_code,
            state=(normalized.state or "") if normalized else "",
            city=(normalized.city or None) if normalized else None,
            officials=representatives,
            source="civic_info",
        )
