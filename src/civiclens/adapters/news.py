"""
/**
 * @file news.py
 * @summary Adapter for NewsAPI.org article search.
 */
"""

from typing import List, Optional

from civiclens.services.http_client import JSONFetcher
from civiclens.utils.errors import ConfigurationError
from civiclens.utils.provider_schemas import NewsApiArticle, NewsApiResponse, parse_payload, parse_records
from civiclens.utils.schemas import NewsArticle


class NewsAdapter:
    """
    /**
     * NewsAPI adapter.
     *
     * @param http: Resilient JSON fetcher.
     * @param api_key: NewsAPI key (required).
     */
    """

    def __init__(self, http: JSONFetcher, api_key: Optional[str] = None,
                 base_url: str = "https://newsapi.org/v2"):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url

    async def get_articles_about(self, name: str, limit: int = 5) -> List[NewsArticle]:
        """
        /**
         * Most recent English articles mentioning the quoted name.
         */
        """
        if not self.api_key:
            raise ConfigurationError("NEWS_API_KEY is not configured")

        data = await self.http.fetch_json(f"{self.base_url}/everything", params={
            "q": f'"{name}"',
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": limit,
            "apiKey": self.api_key,
        })
        response = parse_payload(NewsApiResponse, data, "news.everything")
        if response is None:
            return []
        return [
            NewsArticle(
                title=a.title or "",
                description=a.description or "",
                source=(a.source.name or "") if a.source else "",
                url=a.url or "",
                published_at=a.published_at or "",
                image_url=a.url_to_image,
            )
            for a in parse_records(NewsApiArticle, response.articles, "news.articles")
        ][:limit]
