"""
Topic content retrieval from Wikipedia.

WikipediaContentSource returns a short plain-text summary of a topic,
trying the primary-language wiki first and a fallback language last.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "QuiziAI/0.1 (trivia generator)"


@dataclass(frozen=True)
class ContentSummary:
    """Source text for a topic.

    Attributes:
        title: Resolved page title
        extract: Plain-text introduction of the page
    """

    title: str
    extract: str


class WikipediaContentSource:
    """
    Fetch topic summaries from Wikipedia.

    Sources, in order:
    1. MediaWiki query API of the primary language
    2. REST page summary of the primary language
    3. MediaWiki query API of the fallback language

    The first populated extract wins. Missing pages, HTTP errors and
    network errors fall through to the next source; fetch_content()
    never raises.
    """

    def __init__(
        self,
        primary_language: str = "es",
        fallback_language: Optional[str] = "en",
        timeout: float = 10.0,
    ):
        self.primary_language = primary_language
        self.fallback_language = fallback_language
        self.timeout = timeout

    @staticmethod
    def _api_url(language: str) -> str:
        return f"https://{language}.wikipedia.org/w/api.php"

    @staticmethod
    def _summary_url(language: str, topic: str) -> str:
        title = quote(topic.replace(" ", "_"), safe="")
        return f"https://{language}.wikipedia.org/api/rest_v1/page/summary/{title}"

    async def _get_json(self, url: str, params: Optional[dict[str, Any]] = None) -> Optional[Any]:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        ) as client:
            response = await client.get(url, params=params)

        if response.status_code != 200:
            logger.warning(f"Wikipedia returned HTTP {response.status_code} for {url}")
            return None
        return response.json()

    async def _query_extract(self, language: str, topic: str) -> Optional[ContentSummary]:
        params = {
            "action": "query",
            "format": "json",
            "prop": "extracts",
            "exintro": "true",
            "explaintext": "true",
            "redirects": "1",
            "titles": topic,
        }
        data = await self._get_json(self._api_url(language), params=params)
        if not isinstance(data, dict):
            return None

        pages = (data.get("query") or {}).get("pages") or {}
        for page in pages.values():
            if "missing" in page:
                continue
            extract = (page.get("extract") or "").strip()
            if extract:
                return ContentSummary(title=page.get("title", topic), extract=extract)
        return None

    async def _rest_summary(self, language: str, topic: str) -> Optional[ContentSummary]:
        data = await self._get_json(self._summary_url(language, topic))
        if not isinstance(data, dict):
            return None

        extract = (data.get("extract") or "").strip()
        if not extract:
            return None
        return ContentSummary(title=data.get("title", topic), extract=extract)

    def _sources(self):
        yield f"{self.primary_language} query", self._query_extract, self.primary_language
        yield f"{self.primary_language} summary", self._rest_summary, self.primary_language
        if self.fallback_language and self.fallback_language != self.primary_language:
            yield f"{self.fallback_language} query", self._query_extract, self.fallback_language

    async def fetch_content(self, topic: str) -> Optional[ContentSummary]:
        """
        Fetch a summary for a topic.

        Args:
            topic: Topic or page title

        Returns:
            ContentSummary, or None if no source has text for the topic
        """
        topic = (topic or "").strip()
        if not topic:
            return None

        for label, fetch, language in self._sources():
            try:
                summary = await fetch(language, topic)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Wikipedia {label} failed for {topic!r}: {e}")
                continue

            if summary:
                logger.info(
                    f"Fetched {len(summary.extract)} chars for {topic!r} from {label}"
                )
                return summary
            logger.debug(f"No extract for {topic!r} from {label}")

        logger.warning(f"No content found for {topic!r}")
        return None

    async def __call__(self, topic: str) -> Optional[ContentSummary]:
        return await self.fetch_content(topic)
