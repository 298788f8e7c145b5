"""
Official updates scraped from a relief organisation's web page.
"""

from typing import List, Union

from lxml import etree, html

from shared.errors import ExternalServiceError
from .base import UpstreamClient


class OfficialUpdatesScraper(UpstreamClient):
    """Collect the section headlines (``<h2>``) of an official page."""

    service_name = "official_updates"

    def __init__(self, url: str = "https://www.redcross.org", **kwargs):
        super().__init__(**kwargs)
        self.url = url

    async def fetch_updates(self) -> List[str]:
        response = await self._request("GET", self.url, follow_redirects=True)
        return self.parse_headlines(response.content)

    def parse_headlines(self, page: Union[bytes, str]) -> List[str]:
        if not page.strip():
            return []
        try:
            document = html.fromstring(page)
        except (etree.ParserError, ValueError) as e:
            raise ExternalServiceError(self.service_name, "Page could not be parsed") from e

        headlines = []
        for element in document.iter("h2"):
            text = " ".join(element.text_content().split())
            if text:
                headlines.append(text)
        return headlines
