"""
Place-name extraction through the Gemini generateContent API.
"""

from typing import Any, Optional

from shared.errors import ExternalServiceError
from .base import UpstreamClient

UNKNOWN_LOCATION = "Unknown"

PROMPT_TEMPLATE = 'Extract a place name from the following text: "{description}". Return just the name.'


class LocationExtractor(UpstreamClient):
    """Ask a language model for the place named in a free-text report."""

    service_name = "gemini"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        **kwargs
    ):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")

    async def extract(self, description: str) -> str:
        """Return the extracted place name, or ``"Unknown"`` when the model gives none."""
        if not self.api_key:
            raise ExternalServiceError(self.service_name, "API key is not configured")

        response = await self._request(
            "POST",
            f"{self.base_url}/models/{self.model}:generateContent",
            params={"key": self.api_key},
            json={
                "contents": [
                    {"parts": [{"text": PROMPT_TEMPLATE.format(description=description)}]}
                ]
            },
        )
        location = self._first_text(self._json(response))
        self.logger.debug("Location extracted", location=location)
        return location or UNKNOWN_LOCATION

    @staticmethod
    def _first_text(payload: Any) -> str:
        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return ""
        return text.strip() if isinstance(text, str) else ""
