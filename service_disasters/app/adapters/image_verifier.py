"""
Image verification for user-submitted disaster photos.
"""

from typing import Any, Dict

import httpx

from shared.errors import ExternalServiceError, ValidationError
from .base import UpstreamClient


class ImageVerifier(UpstreamClient):
    """Check that a reported image URL serves an actual image.

    Client errors (4xx) and non-image responses produce a successful,
    negative result. Server errors and transport failures are raised so the
    outcome is never cached. The URL comes from the caller, so a bad host
    must not trip a breaker shared by every other request.
    """

    service_name = "image_verification"
    uses_circuit_breaker = False
    max_redirects = 3

    @staticmethod
    def validate_url(image_url: str) -> None:
        """Reject anything that is not an absolute http(s) URL."""
        try:
            url = httpx.URL(image_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ValidationError("Invalid image_url in request body") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValidationError("Invalid image_url in request body")

    async def verify(self, image_url: str) -> Dict[str, Any]:
        self.validate_url(image_url)
        response = await self._request(
            "GET",
            image_url,
            check_status=False,
            headers_only=True,
            follow_redirects=True,
        )
        status = response.status_code
        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()

        if status >= 500:
            self.logger.error("Image host returned server error", url=image_url, status_code=status)
            raise ExternalServiceError(
                self.service_name,
                f"Unexpected status {status}",
                details={"status_code": status}
            )
        if status != 200:
            return {
                "verified": False,
                "message": f"Image could not be retrieved (status {status})",
                "content_type": content_type or None,
            }
        if not content_type.startswith("image/"):
            return {
                "verified": False,
                "message": "URL does not point to an image",
                "content_type": content_type or None,
            }
        return {
            "verified": True,
            "message": "No manipulation detected",
            "content_type": content_type,
        }
