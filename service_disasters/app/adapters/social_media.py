"""
Social-media mentions for a disaster.
"""

from typing import Any, Dict, List, Optional

from shared.errors import ExternalServiceError
from .base import UpstreamClient

SAMPLE_POSTS: List[Dict[str, str]] = [
    {"post": "#floodrelief Need food in NYC", "user": "citizen1"},
    {"post": "Trapped in subway!", "user": "citizen2"},
]


class SocialMediaClient(UpstreamClient):
    """Fetch posts mentioning a disaster.

    Without a configured feed URL the client serves a fixed set of sample
    posts, which is what local and demo deployments run with.
    """

    service_name = "social_media"

    def __init__(self, feed_url: Optional[str] = None, **kwargs):
        super().__init__(**kwargs)
        self.feed_url = feed_url

    async def fetch_posts(self, disaster_id: str) -> List[Dict[str, Any]]:
        if not self.feed_url:
            return [dict(post) for post in SAMPLE_POSTS]

        response = await self._request("GET", self.feed_url, params={"disaster_id": disaster_id})
        payload = self._json(response)
        posts = payload.get("posts") if isinstance(payload, dict) else payload
        if not isinstance(posts, list):
            raise ExternalServiceError(self.service_name, "Feed did not return a list of posts")
        return posts
