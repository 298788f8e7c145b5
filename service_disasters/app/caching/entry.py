"""
Cache entry model shared by every cache store backend.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CacheEntry:
    """A cached lookup result.

    ``value`` must be JSON-serializable. ``expires_at`` is an aware UTC
    timestamp; the entry is valid only while the current time is strictly
    before it.
    """
    key: str
    value: Any
    expires_at: datetime

    def is_fresh(self, now: datetime) -> bool:
        return now < self.expires_at
