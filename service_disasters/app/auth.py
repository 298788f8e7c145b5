"""
Mock authentication for the Disasters service.

There is no credential check: the acting user is whatever the
``X-User-Id`` header says, falling back to the configured default.
"""

from typing import Any, Dict

from fastapi import Request

from shared.logging import set_user_context

USER_HEADER = "X-User-Id"


class MockAuth:
    """FastAPI dependency that identifies the acting user."""

    def __init__(self, default_user_id: str):
        self.default_user_id = default_user_id

    async def __call__(self, request: Request) -> Dict[str, Any]:
        user_id = request.headers.get(USER_HEADER, "").strip() or self.default_user_id
        set_user_context(user_id)
        request.state.user = {"id": user_id}
        return request.state.user
