"""Authentication gates run before every generated API handler."""

from typing import Optional, Protocol

from fastapi import HTTPException, Request


class AuthGate(Protocol):
    async def __call__(self, request: Request) -> None:
        ...


class AllowAllGate:
    """Gate that never denies a request.

    This is where an ACL check against the persistence layer would happen.
    """

    async def __call__(self, request: Request) -> None:
        return None


class ApiKeyGate:
    """Require ``Authorization: Bearer <api_key>`` on every API request."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    def verify_api_key(self, api_key: Optional[str]) -> bool:
        return api_key == self.api_key

    async def __call__(self, request: Request) -> None:
        auth_header = request.headers.get("Authorization", "")

        if not auth_header:
            raise HTTPException(
                status_code=401,
                detail="Missing Authorization header",
            )

        # Expected format: "Bearer <api_key>"
        if not auth_header.startswith("Bearer "):
            raise HTTPException(
                status_code=401,
                detail="Invalid Authorization header format. Expected 'Bearer <api_key>'",
            )

        if not self.verify_api_key(auth_header[7:]):
            raise HTTPException(
                status_code=403,
                detail="Invalid security context",
            )


def build_auth_gate(api_key: Optional[str] = None) -> AuthGate:
    """Pick the gate for the configured API key (none configured: allow all)."""
    if api_key:
        return ApiKeyGate(api_key)
    return AllowAllGate()
