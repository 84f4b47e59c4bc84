"""
FastAPI dependency injection functions.

This module provides reusable dependencies for:
- Admin API key verification
- Cron bearer key verification for the monthly credit endpoint
- Optional bearer token extraction for user-facing endpoints
"""

from typing import Optional

from fastapi import Header, HTTPException
from fastapi.responses import JSONResponse

from fetchsub.config import get_settings


class JSONErrorException(Exception):
    """Error rendered as a bare {"error": ...} body instead of FastAPI's {"detail": ...}."""

    def __init__(self, status_code: int, error: str, **extra):
        super().__init__(error)
        self.status_code = status_code
        self.body = {"error": error, **extra}

    def to_response(self) -> JSONResponse:
        return JSONResponse(status_code=self.status_code, content=self.body)


def verify_api_key(x_api_key: str = Header(None)) -> bool:
    """
    Dependency to verify API key from request header.
    Raises HTTPException 401 if invalid, 500 if not configured.
    """
    settings = get_settings()
    if not settings.api_key:
        raise HTTPException(status_code=500, detail="API key not configured")
    if x_api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API Key")
    return True


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a "Bearer <token>" header, or None."""
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization[len("Bearer "):].strip()
    return token or None


def verify_cron_key(authorization: str = Header(None)) -> bool:
    """
    Dependency to verify the cron caller's bearer key.

    Raises:
        JSONErrorException 401 if the header is missing or malformed
        JSONErrorException 403 if the key does not match SUBSCRIPTION_CRON_API_KEY
    """
    token = parse_bearer(authorization)
    if token is None:
        raise JSONErrorException(401, "Unauthorized")

    expected = get_settings().subscription_cron_api_key
    if not expected or token != expected:
        raise JSONErrorException(403, "Invalid API key")
    return True


def get_optional_bearer_token(authorization: str = Header(None)) -> Optional[str]:
    """Bearer token from the Authorization header, if any. Verification is left to the route."""
    return parse_bearer(authorization)
