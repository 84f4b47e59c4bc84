"""
Supabase access for coin metering and authentication.

The client is created once at import when SUPABASE_URL and
SUPABASE_SERVICE_KEY are set. Routes that need it call
get_supabase_client(), which turns a missing configuration into a 503.
"""

import logging
from typing import Optional
from fastapi import HTTPException
from supabase import create_client, Client
from fetchsub.config import SUPABASE_URL, SUPABASE_SERVICE_KEY

logger = logging.getLogger(__name__)


supabase_client: Optional[Client] = None

try:
    if SUPABASE_URL and SUPABASE_SERVICE_KEY:
        supabase_client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
        print("INFO: Supabase client initialized - coin metering enabled")
except Exception as e:
    print(f"WARNING: Could not create Supabase client, coin metering disabled: {str(e)}")
    supabase_client = None


def get_supabase_client() -> Client:
    """
    Return the shared Supabase client.

    Raises:
        HTTPException: 503 when Supabase is not configured
    """
    if supabase_client is None:
        raise HTTPException(
            status_code=503,
            detail="Coin service unavailable: SUPABASE_URL and SUPABASE_SERVICE_KEY are not set."
        )
    return supabase_client


def verify_user_token(token: str) -> Optional[str]:
    """
    Resolve a Supabase access token to its user ID.

    Returns None when the token is rejected. Raises HTTPException 503 when
    Supabase is not configured.
    """
    supabase = get_supabase_client()
    try:
        response = supabase.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token verification failed: {e}")
        return None

    user = getattr(response, "user", None)
    if user is None:
        return None
    return user.id
