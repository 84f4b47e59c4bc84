"""
Coins router for cost estimates and balances.
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from fetchsub.dependencies import get_optional_bearer_token
from fetchsub.models.schemas import CoinEstimateRequest, CoinEstimateResponse
from fetchsub.services import coin_service
from fetchsub.services.supabase_service import verify_user_token
from fetchsub.utils.url_utils import is_batch_url

router = APIRouter(prefix="/api/coins", tags=["Coins"])


@router.post("/estimate")
async def estimate_cost(request: CoinEstimateRequest):
    """Estimate the coin cost of extracting a URL before submitting it."""
    return CoinEstimateResponse(
        estimated_cost=coin_service.calculate_estimated_cost(request.url),
        is_batch=is_batch_url(request.url),
    ).model_dump(by_alias=True)


@router.get("/balance")
async def get_balance(token: str = Depends(get_optional_bearer_token)):
    """Current coin balance of the authenticated user."""
    if not token:
        return JSONResponse(status_code=401, content={"error": "Authentication required"})

    try:
        user_id = await asyncio.to_thread(verify_user_token, token)
        if not user_id:
            return JSONResponse(status_code=401, content={"error": "Invalid authentication"})
        balance = await asyncio.to_thread(coin_service.get_user_balance, user_id)
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to fetch balance: {str(e)}")

    return {"userId": user_id, "balance": balance}
