"""
Subscriptions router for the monthly coin credit run.

Called by an external cron with `Authorization: Bearer <SUBSCRIPTION_CRON_API_KEY>`.
The same run can also be scheduled in-process (see scripts/credit_scheduler.py).
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from fetchsub.dependencies import verify_cron_key
from fetchsub.services import coin_service

router = APIRouter(prefix="/api/subscriptions", tags=["Subscriptions"])


@router.post("/monthly-credit")
async def monthly_credit(_: bool = Depends(verify_cron_key)):
    """Credit monthly coins to every active subscriber not yet credited this month."""
    try:
        return await asyncio.to_thread(coin_service.credit_monthly_subscriptions)
    except HTTPException:
        raise
    except Exception as e:
        return JSONResponse(status_code=500, content={"error": str(e) or "Internal server error"})
