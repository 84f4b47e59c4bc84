"""
Admin router for administrative endpoints.

This module provides endpoints for:
- Manual subscription credit triggering
- Credit scheduler status monitoring
"""

import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fetchsub.dependencies import verify_api_key
from scripts.credit_scheduler import trigger_manual_credit, get_scheduler_status

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post("/credit-subscriptions")
async def admin_credit_subscriptions(_: bool = Depends(verify_api_key)):
    """
    Manually run the monthly subscription credit immediately.

    Subscribers already credited this month are skipped, so this is safe to
    run alongside the scheduler or the cron endpoint.

    Returns:
    - success: Boolean indicating if the run completed
    - processed/results: Per-subscriber outcomes (on success)
    - error: Failure message (on failure)
    - timestamp: ISO timestamp of the run
    """
    result = await asyncio.to_thread(trigger_manual_credit)
    if result["success"]:
        return JSONResponse(content=result, status_code=200)
    else:
        return JSONResponse(content=result, status_code=500)


@router.get("/credit-scheduler/status")
async def get_credit_scheduler_status(_: bool = Depends(verify_api_key)):
    """
    Get current status of the subscription credit scheduler.

    Returns information about:
    - Scheduler running state
    - Credit interval (hours)
    - Next scheduled run time
    - Last run timestamp and status
    """
    status = get_scheduler_status()
    return JSONResponse(content=status, status_code=200)
