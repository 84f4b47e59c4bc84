#!/usr/bin/env python3
"""
Subscription Coin Credit Scheduler

Runs the monthly subscription credit on a schedule using APScheduler.
Integrates with FastAPI application lifecycle.

Features:
- Scheduled run every N hours (configurable via CREDIT_INTERVAL_HOURS)
- Subscribers already credited this month are skipped, so frequent runs are safe
- Manual trigger via admin API endpoint
- Non-blocking background execution

Usage:
    from scripts.credit_scheduler import start_scheduler, stop_scheduler, trigger_manual_credit

    # Start on app startup (when CREDIT_SCHEDULER_ENABLED=true)
    start_scheduler()

    # Stop on app shutdown
    stop_scheduler()

    # Manual trigger
    result = trigger_manual_credit()
"""

import logging
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from fetchsub.config import get_settings
from fetchsub.services.coin_service import credit_monthly_subscriptions


logger = logging.getLogger(__name__)

JOB_ID = 'monthly_subscription_credit'

# Global scheduler instance
_scheduler: Optional[BackgroundScheduler] = None
_interval_hours: int = 24
_last_run_time: Optional[datetime] = None
_last_run_status: str = "never_run"
_last_run_result: Optional[dict] = None


def _run_credit() -> dict:
    """Run one credit pass and record its outcome."""
    global _last_run_time, _last_run_status, _last_run_result

    try:
        result = credit_monthly_subscriptions()
        _last_run_time = datetime.now()
        _last_run_result = result
        credited = len([r for r in result["results"] if r.get("status") == "credited"])
        _last_run_status = "success"
        logger.info(f"✓ Credit run complete: {result['processed']} subscribers processed, {credited} credited")
        return result
    except Exception as e:
        logger.error(f"✗ Credit run failed: {str(e)}")
        logger.exception("Full traceback:")
        _last_run_time = datetime.now()
        _last_run_status = f"failed_exception: {str(e)}"
        raise


def scheduled_credit_run():
    """Scheduled job that credits monthly coins to active subscribers."""
    logger.info("=" * 60)
    logger.info("Starting scheduled subscription credit run")
    logger.info(f"Timestamp: {datetime.now().isoformat()}")
    logger.info("=" * 60)

    try:
        _run_credit()
    except Exception:
        logger.warning(f"Scheduled credit run failed, retrying in {_interval_hours} hours")

    logger.info("=" * 60)


def trigger_manual_credit() -> dict:
    """
    Run the subscription credit immediately.
    Returns status dict with success/failure info.
    """
    logger.info("Manual subscription credit triggered")

    try:
        result = _run_credit()
    except Exception as e:
        return {
            "success": False,
            "error": str(e),
            "timestamp": datetime.now().isoformat()
        }

    global _last_run_status
    _last_run_status = "success_manual"
    return {**result, "timestamp": _last_run_time.isoformat()}


def start_scheduler():
    """
    Initialize and start the background scheduler.
    Called on FastAPI app startup.
    """
    global _scheduler, _interval_hours

    if _scheduler is not None:
        logger.warning("Scheduler already running, skipping start")
        return

    _interval_hours = get_settings().credit_interval_hours

    logger.info("=" * 60)
    logger.info("Subscription Credit Scheduler Starting")
    logger.info("=" * 60)
    logger.info(f"Credit interval: Every {_interval_hours} hours")

    _scheduler = BackgroundScheduler(
        job_defaults={
            'coalesce': True,  # Combine multiple missed runs into one
            'max_instances': 1,  # Only one credit job at a time
        }
    )

    _scheduler.add_job(
        func=scheduled_credit_run,
        trigger=IntervalTrigger(hours=_interval_hours),
        id=JOB_ID,
        name='Monthly Subscription Credit',
        replace_existing=True,
    )

    _scheduler.start()

    next_run = _scheduler.get_job(JOB_ID).next_run_time
    logger.info("✓ Scheduler started successfully")
    logger.info(f"Next scheduled credit run: {next_run.strftime('%Y-%m-%d %H:%M:%S %Z')}")
    logger.info("=" * 60)


def stop_scheduler():
    """
    Gracefully stop the scheduler.
    Called on FastAPI app shutdown.
    """
    global _scheduler

    if _scheduler is None:
        logger.warning("Scheduler not running, skipping stop")
        return

    logger.info("Stopping subscription credit scheduler...")
    _scheduler.shutdown(wait=True)
    _scheduler = None
    logger.info("✓ Scheduler stopped successfully")


def get_scheduler_status() -> dict:
    """
    Get current scheduler status for monitoring/debugging.
    Returns dict with scheduler state, next run time and last run info.
    """
    if _scheduler is None:
        return {
            "running": False,
            "message": "Scheduler not started"
        }

    job = _scheduler.get_job(JOB_ID)
    return {
        "running": True,
        "interval_hours": _interval_hours,
        "next_run_time": job.next_run_time.isoformat() if job and job.next_run_time else None,
        "last_run_time": _last_run_time.isoformat() if _last_run_time else None,
        "last_run_status": _last_run_status,
        "last_run_processed": _last_run_result["processed"] if _last_run_result else None,
    }


__all__ = [
    'start_scheduler',
    'stop_scheduler',
    'trigger_manual_credit',
    'get_scheduler_status',
]
