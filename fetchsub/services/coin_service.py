"""
Coin metering service backed by Supabase.

Tables used:
- user_coins (user_id, balance, total_earned, subscription_tier, last_coin_refresh)
- coin_transactions (user_id, transaction_id, type, amount, description, created_at)
- user_subscriptions (user_id, plan_name, status, last_payment_date)
- pricing_plans (name, monthly_coins)

Deductions go through the `spend_user_coins` RPC so the balance check and
transaction insert happen atomically in the database.
"""

import logging
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fetchsub.services.supabase_service import get_supabase_client
from fetchsub.utils.url_utils import is_batch_url

logger = logging.getLogger(__name__)

OPERATION_COSTS = {
    "BASE_PLAYLIST_COST": 1,
    "BASE_CSV_COST": 1,
    "BASE_SINGLE_COST": 1,
    "SINGLE_SUBTITLE": 1,
    "BATCH_SUBTITLE": 0.5,
}

# Videos assumed for a playlist or channel when estimating up front
ESTIMATED_BATCH_VIDEOS = 5


class InsufficientCoinsError(Exception):
    """Raised when a user's balance does not cover a charge."""

    def __init__(self, balance: float, required: float):
        super().__init__(f"Insufficient coins: balance {balance}, required {required}")
        self.balance = balance
        self.required = required


class CoinDeductionError(Exception):
    """Raised when the deduction RPC fails."""


# =============================================================================
# Helper Functions
# =============================================================================

def _now_iso() -> str:
    """Return current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def _transaction_id(prefix: str) -> str:
    suffix = ''.join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable timestamp: {value}")
        return None


# =============================================================================
# Cost Calculation
# =============================================================================

def calculate_cost(processed_videos: int, n_formats: int, estimate: Optional[float] = None) -> float:
    """
    Charge for a finished extraction.

    A positive numeric client estimate wins. Otherwise batches pay the
    discounted per-format rate per video and single videos pay the full
    per-format rate. Minimum charge is 1 coin.
    """
    if isinstance(estimate, (int, float)) and not isinstance(estimate, bool) and estimate > 0:
        return max(estimate, 1)

    if processed_videos > 1:
        cost = processed_videos * OPERATION_COSTS["BATCH_SUBTITLE"] * n_formats
    else:
        cost = OPERATION_COSTS["SINGLE_SUBTITLE"] * n_formats
    return max(cost, 1)


def calculate_estimated_cost(url: str) -> float:
    """Up-front cost estimate for a URL (a batch is assumed to hold 5 videos)."""
    if is_batch_url(url):
        cost = ESTIMATED_BATCH_VIDEOS * OPERATION_COSTS["BATCH_SUBTITLE"]
    else:
        cost = OPERATION_COSTS["SINGLE_SUBTITLE"]
    return max(cost, 1)


# =============================================================================
# Balance Operations
# =============================================================================

def get_user_balance(user_id: str) -> float:
    """Current coin balance for a user; 0 when the user has no coin record."""
    supabase = get_supabase_client()
    result = supabase.table("user_coins").select("balance").eq("user_id", user_id).execute()
    if not result.data:
        return 0
    return result.data[0].get("balance") or 0


def deduct_coins(user_id: str, amount: float, operation: str) -> float:
    """
    Deduct coins for an operation and return the remaining balance.

    Raises:
        InsufficientCoinsError: if the balance is below the amount
        CoinDeductionError: if the spend RPC fails
    """
    balance = get_user_balance(user_id)
    if balance < amount:
        raise InsufficientCoinsError(balance, amount)

    supabase = get_supabase_client()
    try:
        supabase.rpc("spend_user_coins", {
            "p_user_id": user_id,
            "p_amount": amount,
            "p_transaction_id": _transaction_id("deduct"),
            "p_description": f"Used {amount} coins for {operation}",
            "p_created_at": _now_iso(),
        }).execute()
    except Exception as e:
        logger.error(f"spend_user_coins failed for {user_id}: {e}")
        raise CoinDeductionError(str(e)) from e

    remaining = balance - amount
    logger.info(f"Deducted {amount} coins from {user_id} for {operation}, remaining {remaining}")
    return remaining


def add_subscription_coins(user_id: str, plan_name: str, coins: float) -> bool:
    """
    Credit a subscriber's monthly coins and record a SUBSCRIPTION transaction.
    Returns False when the user has no coin record or an update fails.
    """
    if not user_id:
        logger.error("Cannot add subscription coins: no user ID provided")
        return False

    supabase = get_supabase_client()
    try:
        result = supabase.table("user_coins").select("balance, total_earned").eq("user_id", user_id).execute()
        if not result.data:
            logger.error(f"User coins record not found for {user_id}")
            return False

        current = result.data[0]
        supabase.table("user_coins").update({
            "balance": (current.get("balance") or 0) + coins,
            "total_earned": (current.get("total_earned") or 0) + coins,
            "subscription_tier": plan_name.upper(),
            "last_coin_refresh": _now_iso(),
        }).eq("user_id", user_id).execute()

        supabase.table("coin_transactions").insert({
            "user_id": user_id,
            "transaction_id": _transaction_id("subscription"),
            "type": "SUBSCRIPTION",
            "amount": coins,
            "description": f"{plan_name} subscription coins",
            "created_at": _now_iso(),
        }).execute()
    except Exception as e:
        logger.error(f"Failed to add subscription coins for {user_id}: {e}")
        return False

    logger.info(f"Added {coins} coins for {user_id} from {plan_name} subscription")
    return True


def credit_monthly_subscriptions(now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Credit monthly coins to every active subscriber not yet credited this month.

    Per-subscriber failures are recorded in the results list, not raised.
    Returns {"success": True, "processed": n, "results": [...]}.
    """
    now = now or datetime.now(timezone.utc)
    supabase = get_supabase_client()

    subscribers = supabase.table("user_subscriptions").select(
        "user_id, plan_name, subscription_id, last_payment_date"
    ).eq("status", "active").execute().data or []

    plans = supabase.table("pricing_plans").select("name, monthly_coins").execute().data or []
    plan_coins = {plan["name"]: plan.get("monthly_coins") or 0 for plan in plans}

    results = []
    for subscriber in subscribers:
        user_id = subscriber["user_id"]
        plan_name = subscriber.get("plan_name") or ""
        try:
            last_payment = _parse_timestamp(subscriber.get("last_payment_date"))
            if last_payment and last_payment.month == now.month and last_payment.year == now.year:
                results.append({"userId": user_id, "status": "skipped", "reason": "Already credited this month"})
                continue

            coins = plan_coins.get(plan_name, 0)
            if not coins:
                results.append({"userId": user_id, "status": "skipped", "reason": "Invalid plan or zero coins"})
                continue

            if add_subscription_coins(user_id, plan_name, coins):
                supabase.table("user_subscriptions").update({
                    "last_payment_date": now.isoformat()
                }).eq("user_id", user_id).execute()
                results.append({"userId": user_id, "status": "credited", "coins": coins, "plan": plan_name})
            else:
                results.append({"userId": user_id, "status": "failed", "reason": "Failed to add coins"})
        except Exception as e:
            logger.error(f"Error processing subscriber {user_id}: {e}")
            results.append({"userId": user_id, "status": "error", "error": str(e)})

    logger.info(f"Monthly credit run processed {len(results)} subscribers")
    return {"success": True, "processed": len(results), "results": results}
