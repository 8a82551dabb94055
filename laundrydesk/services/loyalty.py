# laundrydesk/services/loyalty.py
import logging

from ..extensions import db
from ..model import Customer, LoyaltyAccount, LoyaltyTransaction
from ..utils.money import D

log = logging.getLogger(__name__)

LOYALTY_CONFIG = {
    "min_spend_for_point": 20000,   # 1 point per 20,000 TSh
    "redeem_block": 100,            # points per reward block
    "redeem_block_value": 10000,    # TSh discount per block
    "tiers": {
        "Bronze": {"min_points": 0, "multiplier": 1},
        "Silver": {"min_points": 500, "multiplier": 1.2},
        "Gold": {"min_points": 2000, "multiplier": 1.5},
        "Platinum": {"min_points": 5000, "multiplier": 2},
    },
}

TIER_ORDER = ["Bronze", "Silver", "Gold", "Platinum"]

def calculate_tier(lifetime_points: int) -> str:
    tier = "Bronze"
    for name in TIER_ORDER:
        if lifetime_points >= LOYALTY_CONFIG["tiers"][name]["min_points"]:
            tier = name
    return tier

def points_for_amount(amount) -> int:
    return int(D(amount) // LOYALTY_CONFIG["min_spend_for_point"])

def get_or_create_account(customer_id: int) -> LoyaltyAccount:
    acc = LoyaltyAccount.query.filter_by(customer_id=customer_id).first()
    if not acc:
        acc = LoyaltyAccount(customer_id=customer_id, current_points=0, lifetime_points=0, tier="Bronze")
        db.session.add(acc)
        db.session.flush()
    return acc

def summary(acc: LoyaltyAccount):
    idx = TIER_ORDER.index(acc.tier) if acc.tier in TIER_ORDER else 0
    next_tier = TIER_ORDER[idx + 1] if idx + 1 < len(TIER_ORDER) else None
    to_next = 0
    if next_tier:
        to_next = max(0, LOYALTY_CONFIG["tiers"][next_tier]["min_points"] - acc.lifetime_points)
    return {
        "customer_id": acc.customer_id,
        "current_points": acc.current_points,
        "lifetime_points": acc.lifetime_points,
        "tier": acc.tier,
        "next_tier": next_tier,
        "points_to_next_tier": to_next,
    }

def award_points_on_collection(customer_id: int, order_id: int, receipt_total):
    """Credit points for a collected receipt. Caller commits."""
    earned = points_for_amount(receipt_total)
    acc = get_or_create_account(customer_id)
    old_tier = acc.tier
    if earned <= 0:
        return {"points_earned": 0, "tier": acc.tier, "tier_upgraded": False}

    acc.current_points += earned
    acc.lifetime_points += earned
    acc.tier = calculate_tier(acc.lifetime_points)
    db.session.add(LoyaltyTransaction(
        customer_id=customer_id, order_id=order_id, transaction_type="earned",
        points=earned, description="Points earned for order collection",
        balance_after=acc.current_points,
    ))
    log.info("loyalty: +%s points for customer %s (tier %s)", earned, customer_id, acc.tier)
    return {
        "points_earned": earned,
        "current_points": acc.current_points,
        "lifetime_points": acc.lifetime_points,
        "tier": acc.tier,
        "tier_upgraded": acc.tier != old_tier,
    }

def redeem_points(customer_id: int, points, order_id=None):
    try:
        points = int(points)
    except (TypeError, ValueError):
        raise ValueError("points must be a whole number")
    if points < LOYALTY_CONFIG["redeem_block"]:
        raise ValueError("Minimum 100 points required to redeem (worth 10,000 TSh)")
    if not db.session.get(Customer, customer_id):
        raise ValueError("Customer not found")

    acc = get_or_create_account(customer_id)
    if acc.current_points < points:
        raise ValueError(f"Insufficient points. Current balance: {acc.current_points} points")

    discount = (points // LOYALTY_CONFIG["redeem_block"]) * LOYALTY_CONFIG["redeem_block_value"]
    acc.current_points -= points
    db.session.add(LoyaltyTransaction(
        customer_id=customer_id, order_id=order_id, transaction_type="redeemed",
        points=-points, description=f"Points redeemed for {discount:,} TSh discount",
        balance_after=acc.current_points,
    ))
    db.session.commit()
    return {"points_redeemed": points, "current_points": acc.current_points, "discount_amount": discount}
