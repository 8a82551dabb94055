"""
Tests for loyalty points, tiers and redemption.
"""
import pytest

from laundrydesk.extensions import db
from laundrydesk.model import LoyaltyAccount, LoyaltyTransaction
from laundrydesk.services.loyalty import (
    award_points_on_collection, calculate_tier, points_for_amount, redeem_points, summary,
)


@pytest.fixture
def account(customer):
    acc = LoyaltyAccount(customer_id=customer.id, current_points=250, lifetime_points=600, tier="Silver")
    db.session.add(acc)
    db.session.commit()
    return acc


class TestRules:
    @pytest.mark.parametrize("points, tier", [
        (0, "Bronze"), (499, "Bronze"), (500, "Silver"), (2000, "Gold"), (5000, "Platinum"), (9000, "Platinum"),
    ])
    def test_calculate_tier(self, points, tier):
        assert calculate_tier(points) == tier

    @pytest.mark.parametrize("amount, points", [(19999, 0), (20000, 1), (59999.99, 2)])
    def test_points_for_amount(self, amount, points):
        assert points_for_amount(amount) == points

    def test_summary_shows_next_tier(self, account):
        data = summary(account)
        assert data["next_tier"] == "Gold"
        assert data["points_to_next_tier"] == 1400


class TestAward:
    def test_creates_account_and_upgrades_tier(self, app, customer):
        result = award_points_on_collection(customer.id, None, 10_000_000)
        db.session.commit()
        assert result["points_earned"] == 500
        assert result["tier"] == "Silver"
        assert result["tier_upgraded"] is True
        assert LoyaltyTransaction.query.one().balance_after == 500

    def test_small_receipts_earn_nothing(self, app, customer):
        assert award_points_on_collection(customer.id, None, 5000)["points_earned"] == 0
        assert LoyaltyTransaction.query.count() == 0


class TestRedeem:
    def test_redeem_blocks_of_100(self, account, customer):
        result = redeem_points(customer.id, 250)
        assert result == {"points_redeemed": 250, "current_points": 0, "discount_amount": 20000}
        assert LoyaltyTransaction.query.one().points == -250

    def test_minimum_points(self, account, customer):
        with pytest.raises(ValueError):
            redeem_points(customer.id, 99)

    def test_cannot_redeem_more_than_balance(self, account, customer):
        with pytest.raises(ValueError, match="Insufficient points"):
            redeem_points(customer.id, 300)


class TestLoyaltyApi:
    def test_tiers_are_public(self, client):
        r = client.get("/loyalty/tiers")
        assert r.status_code == 200
        assert r.get_json()["data"]["Gold"]["min_points"] == 2000

    def test_customer_summary(self, client, login, account, customer):
        r = client.get(f"/loyalty/customers/{customer.id}", headers=login("cashier"))
        assert r.get_json()["data"]["current_points"] == 250

    def test_redeem_endpoint(self, client, login, account, customer):
        headers = login("cashier")
        r = client.post("/loyalty/redeem", json={"customer_id": customer.id, "points": 100}, headers=headers)
        assert r.status_code == 200
        assert r.get_json()["data"]["discount_amount"] == 10000
        r = client.get(f"/loyalty/customers/{customer.id}/transactions", headers=headers)
        assert [t["transaction_type"] for t in r.get_json()["data"]["items"]] == ["redeemed"]

    def test_redeem_validation(self, client, login, account, customer):
        r = client.post("/loyalty/redeem", json={"customer_id": customer.id, "points": 50},
                        headers=login("cashier"))
        assert r.status_code == 422
