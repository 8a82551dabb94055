"""
Tests for line pricing and express multipliers.
"""
from decimal import Decimal

import pytest

from laundrydesk.extensions import db
from laundrydesk.model import Setting
from laundrydesk.services.pricing import calculate_total, express_multiplier_for


class TestCalculateTotal:
    def test_base_price_per_piece(self, services):
        assert calculate_total(services["wash"], quantity=3) == Decimal("3000.00")

    def test_item_and_weight_components(self, services):
        # 500*2 + 100*2 + 1500*1.5
        total = calculate_total(services["ironing"], quantity=2, weight=Decimal("1.5"))
        assert total == Decimal("3450.00")

    def test_weight_ignored_when_service_has_no_kg_price(self, services):
        assert calculate_total(services["dry"], quantity=1, weight=4) == Decimal("2000.00")

    def test_express_multiplies_whole_line(self, services):
        total = calculate_total(services["ironing"], 2, Decimal("1.5"), "same_day", Decimal("2"))
        assert total == Decimal("6900.00")

    def test_standard_delivery_ignores_multiplier(self, services):
        assert calculate_total(services["dry"], 1, 0, "standard", Decimal("3")) == Decimal("2000.00")


class TestExpressMultiplier:
    def test_defaults(self, app):
        assert express_multiplier_for("standard") == 0
        assert express_multiplier_for("same_day") == Decimal("2")
        assert express_multiplier_for("next_day") == Decimal("3")

    def test_setting_overrides_default(self, app):
        db.session.add(Setting(key="express_same_day_multiplier", value="2.5"))
        db.session.commit()
        assert express_multiplier_for("same_day") == Decimal("2.5")

    def test_explicit_request_wins(self, app):
        assert express_multiplier_for("next_day", "1.5") == Decimal("1.5")

    def test_unknown_delivery_type(self, app):
        with pytest.raises(ValueError):
            express_multiplier_for("by_drone")

    def test_negative_multiplier(self, app):
        with pytest.raises(ValueError):
            express_multiplier_for("same_day", "-1")

    @pytest.mark.parametrize("requested", ["abc", "NaN", "Infinity"])
    def test_non_numeric_multiplier(self, app, requested):
        with pytest.raises(ValueError):
            express_multiplier_for("same_day", requested)

    def test_unreadable_setting(self, app):
        db.session.add(Setting(key="express_next_day_multiplier", value="abc"))
        db.session.commit()
        with pytest.raises(ValueError, match="express_next_day_multiplier"):
            express_multiplier_for("next_day")


class TestExpressOrderInput:
    def test_bad_multiplier_is_a_validation_error(self, client, login, customer, services):
        body = {
            "customer_id": customer.id,
            "items": [{"service_id": services["wash"].id, "delivery_type": "same_day",
                       "express_surcharge_multiplier": "abc"}],
        }
        r = client.post("/orders", json=body, headers=login("cashier"))
        assert r.status_code == 422
        assert r.get_json()["data"]["errorKind"] == "ValidationError"
