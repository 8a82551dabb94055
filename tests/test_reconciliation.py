"""
Tests for the pure receipt/payment reconciliation functions.
"""
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from laundrydesk.errors import (
    AlreadyCollected, AmountMismatch, BalanceOutstanding, ExceedsBalance,
    InvalidAmount, InvalidStatusTransition, NotAllItemsReady, ReceiptNotFound,
)
from laundrydesk.services.reconciliation import (
    COLLECTION, STANDALONE, LineItem, check_collection_payment, check_standalone_payment,
    check_transition, distribute_payment, is_overdue, payment_status_for, plan_collection,
    plan_payment, receipt_status, summarize_receipt,
)


def item(id, total, paid=0, status="ready", **kw):
    return LineItem(id=id, receipt_number="3-18-10 (26)", total_amount=Decimal(str(total)),
                    paid_amount=Decimal(str(paid)), status=status, **kw)


@pytest.fixture
def scenario_a():
    """Two items, 1000 and 2000 TSh, nothing paid."""
    return [item(1, 1000), item(2, 2000)]


class TestSummarizeReceipt:
    def test_two_unpaid_items(self, scenario_a):
        totals = summarize_receipt(scenario_a)
        assert totals.receipt_total == Decimal("3000.00")
        assert totals.receipt_paid == Decimal("0.00")
        assert totals.balance_due == Decimal("3000.00")
        assert not totals.settled

    def test_balance_clamped_at_zero(self):
        totals = summarize_receipt([item(1, 100, paid="100.50")])
        assert totals.balance_due == Decimal("0.00")
        assert totals.settled

    def test_rounds_once_per_aggregate(self):
        # three thirds sum exactly before rounding
        items = [item(i, "0.333") for i in range(3)]
        assert summarize_receipt(items).receipt_total == Decimal("1.00")

    def test_half_up_rounding(self):
        assert summarize_receipt([item(1, "10.005")]).receipt_total == Decimal("10.01")

    def test_order_of_items_is_irrelevant(self, scenario_a):
        assert summarize_receipt(scenario_a) == summarize_receipt(list(reversed(scenario_a)))

    def test_idempotent(self, scenario_a):
        assert summarize_receipt(scenario_a) == summarize_receipt(scenario_a)

    def test_empty_receipt(self):
        with pytest.raises(ReceiptNotFound):
            summarize_receipt([])

    def test_as_api_uses_display_keys(self, scenario_a):
        assert summarize_receipt(scenario_a).as_api() == {
            "receiptTotal": 3000.0, "receiptPaid": 0.0, "balanceDue": 3000.0,
        }

    def test_from_record(self):
        li = LineItem.from_record({"id": 7, "receipt_number": "1-01-01 (26)",
                                   "total_amount": 1500, "paid_amount": None, "status": "ready"})
        assert li.total_amount == Decimal("1500")
        assert li.paid_amount == Decimal("0")
        assert summarize_receipt([li]).balance_due == Decimal("1500.00")


class TestDistributePayment:
    def test_exact_proportional_split(self, scenario_a):
        assert distribute_payment(scenario_a, Decimal("1500")) == [Decimal("500.00"), Decimal("1000.00")]

    def test_largest_remainder_keeps_every_cent(self):
        items = [item(1, 100), item(2, 100), item(3, 100)]
        shares = distribute_payment(items, Decimal("100"))
        assert sum(shares) == Decimal("100.00")
        assert sorted(shares) == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]

    @pytest.mark.parametrize("amount", ["0.01", "0.07", "999.99", "1234.56", "2999.99"])
    def test_shares_sum_to_amount(self, amount):
        items = [item(1, "333.33"), item(2, "1666.67"), item(3, 1000)]
        assert sum(distribute_payment(items, Decimal(amount))) == Decimal(amount)

    def test_share_never_exceeds_item_balance(self):
        # item 1 is already fully paid; its proportional share spills onto item 2
        items = [item(1, 1000, paid=1000), item(2, 2000, paid=500)]
        shares = distribute_payment(items, Decimal("1500"))
        assert shares == [Decimal("0.00"), Decimal("1500.00")]

    def test_more_than_outstanding_rejected(self, scenario_a):
        with pytest.raises(ExceedsBalance):
            distribute_payment(scenario_a, Decimal("3000.01"))

    def test_zero_rejected(self, scenario_a):
        with pytest.raises(InvalidAmount):
            distribute_payment(scenario_a, Decimal("0"))


class TestPaymentChecks:
    @pytest.mark.parametrize("amount", ["2999.991", "3000.009", "3000"])
    def test_standalone_within_tolerance(self, amount):
        assert check_standalone_payment(amount, Decimal("3000")) == Decimal("3000.00")

    @pytest.mark.parametrize("amount", ["2999.98", "3000.02", "2999"])
    def test_standalone_outside_tolerance(self, amount):
        with pytest.raises(AmountMismatch) as exc:
            check_standalone_payment(amount, Decimal("3000"))
        assert exc.value.required_amount == Decimal("3000.00")

    def test_standalone_message_names_the_amount(self):
        with pytest.raises(AmountMismatch) as exc:
            check_standalone_payment("2999", Decimal("3000"))
        assert "must equal balance due of TSh 3,000" in exc.value.message

    def test_collection_allows_partial(self):
        assert check_collection_payment("1500", Decimal("3000")) == Decimal("1500.00")

    def test_collection_overpay_inside_tolerance_snaps_to_balance(self):
        assert check_collection_payment("3000.009", Decimal("3000")) == Decimal("3000.00")

    def test_collection_overpay_rejected(self):
        with pytest.raises(ExceedsBalance):
            check_collection_payment("3000.02", Decimal("3000"))

    @pytest.mark.parametrize("amount", [0, -5, "abc", None, "", True])
    def test_invalid_amounts(self, amount):
        with pytest.raises(InvalidAmount):
            check_collection_payment(amount, Decimal("3000"))


class TestPlanPayment:
    def test_scenario_b_exact_standalone(self, scenario_a):
        plan = plan_payment(scenario_a, "3000", mode=STANDALONE)
        assert [a.paid_after for a in plan.allocations] == [Decimal("1000.00"), Decimal("2000.00")]
        assert all(a.fully_paid for a in plan.allocations)
        assert plan.after.balance_due == Decimal("0.00")

    def test_scenario_c_partial_standalone_rejected(self, scenario_a):
        with pytest.raises(AmountMismatch):
            plan_payment(scenario_a, "2999", mode=STANDALONE)

    def test_scenario_d_partial_collection_payment(self, scenario_a):
        plan = plan_payment(scenario_a, "1500", mode=COLLECTION)
        assert plan.after.balance_due == Decimal("1500.00")
        assert [a.amount for a in plan.allocations] == [Decimal("500.00"), Decimal("1000.00")]

    def test_settled_receipt_is_a_noop_in_standalone_mode(self):
        plan = plan_payment([item(1, 1000, paid=1000)], "1000", mode=STANDALONE)
        assert plan.noop
        assert plan.allocations == []
        assert plan.message == "Receipt is already fully paid."

    def test_settled_receipt_rejects_collection_payment(self):
        with pytest.raises(ExceedsBalance):
            plan_payment([item(1, 1000, paid=1000)], "10", mode=COLLECTION)

    def test_does_not_mutate_inputs(self, scenario_a):
        plan_payment(scenario_a, "3000", mode=STANDALONE)
        assert summarize_receipt(scenario_a).balance_due == Decimal("3000.00")

    def test_as_api_lists_updated_items(self, scenario_a):
        data = plan_payment(scenario_a, "3000").as_api()
        assert [u["id"] for u in data["updatedItems"]] == [1, 2]
        assert data["balanceDue"] == 0.0

    def test_unknown_mode(self, scenario_a):
        with pytest.raises(ValueError):
            plan_payment(scenario_a, "3000", mode="layaway")


class TestPlanCollection:
    def test_blocked_until_every_item_ready(self):
        with pytest.raises(NotAllItemsReady) as exc:
            plan_collection([item(1, 1000, paid=1000), item(2, 1000, paid=1000, status="processing")])
        assert exc.value.details["notReady"] == [2]

    def test_already_collected(self):
        with pytest.raises(AlreadyCollected):
            plan_collection([item(1, 1000, paid=1000, status="collected")])

    def test_outstanding_balance_without_payment(self, scenario_a):
        with pytest.raises(BalanceOutstanding):
            plan_collection(scenario_a)

    def test_zero_amount_counts_as_no_payment(self, scenario_a):
        with pytest.raises(BalanceOutstanding):
            plan_collection(scenario_a, 0)

    def test_settled_receipt_collectible_without_payment(self):
        plan = plan_collection([item(1, 1000, paid=1000)])
        assert plan.collectible
        assert plan.payment is None

    def test_partial_payment_keeps_receipt_open(self, scenario_a):
        plan = plan_collection(scenario_a, "1500")
        assert not plan.collectible
        assert plan.totals.balance_due == Decimal("1500.00")

    def test_full_payment_makes_it_collectible(self, scenario_a):
        plan = plan_collection(scenario_a, "3000")
        assert plan.collectible

    def test_non_numeric_amount(self, scenario_a):
        with pytest.raises(InvalidAmount):
            plan_collection(scenario_a, "lots")


class TestStatusRules:
    @pytest.mark.parametrize("statuses, expected", [
        (["ready", "ready"], "ready"),
        (["collected", "collected"], "collected"),
        (["pending", "ready"], "pending"),
        (["processing", "ready"], "processing"),
        (["processing", "processing"], "processing"),
    ])
    def test_receipt_status(self, statuses, expected):
        items = [item(i, 10, status=s) for i, s in enumerate(statuses)]
        assert receipt_status(items) == expected

    @pytest.mark.parametrize("current, requested", [
        ("pending", "processing"), ("pending", "ready"), ("processing", "ready"), ("ready", "collected"),
    ])
    def test_forward_transitions(self, current, requested):
        check_transition(current, requested)

    @pytest.mark.parametrize("current, requested", [
        ("ready", "processing"), ("collected", "ready"), ("processing", "processing"),
    ])
    def test_backward_transitions_rejected(self, current, requested):
        with pytest.raises(InvalidStatusTransition):
            check_transition(current, requested)

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            check_transition("pending", "lost")

    def test_overdue_only_when_ready_and_past_due(self):
        now = datetime(2026, 10, 18, 12, 0)
        past = now - timedelta(hours=1)
        assert is_overdue(item(1, 10, estimated_collection_date=past), now)
        assert not is_overdue(item(1, 10, status="processing", estimated_collection_date=past), now)
        assert not is_overdue(item(1, 10, estimated_collection_date=now + timedelta(hours=1)), now)
        assert not is_overdue(item(1, 10), now)

    @pytest.mark.parametrize("paid, expected", [
        (0, "not_paid"), (500, "advance"), ("999.99", "paid_full"), (1000, "paid_full"),
    ])
    def test_payment_status_for(self, paid, expected):
        assert payment_status_for(Decimal("1000"), Decimal(str(paid))) == expected
