"""Tests for the billing engine: month status, deposit projection and current bill."""

from datetime import date

import pytest

from billing_logic import (
    INACTIVE,
    PAID,
    SUSPENDED,
    UNPAID,
    VIA_ACTUAL_PAYMENT,
    VIA_DEPOSIT,
    MonthStatus,
    current_bill,
    fee_due,
    evaluate_month,
    evaluate_year,
    projected_deposit,
)
from conftest import ANCHOR, make_customer
from ledger import INACTIVE as CUSTOMER_INACTIVE
from ledger import Payment, Suspension, month_key


class TestEvaluateMonth:
    def test_inactive_customer_every_month(self) -> None:
        cust = make_customer(status=CUSTOMER_INACTIVE, deposit=1000000)
        payments = [Payment("P1", cust.customer_id, 100000, date(2025, 3, 1))]
        sus = [Suspension("1", cust.customer_id, 5, 2025, 6, 2025)]
        for month in range(12):
            status = evaluate_month(cust, sus, payments, 2025, month, anchor=ANCHOR)
            assert status.kind == INACTIVE

    def test_suspension_wins_over_payment(self) -> None:
        cust = make_customer()
        sus = [Suspension("1", cust.customer_id, 1, 2025, 3, 2025)]
        payments = [Payment("P1", cust.customer_id, 100000, date(2025, 3, 10))]
        status = evaluate_month(cust, sus, payments, 2025, 2, anchor=ANCHOR)
        assert status.kind == SUSPENDED

    def test_actual_payment(self) -> None:
        cust = make_customer()
        payment = Payment("P1", cust.customer_id, 120000, date(2025, 1, 10))
        status = evaluate_month(cust, [], [payment], 2025, 0, anchor=ANCHOR)
        assert status.kind == PAID
        assert status.via == VIA_ACTUAL_PAYMENT
        assert status.amount == 120000
        assert status.payment is payment

    def test_past_month_without_payment_is_unpaid(self) -> None:
        cust = make_customer(deposit=500000)
        status = evaluate_month(cust, [], [], 2024, 11, anchor=ANCHOR)
        assert status.kind == UNPAID

    def test_anchor_month_paid_by_deposit(self) -> None:
        cust = make_customer(deposit=100000)
        status = evaluate_month(cust, [], [], 2025, 0, anchor=ANCHOR)
        assert status.kind == PAID
        assert status.via == VIA_DEPOSIT
        assert status.amount == 0

    def test_deposit_below_fee_is_unpaid(self) -> None:
        cust = make_customer(deposit=99999)
        assert evaluate_month(cust, [], [], 2025, 0, anchor=ANCHOR).kind == UNPAID

    def test_deposit_covers_three_months(self) -> None:
        # uang titip 250.000, tarif 100.000: M, M+1, M+2 lunas; M+3 belum
        cust = make_customer(deposit=250000)
        kinds = [
            evaluate_month(cust, [], [], 2025, m, anchor=ANCHOR).kind for m in range(4)
        ]
        assert kinds == [PAID, PAID, PAID, UNPAID]

    def test_future_month_after_year_boundary(self) -> None:
        cust = make_customer(deposit=200000)
        anchor = (2024, 11)
        assert evaluate_month(cust, [], [], 2025, 0, anchor=anchor).via == VIA_DEPOSIT
        assert evaluate_month(cust, [], [], 2025, 1, anchor=anchor).via == VIA_DEPOSIT
        assert evaluate_month(cust, [], [], 2025, 2, anchor=anchor).kind == UNPAID


class TestProjectedDeposit:
    def test_before_anchor_is_unknown(self) -> None:
        cust = make_customer(deposit=300000)
        assert projected_deposit(cust, [], [], 2024, 11, anchor=ANCHOR) is None

    def test_anchor_is_stored_deposit(self) -> None:
        cust = make_customer(deposit=300000)
        assert projected_deposit(cust, [], [], 2025, 0, anchor=ANCHOR) == 300000

    def test_replay_sequence(self) -> None:
        cust = make_customer(deposit=250000)
        balances = [projected_deposit(cust, [], [], 2025, m, anchor=ANCHOR) for m in range(4)]
        assert balances == [250000, 250000, 150000, 50000]

    def test_suspended_month_does_not_consume(self) -> None:
        cust = make_customer(deposit=200000)
        sus = [Suspension("1", cust.customer_id, 1, 2025, 1, 2025)]
        assert projected_deposit(cust, sus, [], 2025, 3, anchor=ANCHOR) == 100000
        assert evaluate_month(cust, sus, [], 2025, 3, anchor=ANCHOR).via == VIA_DEPOSIT

    def test_paid_month_does_not_consume(self) -> None:
        cust = make_customer(deposit=200000)
        payments = [Payment("P1", cust.customer_id, 100000, date(2025, 2, 1))]
        assert projected_deposit(cust, [], payments, 2025, 3, anchor=ANCHOR) == 100000

    def test_replay_stops_when_balance_below_fee(self) -> None:
        cust = make_customer(deposit=50000)
        assert projected_deposit(cust, [], [], 2025, 11, anchor=ANCHOR) == 50000


class TestEvaluateYear:
    def test_matches_twelve_month_calls(self) -> None:
        cust = make_customer(deposit=250000)
        sus = [Suspension("1", cust.customer_id, 5, 2025, 6, 2025)]
        payments = [
            Payment("P1", cust.customer_id, 100000, date(2025, 4, 2)),
            Payment("P2", cust.customer_id, 100000, date(2025, 9, 9)),
        ]
        year = evaluate_year(cust, sus, payments, 2025, anchor=ANCHOR)
        assert len(year) == 12
        assert year == [
            evaluate_month(cust, sus, payments, 2025, m, anchor=ANCHOR) for m in range(12)
        ]


class TestMonthStatus:
    @pytest.mark.parametrize(
        "status, label",
        [
            (MonthStatus.inactive(), "Tidak Berlangganan"),
            (MonthStatus.suspended(), "Ditangguhkan"),
            (MonthStatus.unpaid(), "Belum Bayar"),
            (MonthStatus.paid_by_deposit(), "Sudah Bayar (Uang Titip)"),
        ],
    )
    def test_labels(self, status, label) -> None:
        assert status.label == label

    def test_to_dict_with_payment(self) -> None:
        payment = Payment("P9", "C1", 100000, date(2025, 1, 2))
        data = MonthStatus.paid_by_payment(payment).to_dict()
        assert data == {
            "status": PAID,
            "via": VIA_ACTUAL_PAYMENT,
            "amount": 100000,
            "label": "Sudah Bayar",
            "payment_id": "P9",
        }


class TestCurrentBill:
    def test_fee_plus_debt_minus_deposit(self) -> None:
        assert current_bill(make_customer(debt=50000, deposit=20000), False) == 130000

    def test_suspended_excludes_fee(self) -> None:
        assert current_bill(make_customer(debt=50000), True) == 50000

    def test_floored_at_zero(self) -> None:
        assert current_bill(make_customer(deposit=300000), False) == 0

    def test_inactive_has_no_bill(self) -> None:
        assert current_bill(make_customer(status=CUSTOMER_INACTIVE, debt=50000), False) == 0

    def test_accumulated_month_uses_stored_balances(self) -> None:
        cust = make_customer(deposit=0, debt=100000)
        assert current_bill(cust, False) == 200000
        cust.last_accumulated_period = month_key(*ANCHOR)
        cust.last_accumulated_debt = 100000
        assert current_bill(cust, False, anchor=ANCHOR) == 100000


class TestAccumulationMarker:
    def test_past_month_covered_by_deposit(self) -> None:
        cust = make_customer(
            deposit=50000,
            last_accumulated_period=month_key(2025, 0),
            last_accumulated_debt=0,
        )
        status = evaluate_month(cust, [], [], 2025, 0, anchor=(2025, 1))
        assert status.kind == PAID
        assert status.via == VIA_DEPOSIT

    def test_past_month_charged_as_debt(self) -> None:
        cust = make_customer(
            debt=100000,
            last_accumulated_period=month_key(2025, 0),
            last_accumulated_debt=100000,
        )
        assert evaluate_month(cust, [], [], 2025, 0, anchor=(2025, 1)).kind == UNPAID

    def test_marker_after_anchor_ignored(self) -> None:
        cust = make_customer(
            deposit=300000,
            last_accumulated_period=month_key(2025, 2),
            last_accumulated_debt=100000,
        )
        assert evaluate_month(cust, [], [], 2025, 2, anchor=ANCHOR).via == VIA_DEPOSIT

    def test_actual_payment_wins_over_marker(self) -> None:
        cust = make_customer(
            last_accumulated_period=month_key(*ANCHOR),
            last_accumulated_debt=100000,
        )
        payments = [Payment("P1", cust.customer_id, 100000, date(2025, 1, 28))]
        assert evaluate_month(cust, [], payments, 2025, 0, anchor=ANCHOR).kind == PAID

    def test_fee_due(self) -> None:
        cust = make_customer(last_accumulated_period=month_key(2025, 0))
        assert fee_due(cust, False, 2025, 0) == 0
        assert fee_due(cust, False, 2025, 1) == 100000
        assert fee_due(cust, True, 2025, 1) == 0
