"""Tests for payment processing (settle-or-carry) and payment CRUD."""

from datetime import date

import pytest

import payment_processor
from conftest import make_customer
from errors import NotFoundError, ValidationError
from payment_processor import process_payment, settle


class TestSettle:
    def test_overpayment_becomes_deposit(self) -> None:
        assert settle(100000, 0, 150000) == (0, 50000)

    def test_underpayment_becomes_debt(self) -> None:
        assert settle(150000, 0, 100000) == (50000, 0)

    def test_existing_deposit_counts(self) -> None:
        assert settle(100000, 30000, 70000) == (0, 0)

    @pytest.mark.parametrize("total, deposit, amount", [(100000, 0, 1), (0, 5000, 10), (250000, 70000, 90000)])
    def test_never_both_positive(self, total, deposit, amount) -> None:
        debt, new_deposit = settle(total, deposit, amount)
        assert debt == 0 or new_deposit == 0


class TestProcessPayment:
    def test_overpayment(self, repo) -> None:
        repo.create_customer(make_customer("C1"))
        result = process_payment(repo, "C1", 150000, date(2025, 1, 10))

        assert result.total_bill == 100000
        assert (result.new_debt, result.new_deposit) == (0, 50000)
        stored = repo.get_customer("C1")
        assert (stored.debt, stored.deposit) == (0, 50000)

    def test_partial_payment_carries_debt(self, repo) -> None:
        repo.create_customer(make_customer("C1", debt=50000))
        result = process_payment(repo, "C1", 100000, date(2025, 1, 10))

        assert result.total_bill == 150000
        stored = repo.get_customer("C1")
        assert (stored.debt, stored.deposit) == (50000, 0)

    def test_payment_recorded(self, repo) -> None:
        repo.create_customer(make_customer("C1"))
        result = process_payment(repo, "C1", 100000, date(2025, 1, 10))

        payments = repo.list_payments_for_customer("C1")
        assert [p.payment_id for p in payments] == [result.payment.payment_id]
        assert payments[0].amount == 100000
        assert payments[0].date == date(2025, 1, 10)

    def test_fee_excluded_when_suspended_in_payment_month(self, repo) -> None:
        repo.create_customer(make_customer("C1", debt=40000))
        repo.create_suspension("C1", 0, 2025, 1, 2025)

        result = process_payment(repo, "C1", 100000, date(2025, 2, 5))

        assert result.total_bill == 40000
        stored = repo.get_customer("C1")
        assert (stored.debt, stored.deposit) == (0, 60000)

    def test_unknown_customer(self, repo) -> None:
        with pytest.raises(NotFoundError):
            process_payment(repo, "NOPE", 100000, date(2025, 1, 10))
        assert repo.list_payments() == []

    @pytest.mark.parametrize("amount", [0, -5000, True, "100000", 1.5])
    def test_invalid_amount_writes_nothing(self, repo, amount) -> None:
        repo.create_customer(make_customer("C1"))
        with pytest.raises(ValidationError):
            process_payment(repo, "C1", amount, date(2025, 1, 10))
        assert repo.list_payments() == []
        assert repo.get_customer("C1").debt == 0

    def test_to_dict(self, repo) -> None:
        repo.create_customer(make_customer("C1"))
        data = process_payment(repo, "C1", 150000, date(2025, 1, 10)).to_dict()
        assert data["success"] is True
        assert data["new_deposit"] == 50000
        assert data["paid_amount"] == 150000


class TestPaymentCrud:
    def test_update_does_not_touch_balances(self, repo) -> None:
        repo.create_customer(make_customer("C1"))
        result = process_payment(repo, "C1", 150000, date(2025, 1, 10))

        updated = payment_processor.update_payment(
            repo, result.payment.payment_id, amount=90000, paid_on=date(2025, 1, 12)
        )
        assert updated.amount == 90000
        assert updated.date == date(2025, 1, 12)
        assert repo.get_customer("C1").deposit == 50000

    def test_update_rejects_bad_amount(self, repo) -> None:
        repo.create_customer(make_customer("C1"))
        result = process_payment(repo, "C1", 100000, date(2025, 1, 10))
        with pytest.raises(ValidationError):
            payment_processor.update_payment(repo, result.payment.payment_id, amount=0)

    def test_missing_payment(self, repo) -> None:
        with pytest.raises(NotFoundError):
            payment_processor.get_payment(repo, "PAY404")
        with pytest.raises(NotFoundError):
            payment_processor.update_payment(repo, "PAY404", amount=1000)
        with pytest.raises(NotFoundError):
            payment_processor.delete_payment(repo, "PAY404")

    def test_delete(self, repo) -> None:
        repo.create_customer(make_customer("C1"))
        result = process_payment(repo, "C1", 100000, date(2025, 1, 10))
        payment_processor.delete_payment(repo, result.payment.payment_id)
        assert repo.get_payment(result.payment.payment_id) is None
