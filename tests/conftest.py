"""Pytest configuration and fixtures."""

from __future__ import annotations

import dataclasses
import itertools
from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pytest

from errors import PersistenceError
from ledger import ACTIVE, Customer, Payment, Suspension

# Januari 2025 (bulan zero-based)
ANCHOR = (2025, 0)


class InMemoryRepository:
    """Repository palsu di memori dengan kontrak yang sama dengan PostgresRepository."""

    def __init__(self) -> None:
        self.customers: Dict[str, Customer] = {}
        self.payments: Dict[str, Payment] = {}
        self.suspensions: Dict[str, Suspension] = {}
        self._payment_seq = itertools.count(1)
        self._suspension_seq = itertools.count(1)
        self.schema_created = False

    # Schema
    def create_schema(self) -> None:
        self.schema_created = True

    # Customers
    def get_customer(self, customer_id: str) -> Optional[Customer]:
        customer = self.customers.get(customer_id)
        return dataclasses.replace(customer) if customer else None

    def list_customers(self) -> List[Customer]:
        return [dataclasses.replace(c) for c in self.customers.values()]

    def list_active_customers(self) -> List[Customer]:
        return [c for c in self.list_customers() if c.status == ACTIVE]

    def create_customer(self, customer: Customer) -> Customer:
        stored = dataclasses.replace(
            customer, created_at=customer.created_at or datetime(2024, 6, 1, 8, 0)
        )
        self.customers[stored.customer_id] = stored
        return dataclasses.replace(stored)

    def update_customer(self, customer_id: str, fields: Dict[str, Any]) -> Optional[Customer]:
        if customer_id not in self.customers:
            return None
        self.customers[customer_id] = dataclasses.replace(self.customers[customer_id], **fields)
        return self.get_customer(customer_id)

    def update_customer_balances(
        self,
        customer_id: str,
        debt: int,
        deposit: int,
        last_accumulated_period: Optional[int] = None,
        last_accumulated_debt: int = 0,
    ) -> bool:
        if customer_id not in self.customers:
            return False
        changes: Dict[str, Any] = {"debt": debt, "deposit": deposit}
        if last_accumulated_period is not None:
            changes["last_accumulated_period"] = last_accumulated_period
            changes["last_accumulated_debt"] = last_accumulated_debt
        self.customers[customer_id] = dataclasses.replace(self.customers[customer_id], **changes)
        return True

    def delete_customer(self, customer_id: str) -> bool:
        return self.customers.pop(customer_id, None) is not None

    def reset_all_balances(self) -> int:
        for cid, customer in self.customers.items():
            self.customers[cid] = dataclasses.replace(customer, debt=0, deposit=0)
        return len(self.customers)

    # Payments
    def list_payments(self) -> List[Payment]:
        return sorted(self.payments.values(), key=lambda p: p.date, reverse=True)

    def list_payments_for_customer(self, customer_id: str) -> List[Payment]:
        return [p for p in self.list_payments() if p.customer_id == customer_id]

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        return self.payments.get(payment_id)

    def create_payment(self, customer_id: str, amount: int, paid_on: date) -> Payment:
        payment = Payment(f"PAY{next(self._payment_seq)}", customer_id, amount, paid_on)
        self.payments[payment.payment_id] = payment
        return payment

    def update_payment(
        self,
        payment_id: str,
        amount: Optional[int] = None,
        paid_on: Optional[date] = None,
    ) -> Optional[Payment]:
        payment = self.payments.get(payment_id)
        if payment is None:
            return None
        updated = dataclasses.replace(
            payment,
            amount=payment.amount if amount is None else amount,
            date=payment.date if paid_on is None else paid_on,
        )
        self.payments[payment_id] = updated
        return updated

    def delete_payment(self, payment_id: str) -> bool:
        return self.payments.pop(payment_id, None) is not None

    def delete_all_payments(self) -> int:
        count = len(self.payments)
        self.payments.clear()
        return count

    # Suspensions
    def list_suspensions(self) -> List[Suspension]:
        return sorted(self.suspensions.values(), key=lambda s: s.start_key, reverse=True)

    def list_suspensions_for_customer(self, customer_id: str) -> List[Suspension]:
        return [s for s in self.list_suspensions() if s.customer_id == customer_id]

    def create_suspension(
        self,
        customer_id: str,
        start_month: int,
        start_year: int,
        end_month: int,
        end_year: int,
        reason: Optional[str] = None,
    ) -> Suspension:
        suspension = Suspension(
            str(next(self._suspension_seq)),
            customer_id,
            start_month,
            start_year,
            end_month,
            end_year,
            reason,
        )
        self.suspensions[suspension.id] = suspension
        return suspension

    def delete_suspension(self, customer_id: str, suspension_id: str) -> bool:
        suspension = self.suspensions.get(str(suspension_id))
        if suspension is None or suspension.customer_id != customer_id:
            return False
        del self.suspensions[suspension.id]
        return True


class FlakyRepository(InMemoryRepository):
    """Gagal menulis saldo untuk customer_id tertentu."""

    def __init__(self, failing_ids) -> None:
        super().__init__()
        self.failing_ids = set(failing_ids)

    def update_customer_balances(self, customer_id, debt, deposit, **marker):
        if customer_id in self.failing_ids:
            raise PersistenceError(f"koneksi putus saat update {customer_id}")
        return super().update_customer_balances(customer_id, debt, deposit, **marker)


def make_customer(customer_id: str = "CUST000001", **overrides) -> Customer:
    data = {
        "customer_id": customer_id,
        "name": "Budi",
        "monthly_fee": 100000,
        "bandwidth": 4,
        "status": ACTIVE,
        "debt": 0,
        "deposit": 0,
        "created_at": datetime(2024, 6, 1, 8, 0),
    }
    data.update(overrides)
    return Customer(**data)


@pytest.fixture
def anchor():
    """Bulan sekarang yang dipakai di test: Januari 2025."""
    return ANCHOR


@pytest.fixture
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def customer(repo) -> Customer:
    """Pelanggan aktif tarif 100.000 tanpa tunggakan / uang titip."""
    return repo.create_customer(make_customer())


@pytest.fixture
def app(repo, monkeypatch):
    """Flask app dengan repository di memori dan jam dikunci ke Januari 2025."""
    import clock
    from app import create_app

    monkeypatch.setattr(clock, "current_period", lambda tz_name=None: ANCHOR)
    monkeypatch.setattr(clock, "today", lambda tz_name=None: date(2025, 1, 15))

    flask_app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret",
            "REPOSITORY": repo,
            "LOGIN_REQUIRED": False,
            "ADMIN_USERNAME": "admin",
            "ADMIN_PASSWORD": "rahasia",
            "LOG_LEVEL": "WARNING",
        }
    )
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
