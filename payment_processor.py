"""
payment_processor.py
--------------------
Proses pembayaran pelanggan terhadap total tagihan:

  total_tagihan = tarif bulan pembayaran + tunggakan

Tarif tidak dihitung kalau bulan pembayaran ditangguhkan atau sudah diproses
job akumulasi (tarifnya sudah ada di tunggakan / sudah dipotong uang titip).

- Kalau nominal + uang titip >= total_tagihan:
    uang titip baru = nominal + uang titip - total_tagihan, tunggakan = 0
- Kalau kurang:
    tunggakan baru = total_tagihan - (nominal + uang titip), uang titip = 0

Setelah satu pembayaran, tunggakan dan uang titip tidak pernah sama-sama > 0.

Urutan tulis: record pembayaran dulu, lalu saldo pelanggan. Dua penulisan
ini TIDAK atomik; kalau penulisan saldo gagal, PersistenceError diteruskan
ke pemanggil dan record pembayaran sudah tersimpan (perlu koreksi manual).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from billing_logic import fee_due
from errors import NotFoundError, ValidationError
from ledger import Payment, is_suspended, month_of

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
    payment: Payment
    paid_amount: int
    total_bill: int
    new_debt: int
    new_deposit: int

    def to_dict(self) -> dict:
        return {
            "success": True,
            "payment_id": self.payment.payment_id,
            "paid_amount": self.paid_amount,
            "total_bill": self.total_bill,
            "new_debt": self.new_debt,
            "new_deposit": self.new_deposit,
        }


def validate_amount(amount) -> int:
    """Nominal harus integer positif (bool ditolak)."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("Nominal pembayaran harus berupa angka bulat.")
    if amount <= 0:
        raise ValidationError("Nominal pembayaran harus lebih dari 0.")
    return amount


def settle(total_bill: int, deposit: int, amount: int) -> Tuple[int, int]:
    """
    Lunasi-atau-bawa: kembalikan (tunggakan_baru, uang_titip_baru).
    """
    available = amount + deposit
    if available >= total_bill:
        return 0, available - total_bill
    return total_bill - available, 0


def process_payment(
    repo,
    customer_id: str,
    amount: int,
    paid_on: date,
) -> PaymentResult:
    """
    Catat pembayaran dan hitung ulang tunggakan / uang titip pelanggan.

    Raise:
    - ValidationError kalau nominal tidak valid
    - NotFoundError kalau customer tidak ditemukan
    - PersistenceError dari repository (tanpa kompensasi)
    """
    amount = validate_amount(amount)

    customer = repo.get_customer(customer_id)
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} tidak ditemukan.")

    year, month = month_of(paid_on)
    suspended = is_suspended(repo.list_suspensions_for_customer(customer_id), year, month)

    total_bill = fee_due(customer, suspended, year, month) + customer.debt
    new_debt, new_deposit = settle(total_bill, customer.deposit, amount)

    payment = repo.create_payment(customer_id, amount, paid_on)
    if not repo.update_customer_balances(customer_id, new_debt, new_deposit):
        raise NotFoundError(
            f"Customer {customer_id} hilang saat update saldo; "
            f"pembayaran {payment.payment_id} sudah tercatat."
        )

    logger.info(
        "Pembayaran %s customer=%s nominal=%s tagihan=%s -> tunggakan=%s uang_titip=%s",
        payment.payment_id,
        customer_id,
        amount,
        total_bill,
        new_debt,
        new_deposit,
    )

    return PaymentResult(
        payment=payment,
        paid_amount=amount,
        total_bill=total_bill,
        new_debt=new_debt,
        new_deposit=new_deposit,
    )


# ======================================================================
# CRUD pembayaran (tanpa hitung ulang saldo)
# ======================================================================

def get_payment(repo, payment_id: str) -> Payment:
    payment = repo.get_payment(payment_id)
    if payment is None:
        raise NotFoundError(f"Pembayaran {payment_id} tidak ditemukan.")
    return payment


def update_payment(
    repo,
    payment_id: str,
    amount: Optional[int] = None,
    paid_on: Optional[date] = None,
) -> Payment:
    """
    Edit nominal / tanggal pembayaran. Saldo pelanggan tidak dihitung ulang.
    """
    if amount is not None:
        validate_amount(amount)

    payment = repo.update_payment(payment_id, amount=amount, paid_on=paid_on)
    if payment is None:
        raise NotFoundError(f"Pembayaran {payment_id} tidak ditemukan.")
    return payment


def delete_payment(repo, payment_id: str) -> None:
    if not repo.delete_payment(payment_id):
        raise NotFoundError(f"Pembayaran {payment_id} tidak ditemukan.")
    logger.info("Pembayaran %s dihapus.", payment_id)
