"""
billing_logic.py
----------------
Mesin billing tunggal. Semua konsumen (API, laporan tahunan, cron akumulasi
tunggakan) memakai fungsi di sini, tidak menghitung status sendiri-sendiri:

- evaluate_month     : status satu pelanggan di satu bulan
- evaluate_year      : 12 status bulan untuk satu tahun
- projected_deposit  : sisa uang titip yang tersedia di bulan tertentu
- current_bill       : total kewajiban bayar saat ini

Fungsi-fungsi ini murni: tidak baca jam, tidak akses database.
"Bulan sekarang" (anchor) selalu dikirim oleh pemanggil.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ledger import (
    Customer,
    Payment,
    Suspension,
    from_month_key,
    is_suspended,
    month_key,
    payment_in_month,
)

# Bulan anchor = (tahun, bulan zero-based) di mana customer.deposit adalah saldo nyata
Anchor = Tuple[int, int]

INACTIVE = "inactive"
SUSPENDED = "suspended"
PAID = "paid"
UNPAID = "unpaid"

VIA_ACTUAL_PAYMENT = "actual_payment"
VIA_DEPOSIT = "deposit"

STATUS_LABELS = {
    INACTIVE: "Tidak Berlangganan",
    SUSPENDED: "Ditangguhkan",
    UNPAID: "Belum Bayar",
}


@dataclass(frozen=True)
class MonthStatus:
    """
    Hasil evaluasi satu bulan.

    kind   : inactive | suspended | paid | unpaid
    via    : actual_payment | deposit (hanya untuk kind == paid)
    amount : nominal pembayaran aktual, 0 kalau ditutup uang titip
    payment: record pembayaran aktual yang dipakai (kalau ada)
    """

    kind: str
    via: Optional[str] = None
    amount: int = 0
    payment: Optional[Payment] = None

    @classmethod
    def inactive(cls) -> "MonthStatus":
        return cls(INACTIVE)

    @classmethod
    def suspended(cls) -> "MonthStatus":
        return cls(SUSPENDED)

    @classmethod
    def unpaid(cls) -> "MonthStatus":
        return cls(UNPAID)

    @classmethod
    def paid_by_payment(cls, payment: Payment) -> "MonthStatus":
        return cls(PAID, VIA_ACTUAL_PAYMENT, payment.amount, payment)

    @classmethod
    def paid_by_deposit(cls) -> "MonthStatus":
        return cls(PAID, VIA_DEPOSIT, 0)

    @property
    def is_paid(self) -> bool:
        return self.kind == PAID

    @property
    def label(self) -> str:
        """Label status untuk laporan / export."""
        if self.kind == PAID:
            if self.via == VIA_DEPOSIT:
                return "Sudah Bayar (Uang Titip)"
            return "Sudah Bayar"
        return STATUS_LABELS[self.kind]

    def to_dict(self) -> dict:
        return {
            "status": self.kind,
            "via": self.via,
            "amount": self.amount,
            "label": self.label,
            "payment_id": self.payment.payment_id if self.payment else None,
        }


# -----------------------------------------------------------------------------
# Uang titip
# -----------------------------------------------------------------------------

def projected_deposit(
    customer: Customer,
    suspensions: Sequence[Suspension],
    payments: Sequence[Payment],
    year: int,
    month: int,
    *,
    anchor: Anchor,
) -> Optional[int]:
    """
    Sisa uang titip yang tersedia untuk (year, month).

    - bulan sebelum anchor -> None (tidak ada snapshot saldo untuk masa lalu)
    - bulan anchor         -> customer.deposit
      (kalau bulan anchor sudah diakumulasi, saldo ini sudah dipotong tarif anchor)
    - bulan setelah anchor -> replay dari anchor: setiap bulan di antara anchor
      dan target yang tidak ditangguhkan dan tidak punya pembayaran aktual
      memotong saldo sebesar monthly_fee. Replay berhenti begitu saldo kurang
      dari monthly_fee.

    Contoh (tarif 100.000, uang titip 250.000, tanpa pembayaran):
      anchor -> 250.000, +1 -> 250.000, +2 -> 150.000, +3 -> 50.000
    """
    target = month_key(year, month)
    start = month_key(*anchor)

    if target < start:
        return None

    balance = customer.deposit or 0
    fee = customer.monthly_fee

    for key in range(start + 1, target):
        if balance < fee:
            break
        y, m = from_month_key(key)
        if is_suspended(suspensions, y, m):
            continue
        if payment_in_month(payments, y, m) is not None:
            continue
        balance -= fee

    return balance


# -----------------------------------------------------------------------------
# Status bulanan
# -----------------------------------------------------------------------------

def evaluate_month(
    customer: Customer,
    suspensions: Sequence[Suspension],
    payments: Sequence[Payment],
    year: int,
    month: int,
    *,
    anchor: Anchor,
) -> MonthStatus:
    """
    Status pelanggan di (year, month), urutan pengecekan:

    1. pelanggan inactive        -> Inactive
    2. ada penangguhan bulan itu -> Suspended
    3. ada pembayaran aktual     -> Paid(actual_payment, nominal)
    4. bulan sudah diakumulasi   -> Paid(deposit, 0) kalau tidak menambah
                                    tunggakan, selain itu Unpaid
    5. uang titip cukup          -> Paid(deposit, 0)
    6. selain itu                -> Unpaid

    `suspensions` dan `payments` harus milik pelanggan ini saja.
    """
    if not customer.is_active:
        return MonthStatus.inactive()

    if is_suspended(suspensions, year, month):
        return MonthStatus.suspended()

    payment = payment_in_month(payments, year, month)
    if payment is not None:
        return MonthStatus.paid_by_payment(payment)

    if is_accumulated(customer, year, month) and month_key(year, month) <= month_key(*anchor):
        # uang titip / tunggakan di database sudah mencerminkan bulan ini
        if customer.last_accumulated_debt == 0:
            return MonthStatus.paid_by_deposit()
        return MonthStatus.unpaid()

    balance = projected_deposit(
        customer, suspensions, payments, year, month, anchor=anchor
    )
    if balance is not None and balance >= customer.monthly_fee:
        return MonthStatus.paid_by_deposit()

    return MonthStatus.unpaid()


def evaluate_year(
    customer: Customer,
    suspensions: Sequence[Suspension],
    payments: Sequence[Payment],
    year: int,
    *,
    anchor: Anchor,
) -> List[MonthStatus]:
    """12 status (Januari..Desember) untuk satu tahun."""
    return [
        evaluate_month(customer, suspensions, payments, year, month, anchor=anchor)
        for month in range(12)
    ]


# -----------------------------------------------------------------------------
# Tagihan
# -----------------------------------------------------------------------------

def is_accumulated(customer: Customer, year: int, month: int) -> bool:
    """True kalau job akumulasi tunggakan sudah memproses (year, month)."""
    return customer.last_accumulated_period == month_key(year, month)


def fee_for_month(customer: Customer, suspended: bool) -> int:
    """Tarif bulanan yang berlaku; 0 kalau bulan itu ditangguhkan."""
    return 0 if suspended else customer.monthly_fee


def fee_due(customer: Customer, suspended: bool, year: int, month: int) -> int:
    """
    Tarif yang masih harus ditagih untuk (year, month): 0 kalau ditangguhkan
    atau kalau tarifnya sudah dipindah ke tunggakan / dipotong dari uang titip
    oleh job akumulasi.
    """
    if is_accumulated(customer, year, month):
        return 0
    return fee_for_month(customer, suspended)


def current_bill(
    customer: Customer,
    is_suspended_now: bool,
    *,
    anchor: Optional[Anchor] = None,
) -> int:
    """
    Total kewajiban bayar saat ini:
      max(0, tarif (0 kalau ditangguhkan / sudah diakumulasi) + tunggakan - uang titip)

    Pelanggan inactive tidak punya tagihan.
    """
    if not customer.is_active:
        return 0
    if anchor is None:
        fee = fee_for_month(customer, is_suspended_now)
    else:
        fee = fee_due(customer, is_suspended_now, *anchor)
    return max(0, fee + customer.debt - customer.deposit)
