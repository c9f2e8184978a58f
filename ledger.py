"""
ledger.py
---------
Primitif buku besar (tanpa I/O):

- month_key / from_month_key : aritmetika (tahun, bulan) dengan bulan 0..11
- month_of                   : ambil (tahun, bulan) dari date/datetime
- suspension_covers / overlaps / is_suspended : uji periode penangguhan
- payment_in_month           : cari pembayaran aktual di bulan tertentu

Catatan: bulan SELALU zero-based (Januari = 0, Desember = 11),
sama seperti data suspension yang tersimpan.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Tuple, Union

ACTIVE = "active"
INACTIVE = "inactive"
CUSTOMER_STATUSES = (ACTIVE, INACTIVE)


# -----------------------------------------------------------------------------
# Model data
# -----------------------------------------------------------------------------

def _serialize(data: dict) -> dict:
    """Tanggal -> string ISO supaya siap di-jsonify."""
    return {
        k: v.isoformat() if isinstance(v, (date, datetime)) else v
        for k, v in data.items()
    }


@dataclass
class Customer:
    customer_id: str
    name: str
    monthly_fee: int
    bandwidth: int = 4
    status: str = ACTIVE
    debt: int = 0
    deposit: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_accumulated_period: Optional[int] = None
    last_accumulated_debt: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE

    def to_dict(self) -> dict:
        return _serialize(asdict(self))


@dataclass
class Payment:
    payment_id: str
    customer_id: str
    amount: int
    date: date

    def to_dict(self) -> dict:
        return _serialize(asdict(self))


@dataclass
class Suspension:
    id: str
    customer_id: str
    start_month: int
    start_year: int
    end_month: int
    end_year: int
    reason: Optional[str] = None
    created_at: Optional[datetime] = field(default=None, compare=False)
    updated_at: Optional[datetime] = field(default=None, compare=False)

    @property
    def start_key(self) -> int:
        return month_key(self.start_year, self.start_month)

    @property
    def end_key(self) -> int:
        return month_key(self.end_year, self.end_month)

    def to_dict(self) -> dict:
        return _serialize(asdict(self))


# -----------------------------------------------------------------------------
# Helper bulan
# -----------------------------------------------------------------------------

def month_key(year: int, month: int) -> int:
    """
    Encode (tahun, bulan 0..11) jadi satu integer yang urutannya total.

    Contoh:
      month_key(2024, 0)  -> 24288
      month_key(2023, 11) -> 24287
    """
    return year * 12 + month


def from_month_key(key: int) -> Tuple[int, int]:
    """Kebalikan month_key: kembalikan (tahun, bulan)."""
    return divmod(key, 12)


def month_of(value: Union[date, datetime]) -> Tuple[int, int]:
    """(tahun, bulan zero-based) dari sebuah tanggal. Jam diabaikan."""
    return value.year, value.month - 1


# -----------------------------------------------------------------------------
# Penangguhan
# -----------------------------------------------------------------------------

def suspension_covers(suspension: Suspension, year: int, month: int) -> bool:
    """
    True kalau (tahun, bulan) ada di dalam periode [start, end] inklusif.
    Penangguhan langsung berlaku di bulan mulainya.
    """
    return suspension.start_key <= month_key(year, month) <= suspension.end_key


def overlaps(a: Suspension, b: Suspension) -> bool:
    """
    Dua periode overlap kalau tidak ada yang seluruhnya berada sebelum yang lain.
    """
    return not (a.end_key < b.start_key or b.end_key < a.start_key)


def is_suspended(suspensions: Iterable[Suspension], year: int, month: int) -> bool:
    return any(suspension_covers(s, year, month) for s in suspensions)


# -----------------------------------------------------------------------------
# Pembayaran
# -----------------------------------------------------------------------------

def payment_in_month(
    payments: Iterable[Payment], year: int, month: int
) -> Optional[Payment]:
    """
    Pembayaran aktual pertama (tanggal paling awal) di bulan tersebut,
    atau None kalau tidak ada.
    """
    matches = [p for p in payments if month_of(p.date) == (year, month)]
    if not matches:
        return None
    return min(matches, key=lambda p: p.date)
