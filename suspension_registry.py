"""
suspension_registry.py
----------------------
Tambah / hapus / list penangguhan (suspension) pelanggan.

Validasi dijalankan SEBELUM ada penulisan ke database:
- bulan 0..11
- periode mulai <= periode selesai (berdasarkan month_key)
- customer ada
- tidak overlap dengan penangguhan lain milik customer yang sama
"""

from __future__ import annotations

import logging
from typing import List, Optional

from errors import NotFoundError, ValidationError
from ledger import Suspension, month_key, overlaps

logger = logging.getLogger(__name__)


def _validate_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} harus berupa angka bulat.")
    return value


def add_suspension(
    repo,
    customer_id: str,
    start_month: int,
    start_year: int,
    end_month: int,
    end_year: int,
    reason: Optional[str] = None,
) -> Suspension:
    """
    Buat penangguhan baru untuk customer. Bulan zero-based (Januari = 0).

    Raise ValidationError / NotFoundError sebelum menulis apa pun.
    """
    start_month = _validate_int(start_month, "start_month")
    start_year = _validate_int(start_year, "start_year")
    end_month = _validate_int(end_month, "end_month")
    end_year = _validate_int(end_year, "end_year")

    if not (0 <= start_month <= 11 and 0 <= end_month <= 11):
        raise ValidationError("Nilai bulan tidak valid (harus 0..11).")

    if month_key(start_year, start_month) > month_key(end_year, end_month):
        raise ValidationError("Periode mulai harus sebelum atau sama dengan periode selesai.")

    if repo.get_customer(customer_id) is None:
        raise NotFoundError(f"Customer {customer_id} tidak ditemukan.")

    candidate = Suspension(
        id="",
        customer_id=customer_id,
        start_month=start_month,
        start_year=start_year,
        end_month=end_month,
        end_year=end_year,
        reason=reason,
    )
    for existing in repo.list_suspensions_for_customer(customer_id):
        if overlaps(candidate, existing):
            raise ValidationError(
                "Periode penangguhan overlap dengan penangguhan yang sudah ada "
                f"(id={existing.id})."
            )

    reason = (reason or "").strip() or None
    suspension = repo.create_suspension(
        customer_id, start_month, start_year, end_month, end_year, reason
    )
    logger.info(
        "Penangguhan %s dibuat untuk customer %s: %02d/%d - %02d/%d",
        suspension.id,
        customer_id,
        start_month + 1,
        start_year,
        end_month + 1,
        end_year,
    )
    return suspension


def delete_suspension(repo, customer_id: str, suspension_id: str) -> None:
    if not repo.delete_suspension(customer_id, suspension_id):
        raise NotFoundError(
            f"Penangguhan {suspension_id} untuk customer {customer_id} tidak ditemukan."
        )
    logger.info("Penangguhan %s customer %s dihapus.", suspension_id, customer_id)


def list_suspensions(repo, customer_id: Optional[str] = None) -> List[Suspension]:
    """
    Semua penangguhan (atau milik satu customer), urut periode mulai terbaru.
    """
    if customer_id is None:
        rows = repo.list_suspensions()
    else:
        rows = repo.list_suspensions_for_customer(customer_id)
    return sorted(rows, key=lambda s: s.start_key, reverse=True)
