# cron_jobs/accumulate_debt.py
"""
Akumulasi tunggakan akhir bulan.

Untuk setiap pelanggan aktif yang belum bayar bulan ini, sisa tarif yang
tidak tertutup uang titip ditambahkan ke tunggakan, dan uang titip dipotong.

Pelanggan dilewati kalau:
- baru ditambahkan di bulan ini
- sedang ditangguhkan di bulan ini
- sudah ada pembayaran aktual di bulan ini
- bulan ini sudah pernah diakumulasi (last_accumulated_period)

Gagal di satu pelanggan tidak menghentikan pelanggan lain.

Pemakaian:
    python -m cron_jobs.accumulate_debt
    python -m cron_jobs.accumulate_debt --year 2025 --month 1   # bulan 1..12
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

import clock
import db
from config import Config
from errors import BillingError, NotFoundError
from ledger import Customer, is_suspended, month_key, month_of, payment_in_month
from logging_setup import setup_logging
from repository import PostgresRepository

logger = logging.getLogger(__name__)

SKIP_NEW_CUSTOMER = "new_customer"
SKIP_SUSPENDED = "suspended"
SKIP_PAID = "paid_this_month"
SKIP_ALREADY_ACCUMULATED = "already_accumulated"


class _Skip(Exception):
    """Pelanggan dilewati; reason = salah satu SKIP_*."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass
class AccumulationSummary:
    year: int
    month: int
    charged: List[str] = field(default_factory=list)
    skipped: Dict[str, List[str]] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    total_added_debt: int = 0

    def skip(self, reason: str, customer_id: str) -> None:
        self.skipped.setdefault(reason, []).append(customer_id)

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "month": self.month,
            "charged": list(self.charged),
            "charged_count": len(self.charged),
            "skipped": {k: list(v) for k, v in self.skipped.items()},
            "failed": dict(self.failed),
            "total_added_debt": self.total_added_debt,
        }


def _enrolled_in(customer: Customer, year: int, month: int) -> bool:
    if customer.created_at is None:
        return False
    return month_of(clock.to_local(customer.created_at)) == (year, month)


def accumulate_for_customer(repo, customer: Customer, year: int, month: int) -> int:
    """
    Proses satu pelanggan. Kembalikan tambahan tunggakan (bisa 0 kalau
    tertutup uang titip), atau raise _Skip(reason) kalau dilewati.
    """
    period = month_key(year, month)

    if _enrolled_in(customer, year, month):
        raise _Skip(SKIP_NEW_CUSTOMER)

    if is_suspended(repo.list_suspensions_for_customer(customer.customer_id), year, month):
        raise _Skip(SKIP_SUSPENDED)

    if payment_in_month(repo.list_payments_for_customer(customer.customer_id), year, month):
        raise _Skip(SKIP_PAID)

    if customer.last_accumulated_period == period:
        raise _Skip(SKIP_ALREADY_ACCUMULATED)

    fee = customer.monthly_fee
    remaining_fee = max(0, fee - customer.deposit)
    new_debt = customer.debt + remaining_fee
    new_deposit = max(0, customer.deposit - fee)

    if not repo.update_customer_balances(
        customer.customer_id,
        new_debt,
        new_deposit,
        last_accumulated_period=period,
        last_accumulated_debt=remaining_fee,
    ):
        raise NotFoundError(f"Customer {customer.customer_id} tidak ditemukan saat update.")

    return remaining_fee


def accumulate_monthly_debt(repo, year: int, month: int) -> AccumulationSummary:
    """
    Jalankan akumulasi tunggakan untuk (year, month zero-based).
    """
    summary = AccumulationSummary(year=year, month=month)
    customers = repo.list_active_customers()

    logger.info(
        "Mulai akumulasi tunggakan %02d/%d untuk %d pelanggan aktif.",
        month + 1,
        year,
        len(customers),
    )

    for customer in customers:
        cid = customer.customer_id
        try:
            added = accumulate_for_customer(repo, customer, year, month)
        except _Skip as skip:
            logger.debug("Skip %s (%s): %s", cid, customer.name, skip.reason)
            summary.skip(skip.reason, cid)
            continue
        except BillingError as e:
            logger.error("Gagal akumulasi tunggakan %s (%s): %s", cid, customer.name, e)
            summary.failed[cid] = str(e)
            continue
        except Exception as e:
            logger.exception("Error tak terduga saat akumulasi %s (%s)", cid, customer.name)
            summary.failed[cid] = f"{type(e).__name__}: {e}"
            continue

        summary.charged.append(cid)
        summary.total_added_debt += added
        logger.info("Tunggakan %s (%s) bertambah %s", cid, customer.name, added)

    skipped_counts = Counter({k: len(v) for k, v in summary.skipped.items()})
    logger.info(
        "Akumulasi selesai: %d pelanggan terkena tunggakan, %d dilewati %s, %d gagal.",
        len(summary.charged),
        sum(skipped_counts.values()),
        dict(skipped_counts),
        len(summary.failed),
    )
    return summary


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Akumulasi tunggakan bulanan pelanggan aktif.")
    parser.add_argument("--year", type=int, help="Tahun periode (default: tahun sekarang).")
    parser.add_argument("--month", type=int, help="Bulan periode 1..12 (default: bulan sekarang).")
    args = parser.parse_args(argv)

    setup_logging(Config.LOG_LEVEL)

    year, month = clock.current_period()
    if args.year is not None:
        year = args.year
    if args.month is not None:
        if not 1 <= args.month <= 12:
            parser.error("--month harus 1..12")
        month = args.month - 1

    try:
        db.init_app()
        summary = accumulate_monthly_debt(PostgresRepository(), year, month)
    except BillingError as e:
        logger.error("Akumulasi tunggakan gagal: %s", e)
        return 1
    finally:
        db.close_all()

    return 1 if summary.failed else 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n🛑 Dibatalkan oleh pengguna.")
        sys.exit(0)


# # Akumulasi tunggakan tiap akhir bulan jam 23:30
# 30 23 28-31 * * [ "$(date -d tomorrow +\%d)" = "01" ] && cd /opt/billing && /usr/bin/python3 -m cron_jobs.accumulate_debt >> /opt/billing/logs/accumulate.log 2>&1
