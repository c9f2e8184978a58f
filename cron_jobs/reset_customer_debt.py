# cron_jobs/reset_customer_debt.py
"""
Reset tunggakan & uang titip SEMUA pelanggan ke 0.

Hanya untuk maintenance (mis. mulai pembukuan baru). Wajib pakai --yes.

    python -m cron_jobs.reset_customer_debt --yes
"""

from __future__ import annotations

import argparse
import logging
import sys

import db
from config import Config
from errors import BillingError
from logging_setup import setup_logging
from repository import PostgresRepository

logger = logging.getLogger(__name__)


def reset_customer_debt(repo) -> int:
    """Kembalikan jumlah pelanggan yang di-reset."""
    count = repo.reset_all_balances()
    logger.info("Berhasil mereset tunggakan & uang titip %d pelanggan.", count)
    return count


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Reset tunggakan & uang titip semua pelanggan.")
    parser.add_argument("--yes", action="store_true", help="Konfirmasi reset (wajib).")
    args = parser.parse_args(argv)

    setup_logging(Config.LOG_LEVEL)

    if not args.yes:
        logger.warning("⏸️ Reset dibatalkan: tambahkan --yes untuk konfirmasi.")
        return 2

    try:
        db.init_app()
        reset_customer_debt(PostgresRepository())
    except BillingError as e:
        logger.error("Gagal mereset tunggakan / uang titip: %s", e)
        return 1
    finally:
        db.close_all()
    return 0


if __name__ == "__main__":
    sys.exit(main())
