# cron_jobs/reset_payments.py
"""
Hapus SEMUA riwayat pembayaran (transaksi).

Hanya untuk maintenance (mis. membersihkan data uji coba). Saldo tunggakan /
uang titip pelanggan tidak diubah; jalankan reset_customer_debt kalau perlu.
Wajib pakai --yes.

    python -m cron_jobs.reset_payments --yes
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


def reset_payments(repo) -> int:
    """Kembalikan jumlah transaksi yang dihapus."""
    count = repo.delete_all_payments()
    logger.info("Berhasil menghapus %d transaksi.", count)
    return count


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Hapus semua riwayat pembayaran.")
    parser.add_argument("--yes", action="store_true", help="Konfirmasi hapus (wajib).")
    args = parser.parse_args(argv)

    setup_logging(Config.LOG_LEVEL)

    if not args.yes:
        logger.warning("⏸️ Hapus transaksi dibatalkan: tambahkan --yes untuk konfirmasi.")
        return 2

    logger.info("Menghapus semua data transaksi (payments)...")
    try:
        db.init_app()
        reset_payments(PostgresRepository())
    except BillingError as e:
        logger.error("Gagal menghapus data transaksi: %s", e)
        return 1
    finally:
        db.close_all()
    return 0


if __name__ == "__main__":
    sys.exit(main())
