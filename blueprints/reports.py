# blueprints/reports.py

from __future__ import annotations

from flask import Blueprint, jsonify, request

import clock
import report_projection
from app import get_json_body, get_repository, parse_int, parse_period_args
from cron_jobs.accumulate_debt import accumulate_monthly_debt
from errors import ValidationError

bp = Blueprint("reports", __name__, url_prefix="/api/reports")


# ======================================================================
# REPORT: ringkasan dashboard bulan berjalan
# ======================================================================

@bp.route("/summary", methods=["GET"])
def summary():
    """
    Target, terkumpul, uang titip, dan belum bayar untuk ?year=&month=
    (default bulan sekarang).
    """
    year, month = parse_period_args()
    data = report_projection.monthly_summary(
        get_repository(), year, month, anchor=clock.current_period()
    )
    return jsonify(data)


# ======================================================================
# REPORT: rekap tahunan (12 bulan)
# ======================================================================

@bp.route("/ledger", methods=["GET"])
def yearly_ledger():
    """
    Rekap tahunan per pelanggan per bulan, siap dirender jadi XLS/CSV.
    """
    anchor = clock.current_period()
    year = parse_int(request.args.get("year"), "year", anchor[0])
    ledger = report_projection.yearly_ledger(get_repository(), year, anchor=anchor)
    return jsonify(ledger.to_dict())


# ======================================================================
# AKSI: akumulasi tunggakan manual (sama dengan cron)
# ======================================================================

@bp.route("/accumulate-debt", methods=["POST"])
def accumulate_debt():
    """
    Jalankan akumulasi tunggakan dari dashboard.
    Body opsional {"year": 2025, "month": 0}; default bulan sekarang.
    """
    body = get_json_body() if request.get_data() else {}

    year, month = clock.current_period()
    year = parse_int(body.get("year"), "year", year)
    month = parse_int(body.get("month"), "month", month)
    if not 0 <= month <= 11:
        raise ValidationError("month harus 0..11.")

    result = accumulate_monthly_debt(get_repository(), year, month)
    return jsonify(result.to_dict())
