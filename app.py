"""
app.py
------
Entry point Flask (API JSON untuk dashboard billing WiFi).

- Membuat Flask app
- Load Config
- Inisialisasi koneksi DB + repository
- Register blueprint auth, customers, payments, suspensions, reports
- Mapping error billing -> response JSON
"""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, Optional

from flask import Flask, current_app, jsonify, request, session

import clock
import db
from config import Config
from errors import BillingError, NotFoundError, PersistenceError, ValidationError
from logging_setup import setup_logging
from repository import PostgresRepository

logger = logging.getLogger(__name__)


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    setup_logging(app.config.get("LOG_LEVEL"))

    # Repository bisa di-inject (mis. saat testing); default pakai Postgres
    if app.config.get("REPOSITORY") is None:
        db.init_app(app)
        app.config["REPOSITORY"] = PostgresRepository()

    from blueprints import auth, customers, payments, reports, suspensions

    app.register_blueprint(auth.bp)
    app.register_blueprint(customers.bp)
    app.register_blueprint(payments.bp)
    app.register_blueprint(suspensions.bp)
    app.register_blueprint(reports.bp)

    @app.route("/api/setup", methods=["POST"])
    def setup_database():
        """
        Buat tabel kalau belum ada.
        """
        get_repository().create_schema()
        customers_count = len(get_repository().list_customers())
        return jsonify(
            {
                "message": "Database siap dipakai",
                "customersCount": customers_count,
            }
        )

    # =============================
    # GLOBAL LOGIN CHECK
    # =============================
    @app.before_request
    def check_login_global():
        """
        Semua route /api/* wajib login, kecuali auth.* (login/logout).
        """
        if request.endpoint is None or request.endpoint == "static":
            return None
        if request.endpoint.startswith("auth."):
            return None
        if not app.config.get("LOGIN_REQUIRED", True):
            return None
        if session.get("is_admin"):
            return None
        return jsonify({"error": "Silakan login terlebih dahulu."}), 401

    _register_error_handlers(app)

    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return jsonify({"error": str(e)}), 404

    @app.errorhandler(PersistenceError)
    def handle_persistence(e):
        logger.error("Kesalahan database: %s", e)
        return jsonify({"error": "Gagal mengakses database."}), 500

    @app.errorhandler(BillingError)
    def handle_billing(e):
        logger.error("Kesalahan billing: %s", e)
        return jsonify({"error": str(e)}), 500


# ======================================================================
# Helper untuk blueprint
# ======================================================================

def get_repository():
    """Repository aktif untuk app ini."""
    return current_app.config["REPOSITORY"]


def get_json_body() -> Dict[str, Any]:
    """Body JSON request (harus object)."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Body request harus JSON object.")
    return body


def parse_int(value, name: str, default: Optional[int] = None) -> Optional[int]:
    """
    Parse angka dari JSON / query string. None -> default.
    """
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{name} harus berupa angka.")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{name} harus berupa angka bulat.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} harus berupa angka.") from None


def parse_date(value, name: str = "date") -> datetime.date:
    """
    Terima 'YYYY-MM-DD' atau ISO datetime ('2025-01-15T10:00:00Z').
    Kosong -> hari ini (zona waktu operasional).
    """
    if value is None or value == "":
        return clock.today()
    if not isinstance(value, str):
        raise ValidationError(f"{name} harus berupa string tanggal.")
    try:
        if len(value) == 10:
            return datetime.date.fromisoformat(value)
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValidationError(f"Format {name} tidak valid: {value}") from None


def parse_period_args():
    """
    (year, month) dari query string ?year=&month= (month 0..11),
    default bulan sekarang.
    """
    year, month = clock.current_period()
    year = parse_int(request.args.get("year"), "year", year)
    month = parse_int(request.args.get("month"), "month", month)
    if not 0 <= month <= 11:
        raise ValidationError("month harus 0..11.")
    return year, month


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=5000, debug=Config.DEBUG)
