# blueprints/auth.py

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request, session

bp = Blueprint("auth", __name__, url_prefix="/api/auth")

logger = logging.getLogger(__name__)


# ======================================================================
# Login / Logout operator
# ======================================================================

@bp.route("/login", methods=["POST"])
def login():
    """
    Login operator.
    Pakai username/password statis dari Config.ADMIN_USERNAME / ADMIN_PASSWORD.
    """
    body = request.get_json(silent=True) or {}
    username = (body.get("username") or "").strip()
    password = (body.get("password") or "").strip()

    if not username or not password:
        return jsonify({"error": "Username dan password wajib diisi."}), 400

    expected_user = current_app.config.get("ADMIN_USERNAME")
    expected_pass = current_app.config.get("ADMIN_PASSWORD")

    if not expected_user or not expected_pass:
        logger.error("ADMIN_USERNAME / ADMIN_PASSWORD belum diset.")
        return jsonify({"error": "Login operator belum dikonfigurasi."}), 500

    if username != expected_user or password != expected_pass:
        logger.warning("Login gagal untuk username %r", username)
        return jsonify({"error": "Username atau password salah"}), 401

    session.clear()
    session["is_admin"] = True
    session.permanent = True
    return jsonify({"success": True})


@bp.route("/logout", methods=["POST"])
def logout():
    session.clear()
    return jsonify({"success": True})
