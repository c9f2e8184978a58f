# blueprints/suspensions.py

from __future__ import annotations

from flask import Blueprint, jsonify

import suspension_registry
from app import get_json_body, get_repository, parse_int
from errors import ValidationError

bp = Blueprint("suspensions", __name__, url_prefix="/api")


@bp.route("/suspensions", methods=["GET"])
def list_all_suspensions():
    rows = suspension_registry.list_suspensions(get_repository())
    return jsonify([s.to_dict() for s in rows])


@bp.route("/customers/<customer_id>/suspensions", methods=["GET"])
def list_customer_suspensions(customer_id: str):
    rows = suspension_registry.list_suspensions(get_repository(), customer_id)
    return jsonify([s.to_dict() for s in rows])


@bp.route("/customers/<customer_id>/suspensions", methods=["POST"])
def create_suspension(customer_id: str):
    """
    Tambah penangguhan. Bulan zero-based (0 = Januari).
    """
    body = get_json_body()

    fields = {}
    for name in ("start_month", "start_year", "end_month", "end_year"):
        value = parse_int(body.get(name), name)
        if value is None:
            raise ValidationError(f"{name} wajib diisi.")
        fields[name] = value

    suspension = suspension_registry.add_suspension(
        get_repository(),
        customer_id,
        reason=body.get("reason"),
        **fields,
    )
    return jsonify(suspension.to_dict()), 201


@bp.route("/customers/<customer_id>/suspensions/<suspension_id>", methods=["DELETE"])
def delete_suspension(customer_id: str, suspension_id: str):
    suspension_registry.delete_suspension(get_repository(), customer_id, suspension_id)
    return jsonify({"message": "Penangguhan berhasil dihapus"})
