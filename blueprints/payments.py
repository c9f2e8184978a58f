# blueprints/payments.py

from __future__ import annotations

from flask import Blueprint, jsonify, request

import payment_processor
from app import get_json_body, get_repository, parse_date, parse_int
from errors import ValidationError

bp = Blueprint("payments", __name__, url_prefix="/api/payments")


@bp.route("", methods=["GET"])
def list_payments():
    """
    Semua pembayaran (terbaru dulu). Optional filter ?customer_id=.
    """
    repo = get_repository()
    customer_id = (request.args.get("customer_id") or "").strip()
    if customer_id:
        payments = repo.list_payments_for_customer(customer_id)
    else:
        payments = repo.list_payments()
    return jsonify([p.to_dict() for p in payments])


@bp.route("", methods=["POST"])
def create_payment():
    """
    Aksi bayar:
    - customer_id, amount wajib
    - date opsional (default hari ini)
    - hitung ulang tunggakan / uang titip lewat payment_processor
    """
    body = get_json_body()
    customer_id = (body.get("customer_id") or "").strip()
    if not customer_id:
        raise ValidationError("customer_id wajib diisi.")

    amount = parse_int(body.get("amount"), "amount")
    if amount is None:
        raise ValidationError("amount wajib diisi.")

    result = payment_processor.process_payment(
        get_repository(),
        customer_id,
        amount,
        parse_date(body.get("date")),
    )
    return jsonify(result.to_dict()), 201


@bp.route("/<payment_id>", methods=["GET"])
def get_payment(payment_id: str):
    payment = payment_processor.get_payment(get_repository(), payment_id)
    return jsonify(payment.to_dict())


@bp.route("/<payment_id>", methods=["PUT"])
def update_payment(payment_id: str):
    """
    Edit nominal / tanggal. Tunggakan & uang titip TIDAK dihitung ulang.
    """
    body = get_json_body()
    amount = parse_int(body.get("amount"), "amount")
    paid_on = parse_date(body["date"]) if body.get("date") else None

    payment = payment_processor.update_payment(
        get_repository(), payment_id, amount=amount, paid_on=paid_on
    )
    return jsonify(payment.to_dict())


@bp.route("/<payment_id>", methods=["DELETE"])
def delete_payment(payment_id: str):
    payment_processor.delete_payment(get_repository(), payment_id)
    return jsonify({"message": "Pembayaran berhasil dihapus"})
