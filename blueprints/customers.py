# blueprints/customers.py

from __future__ import annotations

from flask import Blueprint, jsonify, request

import clock
import customer_registry
from app import get_json_body, get_repository, parse_period_args
from billing_logic import current_bill, evaluate_month
from ledger import is_suspended

bp = Blueprint("customers", __name__, url_prefix="/api/customers")


# ======================================================================
# LIST + CREATE
# ======================================================================

@bp.route("", methods=["GET"])
def list_customers():
    """
    List pelanggan. Optional filter ?status=active|inactive.
    Setiap pelanggan disertai tagihan saat ini (current_bill).
    """
    repo = get_repository()
    status_filter = (request.args.get("status") or "").strip() or None
    year, month = clock.current_period()

    result = []
    for cust in customer_registry.list_customers(repo, status_filter):
        suspensions = repo.list_suspensions_for_customer(cust.customer_id)
        suspended_now = is_suspended(suspensions, year, month)
        data = cust.to_dict()
        data["is_suspended"] = suspended_now
        data["current_bill"] = current_bill(cust, suspended_now, anchor=(year, month))
        result.append(data)

    return jsonify(result)


@bp.route("", methods=["POST"])
def create_customer():
    body = get_json_body()
    customer = customer_registry.create_customer(get_repository(), body)
    return jsonify(customer.to_dict()), 201


# ======================================================================
# DETAIL / EDIT / DELETE
# ======================================================================

@bp.route("/<customer_id>", methods=["GET"])
def get_customer(customer_id: str):
    """
    Detail pelanggan + riwayat pembayaran + penangguhan.
    """
    repo = get_repository()
    customer = customer_registry.get_customer(repo, customer_id)

    data = customer.to_dict()
    data["payments"] = [p.to_dict() for p in repo.list_payments_for_customer(customer_id)]
    data["suspensions"] = [s.to_dict() for s in repo.list_suspensions_for_customer(customer_id)]
    return jsonify(data)


@bp.route("/<customer_id>", methods=["PUT"])
def update_customer(customer_id: str):
    body = get_json_body()
    customer = customer_registry.update_customer(get_repository(), customer_id, body)
    return jsonify(customer.to_dict())


@bp.route("/<customer_id>", methods=["DELETE"])
def delete_customer(customer_id: str):
    customer_registry.delete_customer(get_repository(), customer_id)
    return jsonify({"message": "Pelanggan berhasil dihapus"})


# ======================================================================
# TAGIHAN & STATUS
# ======================================================================

@bp.route("/<customer_id>/bill", methods=["GET"])
def customer_bill(customer_id: str):
    """
    Tagihan pelanggan untuk pre-fill form pembayaran,
    plus status bulan yang diminta (?year=&month=, default bulan sekarang).
    """
    repo = get_repository()
    customer = customer_registry.get_customer(repo, customer_id)
    suspensions = repo.list_suspensions_for_customer(customer_id)
    payments = repo.list_payments_for_customer(customer_id)

    anchor = clock.current_period()
    year, month = parse_period_args()
    suspended_now = is_suspended(suspensions, *anchor)

    status = evaluate_month(customer, suspensions, payments, year, month, anchor=anchor)
    return jsonify(
        {
            "customer_id": customer.customer_id,
            "monthly_fee": customer.monthly_fee,
            "debt": customer.debt,
            "deposit": customer.deposit,
            "is_suspended": suspended_now,
            "current_bill": current_bill(customer, suspended_now, anchor=anchor),
            "year": year,
            "month": month,
            "month_status": status.to_dict(),
        }
    )
