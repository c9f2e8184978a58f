"""
customer_registry.py
--------------------
CRUD pelanggan:
- create_customer  : validasi input + generate customer_id kalau kosong
- update_customer  : update sebagian field
- delete_customer  : ditolak kalau pelanggan punya riwayat bayar / penangguhan
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional

from config import Config
from errors import NotFoundError, ValidationError
from ledger import CUSTOMER_STATUSES, Customer

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "monthly_fee", "bandwidth", "status", "debt", "deposit")


_ID_ATTEMPTS = 20


def generate_customer_id() -> str:
    """ID pelanggan: 'CUST' + 6 digit acak."""
    return f"CUST{random.randint(0, 999999):06d}"


def _new_customer_id(repo) -> str:
    """ID acak yang belum dipakai pelanggan lain."""
    for _ in range(_ID_ATTEMPTS):
        customer_id = generate_customer_id()
        if repo.get_customer(customer_id) is None:
            return customer_id
    raise ValidationError("Gagal membuat Customer ID unik, silakan coba lagi.")


def _as_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{name} harus berupa angka.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} harus berupa angka.") from None


def _clean_fields(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validasi & normalisasi field yang boleh diubah.
    Field di luar _EDITABLE_FIELDS diabaikan.
    """
    fields: Dict[str, Any] = {}

    if "name" in data:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValidationError("Nama pelanggan harus diisi.")
        fields["name"] = name

    if "monthly_fee" in data:
        fee = _as_int(data["monthly_fee"], "Tarif bulanan")
        if fee < 0:
            raise ValidationError("Tarif bulanan tidak boleh negatif.")
        fields["monthly_fee"] = fee

    if "bandwidth" in data:
        bandwidth = _as_int(data["bandwidth"], "Bandwidth")
        if bandwidth < 1:
            raise ValidationError("Bandwidth minimal 1 Mbps.")
        fields["bandwidth"] = bandwidth

    if "status" in data:
        status = (data.get("status") or "").strip().lower()
        if status not in CUSTOMER_STATUSES:
            raise ValidationError("Status harus 'active' atau 'inactive'.")
        fields["status"] = status

    for col, label in (("debt", "Tunggakan"), ("deposit", "Uang titip")):
        if col in data:
            value = _as_int(data[col], label)
            if value < 0:
                raise ValidationError(f"{label} tidak boleh negatif.")
            fields[col] = value

    return fields


def create_customer(repo, data: Dict[str, Any]) -> Customer:
    """
    Tambah pelanggan baru. Default tarif & bandwidth diambil dari Config.
    """
    payload = {
        "monthly_fee": Config.DEFAULT_MONTHLY_FEE,
        "bandwidth": Config.DEFAULT_BANDWIDTH,
        "status": "active",
        **{k: v for k, v in data.items() if v is not None},
    }
    payload.setdefault("name", "")
    fields = _clean_fields(payload)

    customer_id = (data.get("customer_id") or "").strip()
    if not customer_id:
        customer_id = _new_customer_id(repo)
    elif repo.get_customer(customer_id) is not None:
        raise ValidationError(f"Customer ID {customer_id} sudah dipakai.")

    customer = repo.create_customer(
        Customer(
            customer_id=customer_id,
            name=fields["name"],
            monthly_fee=fields["monthly_fee"],
            bandwidth=fields["bandwidth"],
            status=fields["status"],
            debt=fields.get("debt", 0),
            deposit=fields.get("deposit", 0),
        )
    )
    logger.info("Pelanggan %s (%s) ditambahkan.", customer.customer_id, customer.name)
    return customer


def get_customer(repo, customer_id: str) -> Customer:
    customer = repo.get_customer(customer_id)
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} tidak ditemukan.")
    return customer


def list_customers(repo, status: Optional[str] = None) -> List[Customer]:
    if status == "active":
        return repo.list_active_customers()
    customers = repo.list_customers()
    if status:
        customers = [c for c in customers if c.status == status]
    return customers


def update_customer(repo, customer_id: str, data: Dict[str, Any]) -> Customer:
    fields = _clean_fields({k: v for k, v in data.items() if k in _EDITABLE_FIELDS})
    customer = repo.update_customer(customer_id, fields)
    if customer is None:
        raise NotFoundError(f"Customer {customer_id} tidak ditemukan.")
    logger.info("Pelanggan %s diupdate: %s", customer_id, ", ".join(sorted(fields)) or "-")
    return customer


def delete_customer(repo, customer_id: str) -> None:
    """
    Hapus pelanggan. Ditolak kalau masih ada riwayat pembayaran / penangguhan.
    """
    get_customer(repo, customer_id)

    if repo.list_payments_for_customer(customer_id):
        raise ValidationError("Tidak bisa menghapus pelanggan yang punya riwayat pembayaran.")
    if repo.list_suspensions_for_customer(customer_id):
        raise ValidationError("Tidak bisa menghapus pelanggan yang punya penangguhan.")

    if not repo.delete_customer(customer_id):
        raise NotFoundError(f"Customer {customer_id} tidak ditemukan.")
    logger.info("Pelanggan %s dihapus.", customer_id)
