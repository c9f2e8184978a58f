"""
report_projection.py
--------------------
Proyeksi hasil mesin billing ke baris laporan (rekap tahunan / export).

Tidak ada logika status di sini: semua status berasal dari
billing_logic.evaluate_month. Format file (XLS/CSV) urusan lapisan render.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional, Sequence

from billing_logic import (
    PAID,
    UNPAID,
    VIA_DEPOSIT,
    Anchor,
    evaluate_month,
    evaluate_year,
    fee_due,
    projected_deposit,
)
from ledger import Customer, Payment, Suspension, is_suspended, month_of

MONTH_NAMES = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]

ROW_NORMAL = "normal"
ROW_DEBT = "debt"
ROW_INACTIVE = "inactive"

__all__ = [
    "MONTH_NAMES",
    "LedgerRow",
    "MonthSummary",
    "YearlyLedger",
    "evaluate_year",
    "month_rows",
    "summarize_month",
    "yearly_ledger",
    "monthly_summary",
]


@dataclass
class LedgerRow:
    no: int
    customer_id: str
    nama: str
    tarif: int
    bandwidth: int
    tunggakan: int
    uang_titip: int
    total_kewajiban: int
    status: str
    status_label: str
    via: Optional[str]
    tanggal: str
    nominal: int
    row_style: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MonthSummary:
    month: int
    month_name: str
    total: int
    paid: int
    unpaid: int
    amount: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class YearlyLedger:
    year: int
    summary: List[MonthSummary]
    sheets: Dict[int, List[LedgerRow]]

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "summary": [s.to_dict() for s in self.summary],
            "months": [
                {
                    "month": month,
                    "month_name": MONTH_NAMES[month],
                    "rows": [r.to_dict() for r in rows],
                }
                for month, rows in sorted(self.sheets.items())
            ],
        }


def _group(items, key) -> Dict[str, list]:
    grouped: Dict[str, list] = defaultdict(list)
    for item in items:
        grouped[key(item)].append(item)
    return grouped


def month_rows(
    customers: Sequence[Customer],
    suspensions_by_customer: Dict[str, Sequence[Suspension]],
    payments_by_customer: Dict[str, Sequence[Payment]],
    year: int,
    month: int,
    *,
    anchor: Anchor,
) -> List[LedgerRow]:
    """
    Satu baris per pelanggan untuk satu bulan.
    """
    rows: List[LedgerRow] = []

    for index, customer in enumerate(customers, start=1):
        sus = suspensions_by_customer.get(customer.customer_id, ())
        pays = payments_by_customer.get(customer.customer_id, ())

        status = evaluate_month(customer, sus, pays, year, month, anchor=anchor)
        uang_titip = projected_deposit(customer, sus, pays, year, month, anchor=anchor) or 0
        fee = fee_due(customer, is_suspended(sus, year, month), year, month)

        tanggal = ""
        nominal = 0
        if status.payment is not None:
            tanggal = status.payment.date.strftime("%d/%m/%Y")
            nominal = status.payment.amount
        elif status.is_paid and status.via == VIA_DEPOSIT:
            tanggal = "Auto (Uang Titip)"
            nominal = customer.monthly_fee

        if not customer.is_active:
            row_style = ROW_INACTIVE
        elif customer.debt > 0:
            row_style = ROW_DEBT
        else:
            row_style = ROW_NORMAL

        rows.append(
            LedgerRow(
                no=index,
                customer_id=customer.customer_id,
                nama=customer.name,
                tarif=customer.monthly_fee,
                bandwidth=customer.bandwidth,
                tunggakan=customer.debt,
                uang_titip=uang_titip,
                total_kewajiban=max(0, fee + customer.debt - uang_titip),
                status=status.kind,
                status_label=status.label,
                via=status.via,
                tanggal=tanggal,
                nominal=nominal,
                row_style=row_style,
            )
        )

    return rows


def summarize_month(month: int, rows: Sequence[LedgerRow]) -> MonthSummary:
    """
    Ringkasan satu bulan: hanya pelanggan yang ditagih (aktif & tidak ditangguhkan).
    """
    billable = [r for r in rows if r.status in (PAID, UNPAID)]
    paid = [r for r in billable if r.status == PAID]
    return MonthSummary(
        month=month,
        month_name=MONTH_NAMES[month],
        total=len(billable),
        paid=len(paid),
        unpaid=len(billable) - len(paid),
        amount=sum(r.nominal for r in paid if r.via != VIA_DEPOSIT),
    )


def yearly_ledger(repo, year: int, *, anchor: Anchor) -> YearlyLedger:
    """
    Rekap tahunan: 12 sheet bulanan + ringkasan per bulan.
    Data dibaca sekali dari repository, lalu dievaluasi per (pelanggan, bulan).
    """
    customers = repo.list_customers()
    suspensions = _group(repo.list_suspensions(), lambda s: s.customer_id)
    payments = _group(repo.list_payments(), lambda p: p.customer_id)

    sheets: Dict[int, List[LedgerRow]] = {}
    summary: List[MonthSummary] = []
    for month in range(12):
        rows = month_rows(customers, suspensions, payments, year, month, anchor=anchor)
        sheets[month] = rows
        summary.append(summarize_month(month, rows))

    return YearlyLedger(year=year, summary=summary, sheets=sheets)


def monthly_summary(repo, year: int, month: int, *, anchor: Anchor) -> dict:
    """
    Angka dashboard untuk satu bulan:
    - target           : total tarif pelanggan yang ditagih
    - total_paid       : jumlah pembayaran aktual
    - total_uang_titip : tarif yang ditutup uang titip
    - total_unpaid     : target - (total_paid + total_uang_titip), minimal 0
    """
    customers = repo.list_customers()
    suspensions = _group(repo.list_suspensions(), lambda s: s.customer_id)
    payments = _group(repo.list_payments(), lambda p: p.customer_id)

    target = 0
    total_paid = 0
    total_uang_titip = 0
    customers_paid = 0
    customers_actually_paid = 0
    billable = 0

    for customer in customers:
        status = evaluate_month(
            customer,
            suspensions.get(customer.customer_id, ()),
            payments.get(customer.customer_id, ()),
            year,
            month,
            anchor=anchor,
        )
        if status.kind not in (PAID, UNPAID):
            continue

        billable += 1
        target += customer.monthly_fee
        if not status.is_paid:
            continue

        customers_paid += 1
        if status.via == VIA_DEPOSIT:
            total_uang_titip += customer.monthly_fee
        else:
            customers_actually_paid += 1
            total_paid += sum(
                p.amount
                for p in payments.get(customer.customer_id, ())
                if month_of(p.date) == (year, month)
            )

    return {
        "year": year,
        "month": month,
        "month_name": MONTH_NAMES[month],
        "billable_customers": billable,
        "target": target,
        "total_paid": total_paid,
        "total_uang_titip": total_uang_titip,
        "total_customers_paid": customers_paid,
        "total_customers_actually_paid": customers_actually_paid,
        "total_unpaid": max(0, target - (total_paid + total_uang_titip)),
    }
