"""
repository.py
-------------
Akses data pelanggan, pembayaran, dan penangguhan di Postgres.

Setiap method memanggil helper db.* (satu koneksi dari pool per query),
lalu memetakan row dict ke dataclass di ledger.py. Tidak ada cache di sini:
pemanggil selalu dapat data segar dari database.
"""

from __future__ import annotations

import random
import time
from datetime import date
from typing import Any, Dict, List, Optional

import db
from errors import PersistenceError
from ledger import Customer, Payment, Suspension

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS customers (
    customer_id              TEXT PRIMARY KEY,
    name                     TEXT NOT NULL,
    monthly_fee              BIGINT NOT NULL DEFAULT 0 CHECK (monthly_fee >= 0),
    bandwidth                INTEGER NOT NULL DEFAULT 4,
    status                   TEXT NOT NULL DEFAULT 'active'
                             CHECK (status IN ('active', 'inactive')),
    debt                     BIGINT NOT NULL DEFAULT 0 CHECK (debt >= 0),
    deposit                  BIGINT NOT NULL DEFAULT 0 CHECK (deposit >= 0),
    last_accumulated_period  INTEGER,
    last_accumulated_debt    BIGINT,
    created_at               TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at               TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

ALTER TABLE customers ADD COLUMN IF NOT EXISTS last_accumulated_period INTEGER;
ALTER TABLE customers ADD COLUMN IF NOT EXISTS last_accumulated_debt BIGINT;

CREATE TABLE IF NOT EXISTS payments (
    payment_id   TEXT PRIMARY KEY,
    customer_id  TEXT NOT NULL REFERENCES customers (customer_id),
    amount       BIGINT NOT NULL CHECK (amount > 0),
    date         DATE NOT NULL,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_payments_customer_date
    ON payments (customer_id, date);

CREATE TABLE IF NOT EXISTS suspensions (
    id           BIGSERIAL PRIMARY KEY,
    customer_id  TEXT NOT NULL REFERENCES customers (customer_id),
    start_month  SMALLINT NOT NULL CHECK (start_month BETWEEN 0 AND 11),
    start_year   INTEGER NOT NULL,
    end_month    SMALLINT NOT NULL CHECK (end_month BETWEEN 0 AND 11),
    end_year     INTEGER NOT NULL,
    reason       TEXT,
    created_at   TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at   TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
"""

_CUSTOMER_COLUMNS = """
    customer_id, name, monthly_fee, bandwidth, status,
    debt, deposit, last_accumulated_period, last_accumulated_debt,
    created_at, updated_at
"""

_SUSPENSION_COLUMNS = """
    id, customer_id, start_month, start_year, end_month, end_year,
    reason, created_at, updated_at
"""


def _to_customer(row: Dict[str, Any]) -> Customer:
    return Customer(
        customer_id=row["customer_id"],
        name=row["name"],
        monthly_fee=int(row["monthly_fee"]),
        bandwidth=int(row["bandwidth"]),
        status=row["status"],
        debt=int(row["debt"]),
        deposit=int(row["deposit"]),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
        last_accumulated_period=row.get("last_accumulated_period"),
        last_accumulated_debt=row.get("last_accumulated_debt"),
    )


def _to_payment(row: Dict[str, Any]) -> Payment:
    return Payment(
        payment_id=row["payment_id"],
        customer_id=row["customer_id"],
        amount=int(row["amount"]),
        date=row["date"],
    )


def _to_suspension(row: Dict[str, Any]) -> Suspension:
    return Suspension(
        id=str(row["id"]),
        customer_id=row["customer_id"],
        start_month=int(row["start_month"]),
        start_year=int(row["start_year"]),
        end_month=int(row["end_month"]),
        end_year=int(row["end_year"]),
        reason=row.get("reason"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


_PAYMENT_ID_ATTEMPTS = 5


def generate_payment_id() -> str:
    """ID pembayaran: timestamp millis + 3 digit acak, contoh: PAY1718000000000042."""
    return f"PAY{int(time.time() * 1000)}{random.randint(0, 999):03d}"


class PostgresRepository:
    """Repository billing di atas helper db.py."""

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------

    def create_schema(self) -> None:
        db.execute(SCHEMA_SQL)

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        row = db.query_one(
            f"SELECT {_CUSTOMER_COLUMNS} FROM customers WHERE customer_id = %(cid)s",
            {"cid": customer_id},
        )
        return _to_customer(row) if row else None

    def list_customers(self) -> List[Customer]:
        rows = db.query_all(
            f"SELECT {_CUSTOMER_COLUMNS} FROM customers ORDER BY customer_id"
        )
        return [_to_customer(r) for r in rows]

    def list_active_customers(self) -> List[Customer]:
        rows = db.query_all(
            f"""
            SELECT {_CUSTOMER_COLUMNS}
            FROM customers
            WHERE status = 'active'
            ORDER BY customer_id
            """
        )
        return [_to_customer(r) for r in rows]

    def create_customer(self, customer: Customer) -> Customer:
        row = db.execute_returning(
            f"""
            INSERT INTO customers (
                customer_id, name, monthly_fee, bandwidth, status, debt, deposit
            ) VALUES (
                %(customer_id)s, %(name)s, %(monthly_fee)s, %(bandwidth)s,
                %(status)s, %(debt)s, %(deposit)s
            )
            RETURNING {_CUSTOMER_COLUMNS}
            """,
            {
                "customer_id": customer.customer_id,
                "name": customer.name,
                "monthly_fee": customer.monthly_fee,
                "bandwidth": customer.bandwidth,
                "status": customer.status,
                "debt": customer.debt,
                "deposit": customer.deposit,
            },
        )
        return _to_customer(row)

    def update_customer(self, customer_id: str, fields: Dict[str, Any]) -> Optional[Customer]:
        """
        Update sebagian kolom (name, monthly_fee, bandwidth, status, debt, deposit).
        Nama kolom sudah divalidasi oleh customer_registry.
        """
        allowed = ("name", "monthly_fee", "bandwidth", "status", "debt", "deposit")
        sets = [f"{col} = %({col})s" for col in allowed if col in fields]
        if not sets:
            return self.get_customer(customer_id)

        params = {col: fields[col] for col in allowed if col in fields}
        params["cid"] = customer_id
        row = db.execute_returning(
            f"""
            UPDATE customers
            SET {", ".join(sets)},
                updated_at = NOW()
            WHERE customer_id = %(cid)s
            RETURNING {_CUSTOMER_COLUMNS}
            """,
            params,
        )
        return _to_customer(row) if row else None

    def update_customer_balances(
        self,
        customer_id: str,
        debt: int,
        deposit: int,
        last_accumulated_period: Optional[int] = None,
        last_accumulated_debt: int = 0,
    ) -> bool:
        """
        Simpan debt/deposit baru. Kalau last_accumulated_period dikirim,
        marker akumulasi (periode + tunggakan yang ditambahkan) ikut ditulis
        di UPDATE yang sama.
        Mengembalikan False kalau customer tidak ada.
        """
        if last_accumulated_period is None:
            rowcount = db.execute(
                """
                UPDATE customers
                SET debt = %(debt)s,
                    deposit = %(deposit)s,
                    updated_at = NOW()
                WHERE customer_id = %(cid)s
                """,
                {"debt": debt, "deposit": deposit, "cid": customer_id},
            )
        else:
            rowcount = db.execute(
                """
                UPDATE customers
                SET debt = %(debt)s,
                    deposit = %(deposit)s,
                    last_accumulated_period = %(period)s,
                    last_accumulated_debt = %(added)s,
                    updated_at = NOW()
                WHERE customer_id = %(cid)s
                """,
                {
                    "debt": debt,
                    "deposit": deposit,
                    "period": last_accumulated_period,
                    "added": last_accumulated_debt,
                    "cid": customer_id,
                },
            )
        return rowcount > 0

    def delete_customer(self, customer_id: str) -> bool:
        rowcount = db.execute(
            "DELETE FROM customers WHERE customer_id = %(cid)s",
            {"cid": customer_id},
        )
        return rowcount > 0

    def reset_all_balances(self) -> int:
        return db.execute(
            """
            UPDATE customers
            SET debt = 0,
                deposit = 0,
                updated_at = NOW()
            """
        )

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    def list_payments(self) -> List[Payment]:
        rows = db.query_all(
            """
            SELECT payment_id, customer_id, amount, date
            FROM payments
            ORDER BY date DESC, payment_id DESC
            """
        )
        return [_to_payment(r) for r in rows]

    def list_payments_for_customer(self, customer_id: str) -> List[Payment]:
        rows = db.query_all(
            """
            SELECT payment_id, customer_id, amount, date
            FROM payments
            WHERE customer_id = %(cid)s
            ORDER BY date DESC, payment_id DESC
            """,
            {"cid": customer_id},
        )
        return [_to_payment(r) for r in rows]

    def get_payment(self, payment_id: str) -> Optional[Payment]:
        row = db.query_one(
            """
            SELECT payment_id, customer_id, amount, date
            FROM payments
            WHERE payment_id = %(pid)s
            """,
            {"pid": payment_id},
        )
        return _to_payment(row) if row else None

    def create_payment(self, customer_id: str, amount: int, paid_on: date) -> Payment:
        """
        Insert pembayaran. Kalau payment_id bentrok, generate ulang.
        """
        for _ in range(_PAYMENT_ID_ATTEMPTS):
            row = db.execute_returning(
                """
                INSERT INTO payments (payment_id, customer_id, amount, date)
                VALUES (%(pid)s, %(cid)s, %(amount)s, %(date)s)
                ON CONFLICT (payment_id) DO NOTHING
                RETURNING payment_id, customer_id, amount, date
                """,
                {
                    "pid": generate_payment_id(),
                    "cid": customer_id,
                    "amount": amount,
                    "date": paid_on,
                },
            )
            if row is not None:
                return _to_payment(row)
        raise PersistenceError("Gagal membuat payment_id unik.")

    def update_payment(
        self,
        payment_id: str,
        amount: Optional[int] = None,
        paid_on: Optional[date] = None,
    ) -> Optional[Payment]:
        row = db.execute_returning(
            """
            UPDATE payments
            SET amount = COALESCE(%(amount)s, amount),
                date = COALESCE(%(date)s, date)
            WHERE payment_id = %(pid)s
            RETURNING payment_id, customer_id, amount, date
            """,
            {"amount": amount, "date": paid_on, "pid": payment_id},
        )
        return _to_payment(row) if row else None

    def delete_payment(self, payment_id: str) -> bool:
        rowcount = db.execute(
            "DELETE FROM payments WHERE payment_id = %(pid)s",
            {"pid": payment_id},
        )
        return rowcount > 0

    def delete_all_payments(self) -> int:
        return db.execute("DELETE FROM payments")

    # ------------------------------------------------------------------
    # Suspensions
    # ------------------------------------------------------------------

    def list_suspensions(self) -> List[Suspension]:
        rows = db.query_all(
            f"""
            SELECT {_SUSPENSION_COLUMNS}
            FROM suspensions
            ORDER BY start_year DESC, start_month DESC
            """
        )
        return [_to_suspension(r) for r in rows]

    def list_suspensions_for_customer(self, customer_id: str) -> List[Suspension]:
        rows = db.query_all(
            f"""
            SELECT {_SUSPENSION_COLUMNS}
            FROM suspensions
            WHERE customer_id = %(cid)s
            ORDER BY start_year DESC, start_month DESC
            """,
            {"cid": customer_id},
        )
        return [_to_suspension(r) for r in rows]

    def create_suspension(
        self,
        customer_id: str,
        start_month: int,
        start_year: int,
        end_month: int,
        end_year: int,
        reason: Optional[str] = None,
    ) -> Suspension:
        row = db.execute_returning(
            f"""
            INSERT INTO suspensions (
                customer_id, start_month, start_year, end_month, end_year, reason
            ) VALUES (
                %(cid)s, %(sm)s, %(sy)s, %(em)s, %(ey)s, %(reason)s
            )
            RETURNING {_SUSPENSION_COLUMNS}
            """,
            {
                "cid": customer_id,
                "sm": start_month,
                "sy": start_year,
                "em": end_month,
                "ey": end_year,
                "reason": reason,
            },
        )
        return _to_suspension(row)

    def delete_suspension(self, customer_id: str, suspension_id: str) -> bool:
        try:
            sid = int(suspension_id)
        except (TypeError, ValueError):
            return False

        rowcount = db.execute(
            """
            DELETE FROM suspensions
            WHERE id = %(sid)s
              AND customer_id = %(cid)s
            """,
            {"sid": sid, "cid": customer_id},
        )
        return rowcount > 0
