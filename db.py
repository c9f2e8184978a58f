"""
db.py
------
Helper koneksi Postgres menggunakan psycopg2 connection pool.

Menyediakan fungsi:
- init_app(app=None)
- query_one(sql, params)
- query_all(sql, params)
- execute(sql, params, commit=True)
- execute_returning(sql, params)

Semua psycopg2.Error dibungkus menjadi PersistenceError supaya layer
billing tidak perlu tahu driver database yang dipakai.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Union

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor

from config import Config
from errors import PersistenceError

logger = logging.getLogger(__name__)

# Pool koneksi global
_DB_POOL: Optional[pool.SimpleConnectionPool] = None


def init_app(app=None, minconn: int = 1, maxconn: int = 10) -> None:
    """
    Inisialisasi connection pool.

    - Jika dipanggil dari Flask: kirim `app`, dan akan baca app.config["DATABASE_URL"].
    - Jika dipanggil dari cron: cukup `init_app()` tanpa argumen,
      akan pakai Config.DATABASE_URL (dari .env / environment).
    """
    global _DB_POOL
    if _DB_POOL is not None:
        return

    dsn: Optional[str] = None

    if app is not None and getattr(app, "config", None):
        dsn = app.config.get("DATABASE_URL")

    if not dsn:
        dsn = getattr(Config, "DATABASE_URL", None)

    if not dsn:
        raise PersistenceError(
            "DATABASE_URL belum diset. Pastikan environment / .env berisi DATABASE_URL."
        )

    try:
        _DB_POOL = pool.SimpleConnectionPool(minconn, maxconn, dsn)
    except psycopg2.Error as e:
        raise PersistenceError(f"Gagal membuat connection pool: {e}") from e


def _get_conn():
    """
    Ambil 1 koneksi dari pool (lazy init kalau pool belum ada).
    """
    if _DB_POOL is None:
        init_app()

    try:
        return _DB_POOL.getconn()
    except psycopg2.Error as e:
        raise PersistenceError(f"Gagal mengambil koneksi database: {e}") from e


def _put_conn(conn, close: bool = False) -> None:
    """
    Kembalikan koneksi ke pool. close=True untuk koneksi yang sudah putus.
    """
    if _DB_POOL is not None:
        _DB_POOL.putconn(conn, close=close)
    else:
        conn.close()


def close_all() -> None:
    """
    Tutup semua koneksi di pool (dipakai saat shutdown / akhir cron).
    """
    global _DB_POOL
    if _DB_POOL is not None:
        _DB_POOL.closeall()
        _DB_POOL = None


ParamsType = Union[Dict[str, Any], Sequence[Any], None]


@contextmanager
def _cursor(dict_rows: bool = True, commit: bool = True):
    """
    Pinjam koneksi dari pool, buka cursor, lalu commit / rollback.
    psycopg2.Error apa pun diteruskan sebagai PersistenceError.
    """
    conn = _get_conn()
    broken = False
    try:
        factory = RealDictCursor if dict_rows else None
        with conn.cursor(cursor_factory=factory) as cur:
            yield cur
        if commit:
            conn.commit()
    except psycopg2.Error as e:
        # koneksi putus: rollback pun gagal, koneksi dibuang dari pool
        try:
            conn.rollback()
        except psycopg2.Error as rollback_error:
            logger.warning("Rollback gagal, koneksi dibuang: %s", rollback_error)
            broken = True
        broken = broken or bool(conn.closed)
        logger.warning("Rollback: %s", e.pgerror or e)
        raise PersistenceError(f"Perintah database gagal: {e}") from e
    finally:
        _put_conn(conn, close=broken)


def query_one(sql: str, params: ParamsType = None) -> Optional[Dict[str, Any]]:
    """
    Jalankan SELECT dan ambil 1 row (atau None).
    """
    with _cursor() as cur:
        cur.execute(sql, params or {})
        row = cur.fetchone()
    return dict(row) if row is not None else None


def query_all(sql: str, params: ParamsType = None) -> List[Dict[str, Any]]:
    """
    Jalankan SELECT dan ambil semua row sebagai list of dict.
    """
    with _cursor() as cur:
        cur.execute(sql, params or {})
        rows = cur.fetchall()
    return [dict(r) for r in rows]


def execute(
    sql: str,
    params: ParamsType = None,
    commit: bool = True,
) -> int:
    """
    Jalankan INSERT / UPDATE / DELETE / DDL.
    Mengembalikan jumlah row yang terpengaruh.
    """
    with _cursor(dict_rows=False, commit=commit) as cur:
        cur.execute(sql, params or {})
        rowcount = cur.rowcount
    return rowcount


def execute_returning(sql: str, params: ParamsType = None) -> Optional[Dict[str, Any]]:
    """
    INSERT / UPDATE ... RETURNING. Row hasil RETURNING, atau None kalau
    tidak ada row yang kena (mis. UPDATE ke id yang tidak ada).
    """
    with _cursor() as cur:
        cur.execute(sql, params or {})
        row = cur.fetchone()
    return dict(row) if row is not None else None
