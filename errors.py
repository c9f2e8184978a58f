"""
errors.py
---------
Hierarki exception untuk inti billing.

- NotFoundError     : referensi customer / suspension / payment tidak ada
- ValidationError   : input tidak valid (bulan, urutan periode, overlap, nominal)
- PersistenceError  : gagal I/O di layer database
"""


class BillingError(Exception):
    """Base exception untuk semua error billing."""


class NotFoundError(BillingError):
    """Data yang dirujuk tidak ditemukan."""


class ValidationError(BillingError):
    """Input ditolak sebelum ada penulisan ke database."""


class PersistenceError(BillingError):
    """Kesalahan saat membaca / menulis ke database."""
