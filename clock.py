"""
clock.py
--------
Satu-satunya tempat yang membaca jam. Dipakai oleh lapisan luar
(blueprint, cron) untuk menentukan "bulan sekarang" sekali per request / run,
lalu dikirim eksplisit ke mesin billing.
"""

from __future__ import annotations

import datetime
from typing import Optional, Tuple

import pytz

from config import Config


def _tz(tz_name: Optional[str] = None):
    return pytz.timezone(tz_name or Config.TIMEZONE)


def now(tz_name: Optional[str] = None) -> datetime.datetime:
    return datetime.datetime.now(_tz(tz_name))


def today(tz_name: Optional[str] = None) -> datetime.date:
    return now(tz_name).date()


def current_period(tz_name: Optional[str] = None) -> Tuple[int, int]:
    """(tahun, bulan zero-based) di zona waktu operasional."""
    n = now(tz_name)
    return n.year, n.month - 1


def to_local(value: datetime.datetime, tz_name: Optional[str] = None) -> datetime.datetime:
    """
    Konversi timestamp dari database ke zona waktu operasional.
    Timestamp naive dianggap sudah dalam waktu lokal.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(_tz(tz_name))
