"""
logging_setup.py
----------------
Konfigurasi logging bersama untuk Flask app dan cron job.

Level diambil dari Config.LOG_LEVEL (DEBUG / INFO / WARNING / ...).
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from config import Config


def setup_logging(level: Optional[str] = None) -> None:
    """
    Pasang handler stdout di root logger.

    Dipanggil sekali dari create_app() atau dari entry point cron.
    Handler lama dibuang supaya tidak ada log ganda.
    """
    level_name = (level or Config.LOG_LEVEL or "INFO").upper()
    log_level = getattr(logging, level_name, logging.INFO)

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # log request werkzeug cukup di level WARNING
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
