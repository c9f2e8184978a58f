import os
from dotenv import load_dotenv

# Muat variabel dari file .env (jika tersedia)
load_dotenv()


class Config:
    """
    Konfigurasi utama aplikasi billing WiFi.
    Semua nilai diambil dari environment variable (.env atau Docker Compose).
    """

    # Flask
    SECRET_KEY = os.getenv("SECRET_KEY")
    DEBUG = os.getenv("DEBUG", "false").lower() in ("1", "true", "yes")

    # Database (gunakan URL tunggal)
    DATABASE_URL = os.getenv("DATABASE_URL")

    # Login operator (kredensial statis)
    ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

    # Default untuk pelanggan baru
    DEFAULT_MONTHLY_FEE = int(os.getenv("DEFAULT_MONTHLY_FEE", "100000"))
    DEFAULT_BANDWIDTH = int(os.getenv("DEFAULT_BANDWIDTH", "4"))

    # Opsi tambahan
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Jakarta")
