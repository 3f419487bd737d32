"""
Storefront - Centralised configuration.

All tunables live here.  Every other module imports from config
instead of reading os.environ directly.
"""

from __future__ import annotations
import os
from pathlib import Path

from sqlalchemy.engine import URL


# ── Paths ──────────────────────────────────────────────────────────────
BASE_DIR  = Path(__file__).resolve().parent
CSV_PATH  = Path(os.environ.get("STOREFRONT_CSV", BASE_DIR / "Orders.csv"))

# ── Database credentials (MySQL) ───────────────────────────────────────
DB_HOST     = os.environ.get("MYSQLHOST", "localhost")
DB_PORT     = int(os.environ.get("MYSQLPORT", "3306"))
DB_USER     = os.environ.get("MYSQLUSER")
DB_PASSWORD = os.environ.get("MYSQLPASS", "")


def _default_db_url() -> str:
    if DB_USER:
        url = URL.create(
            "mysql+pymysql",
            username=DB_USER, password=DB_PASSWORD or None,
            host=DB_HOST, port=DB_PORT,
        )
        return url.render_as_string(hide_password=False)
    return f"sqlite:///{BASE_DIR / 'storefront.sqlite'}"


# ── Database ───────────────────────────────────────────────────────────
DB_URL = os.environ.get("STOREFRONT_DB") or _default_db_url()

# Named schema (MySQL database) holding the order tables.
# SQLite has no schemas, so the tables live in the main database there.
DB_SCHEMA = os.environ.get("STOREFRONT_SCHEMA") or (
    "storefront" if DB_URL.startswith("mysql") else None
)

# ── Input format ───────────────────────────────────────────────────────
FIELD_DELIMITER = ","
ORDER_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

# ── Logging ────────────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("STOREFRONT_LOG_LEVEL", "INFO").upper()

# ── Server ─────────────────────────────────────────────────────────────
HOST   = os.environ.get("STOREFRONT_HOST", "0.0.0.0")
PORT   = int(os.environ.get("STOREFRONT_PORT", "5000"))
DEBUG  = os.environ.get("STOREFRONT_DEBUG", "0") == "1"
