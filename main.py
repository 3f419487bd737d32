#!/usr/bin/env python3
"""
Storefront - Order file importer
================================

    python main.py [CSV_PATH]     bootstrap the schema, or import orders
    python main.py --serve        run the HTTP API

The first run against an empty server only creates the schema and
exits; run again to import.  See config.py for all environment-variable
tunables (credentials included).
"""

import argparse
import logging
import sys
from pathlib import Path

from flask import Flask
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

import config
from db import init_db
from api import api_bp
from import_engine import run_import, ImportAborted
from services.schema_gateway import SchemaGateway


def _display_url() -> str:
    return make_url(config.DB_URL).render_as_string(hide_password=True)


def create_app(init_database: bool = True) -> Flask:
    """Flask application factory."""

    app = Flask(__name__)

    # ── Initialise database ─────────────────────────────────────────
    if init_database:
        init_db(config.DB_URL, config.DB_SCHEMA)
        print(f"  Database: {_display_url()}")

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    return app


def bootstrap_or_import(csv_path: Path) -> int:
    """
    Create the schema if it is missing (and stop there), otherwise
    import csv_path.  Returns the process exit code.
    """
    try:
        gateway = SchemaGateway()
        if not gateway.ensure_schema_exists():
            print(f"  {config.DB_SCHEMA or 'storefront'} schema does not exist")
            gateway.create_schema()
            print("  Schema created, exiting program")
            print("  Re-run to begin read operations")
            return 0
    except SQLAlchemyError as exc:
        print(f"FATAL: bootstrap failed: {exc}")
        return 1

    try:
        content = csv_path.read_bytes()
    except OSError as exc:
        print(f"FATAL: import failed: cannot read {csv_path}: {exc}")
        return 1

    try:
        report = run_import(content)
    except ImportAborted as exc:
        print(f"FATAL: {exc}")
        return 1

    print(f"\n  {report.details_inserted} records added")
    print(f"  Orders: {report.orders_committed} committed, "
          f"{report.orders_rejected} rejected")
    if report.details_dropped or report.details_failed:
        print(f"  Items: {report.details_dropped} dropped, "
              f"{report.details_failed} refused by the store")
    if report.errors:
        print("  First errors (max 10):")
        for err in report.errors[:10]:
            print(f"    Line {err['line']}: {err['reason']}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Import an order file into the storefront database."
    )
    parser.add_argument(
        "csv_path", nargs="?", type=Path, default=config.CSV_PATH,
        help="Order file to import (default: %(default)s).",
    )
    parser.add_argument(
        "--serve", action="store_true", help="Run the HTTP API instead."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    print("=" * 56)
    print("  Storefront - Order Import")
    print("=" * 56)

    if args.serve:
        app = create_app()
        print(f"\n  http://{config.HOST}:{config.PORT}/api/v1")
        print("=" * 56)
        app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)
        return 0

    init_db(config.DB_URL, config.DB_SCHEMA)
    print(f"  Database: {_display_url()}")
    return bootstrap_or_import(args.csv_path)


if __name__ == "__main__":
    sys.exit(main())
