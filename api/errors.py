"""
api.errors - JSON error handlers for the API blueprint.

A fatal import reports the stage it failed in: 409 when the schema is
missing or unreachable ("bootstrap"), 422 when the file itself stopped
the run ("import").
"""

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from api import api_bp
from import_engine import ImportAborted


@api_bp.errorhandler(ImportAborted)
def api_import_aborted(exc: ImportAborted):
    status = 409 if exc.stage == "bootstrap" else 422
    return jsonify({"error": exc.reason, "stage": exc.stage, "line": exc.line}), status


@api_bp.errorhandler(SQLAlchemyError)
def api_store_unavailable(exc: SQLAlchemyError):
    return jsonify({"error": str(exc.__cause__ or exc), "stage": "bootstrap", "line": None}), 503
