"""
api.routes_import - /api/v1/import endpoint.

Accepts an order file via multipart file upload or raw request body.
"""

from flask import request, jsonify

from api import api_bp
from import_engine import run_import


@api_bp.route("/import", methods=["POST"])
def api_import_orders():
    """
    POST /api/v1/import

    Multipart: field name 'csv_file'
    Or: raw file as request body (Content-Type: text/csv).
    """
    if request.content_type and "multipart" in request.content_type:
        f = request.files.get("csv_file")
        if not f:
            return jsonify({"error": "no csv_file in upload"}), 400
        content = f.read()
    else:
        content = request.get_data()

    if not content:
        return jsonify({"error": "empty body"}), 400

    report = run_import(content)
    return jsonify(report.to_dict())
