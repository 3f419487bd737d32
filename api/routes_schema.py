"""
api.routes_schema - /api/v1/schema endpoints.

Report whether the order schema exists and create it on demand,
so an operator can bootstrap without shell access.
"""

from flask import jsonify

from api import api_bp
from services.schema_gateway import SchemaGateway


@api_bp.route("/schema", methods=["GET"])
def schema_status():
    return jsonify({"exists": SchemaGateway().ensure_schema_exists()})


@api_bp.route("/schema", methods=["POST"])
def schema_bootstrap():
    """Create the schema; 201 if created, 200 if it was already there."""
    created = SchemaGateway().bootstrap()
    return jsonify({"created": created}), 201 if created else 200
