"""
api - HTTP surface for the order importer.

One Flask Blueprint under /api/v1:
    /schema   GET status, POST bootstrap
    /import   POST an order file
Errors are rendered as JSON by api.errors.
"""

from flask import Blueprint

api_bp = Blueprint("api", __name__, url_prefix="/api/v1")

# Route modules register on api_bp at import time
from api import routes_schema     # noqa: F401, E402
from api import routes_import     # noqa: F401, E402
from api import errors            # noqa: F401, E402
