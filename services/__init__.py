"""
services - Storage-facing layer sitting between the import engine / API and DB.
"""

from services.schema_gateway import (                   # noqa: F401
    SchemaGateway,
    OrderAccepted,
    OrderRejected,
    DetailRow,
    StoreError,
)
