"""
db - Database layer.

Public API:
    init_db()         → create engine + session factory
    get_session()     → new Session
    session_scope()   → Session context manager (commit / rollback / close)
    Order, OrderDetail → ORM models
"""

from db.engine import (                                 # noqa: F401
    init_db,
    dispose_db,
    get_engine,
    get_schema,
    get_session,
    session_scope,
)
from db.models import Base, Order, OrderDetail          # noqa: F401
