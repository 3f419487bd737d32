"""
services.schema_gateway - Storage contract used by the import engine.

Owns schema bootstrap (namespace + order tables), the order-header
insert that hands back the generated key, the batched detail insert,
and transaction control.  Both inserts run inside a SAVEPOINT so a
failed statement leaves the rest of the open transaction untouched.

Limitation: any failure of create_order (bad date text, constraint
violation, driver error) is reported the same way, as OrderRejected.
The import engine treats every rejection as an invalid date.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional, Sequence, Union

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.schema import CreateSchema

import config
from db.engine import get_engine, get_schema
from db.models import Base, Order, OrderDetail

logger = logging.getLogger(__name__)

TABLES = (Order.__tablename__, OrderDetail.__tablename__)


class StoreError(Exception):
    """Raised when a batched detail insert is refused by the store."""

    def __init__(self, submitted: int, reason: str):
        super().__init__(reason)
        self.submitted = submitted
        self.reason = reason


@dataclass(frozen=True)
class OrderAccepted:
    order_id: int


@dataclass(frozen=True)
class OrderRejected:
    reason: str


OrderResult = Union[OrderAccepted, OrderRejected]


class DetailRow(NamedTuple):
    quantity: int
    description: str
    order_id: int


def parse_order_date(text: str) -> datetime:
    """
    Parse an order date against config.ORDER_DATE_FORMATS.
    Raises ValueError when no format matches.
    """
    value = (text or "").strip()
    for fmt in config.ORDER_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"invalid order date {text!r}")


class SchemaGateway:
    """
    Thin storage interface around one Session.

    The session may be None when only the bootstrap methods are needed.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        *,
        engine: Engine | None = None,
        schema: Optional[str] = None,
    ):
        self.session = session
        self.engine = engine if engine is not None else get_engine()
        self.schema = schema if schema is not None else get_schema()

    # ── Schema bootstrap ───────────────────────────────────────────────

    def ensure_schema_exists(self) -> bool:
        """True when the namespace (if any) and both order tables exist."""
        insp = inspect(self.engine)
        if self.schema and self.schema not in insp.get_schema_names():
            return False
        return all(insp.has_table(name, schema=self.schema) for name in TABLES)

    def create_schema(self) -> None:
        """Create the namespace (where supported) and the order tables."""
        with self.engine.begin() as conn:
            if self.schema and self.schema not in inspect(conn).get_schema_names():
                logger.info(f"Creating schema {self.schema}")
                conn.execute(CreateSchema(self.schema))
            Base.metadata.create_all(conn, checkfirst=True)
        logger.info(f"Created tables: {', '.join(TABLES)}")

    def bootstrap(self) -> bool:
        """
        Create the schema if it is missing.
        Returns True if it was created, False if it already existed.
        """
        if self.ensure_schema_exists():
            logger.info("Schema already exists")
            return False
        self.create_schema()
        return True

    # ── Inserts ────────────────────────────────────────────────────────

    def create_order(self, date_text: str) -> OrderResult:
        """Insert an order header and return its generated id, or the rejection."""
        try:
            order_date = parse_order_date(date_text)
        except ValueError as exc:
            return OrderRejected(str(exc))

        order = Order(date=order_date)
        try:
            with self.session.begin_nested():
                self.session.add(order)
        except SQLAlchemyError as exc:
            return OrderRejected(f"store rejected order: {exc}")

        logger.debug(f"Auto-incremented id for order insert: {order.id}")
        return OrderAccepted(order.id)

    def batch_insert_details(self, rows: Sequence[DetailRow]) -> int:
        """
        Insert every row in one flush.  Returns the number inserted,
        raises StoreError if the store refuses the batch.
        """
        if not rows:
            return 0

        details = [
            OrderDetail(quantity=r.quantity, description=r.description,
                        order_id=r.order_id)
            for r in rows
        ]
        try:
            with self.session.begin_nested():
                self.session.add_all(details)
        except SQLAlchemyError as exc:
            raise StoreError(len(details), str(exc)) from exc
        return len(details)

    # ── Transaction control ────────────────────────────────────────────

    def begin_transaction(self) -> None:
        if not self.session.in_transaction():
            self.session.begin()

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
