"""
db.models - SQLAlchemy ORM declarations.

Tables
------
order          - one row per order header.  The id is assigned by the
                 store and handed to the detail rows read after it.
order_details  - line items.  order_id is nullable at the column level
                 but always set by the importer; deleting an order
                 removes its details (FK cascade + ORM cascade).
"""

from __future__ import annotations

from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


class Order(Base):
    __tablename__ = "order"

    id   = Column("order_id", Integer, primary_key=True, autoincrement=True)
    date = Column("order_date", DateTime, nullable=False)

    details = relationship(
        "OrderDetail", back_populates="order",
        cascade="all, delete-orphan", passive_deletes=True,
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else "",
            "details": [d.to_dict() for d in self.details],
        }


class OrderDetail(Base):
    __tablename__ = "order_details"

    id          = Column("order_detail_id", Integer, primary_key=True,
                         autoincrement=True)
    quantity    = Column(Integer, nullable=False)
    description = Column("item_description", Text)
    order_id    = Column(Integer,
                         ForeignKey("order.order_id", ondelete="CASCADE"),
                         nullable=True, index=True)

    order = relationship("Order", back_populates="details")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "quantity": self.quantity,
            "description": self.description or "",
            "order_id": self.order_id,
        }
