"""
import_engine.orchestrator - Per-order batching and commit/discard decisions.

The input has no order terminators: an order ends when the next
``order`` line arrives or the input runs out.  Items are therefore
buffered until that boundary, so a header the store rejects also
takes every item that follows it down with it.

    NO_ORDER_OPEN ──order ok──▶ ORDER_OPEN_VALID ──item──▶ (buffer)
          │                            │
          └──order rejected──▶ ORDER_OPEN_INVALID ──item──▶ (drop)

Every ``order`` line and the end of input first close the open order:
flush + commit when valid, discard + rollback when invalid.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from import_engine.errors import RecordError
from import_engine.record_parser import (
    ItemDetail, OrderHeader, Record, Unrecognized, parse_record,
)
from import_engine.report import ImportReport
from services.schema_gateway import DetailRow, OrderAccepted, StoreError

logger = logging.getLogger(__name__)

# order_details.quantity is a signed 32-bit INT
QUANTITY_MIN = -2**31
QUANTITY_MAX = 2**31 - 1
_QUANTITY_RE = re.compile(r"[+-]?[0-9]+", re.ASCII)


def parse_quantity(text: str) -> int:
    """
    Strict decimal integer within the INT column range.
    No whitespace, digit separators or non-ASCII digits.
    Raises ValueError otherwise.
    """
    if not _QUANTITY_RE.fullmatch(text):
        raise ValueError(f"quantity is not an integer: {text!r}")
    value = int(text)
    if not QUANTITY_MIN <= value <= QUANTITY_MAX:
        raise ValueError(f"quantity out of range: {text!r}")
    return value


class Phase(enum.Enum):
    NO_ORDER_OPEN = "no_order_open"
    ORDER_OPEN_VALID = "order_open_valid"
    ORDER_OPEN_INVALID = "order_open_invalid"


@dataclass
class ImportState:
    phase: Phase = Phase.NO_ORDER_OPEN
    pending_order_id: Optional[int] = None
    pending_date_valid: bool = False
    pending_batch: list[DetailRow] = field(default_factory=list)
    tally: int = 0

    def open_valid(self, order_id: int):
        self.phase = Phase.ORDER_OPEN_VALID
        self.pending_order_id = order_id
        self.pending_date_valid = True
        self.pending_batch = []

    def open_invalid(self):
        self.phase = Phase.ORDER_OPEN_INVALID
        self.pending_order_id = None
        self.pending_date_valid = False
        self.pending_batch = []

    def reset(self):
        self.phase = Phase.NO_ORDER_OPEN
        self.pending_order_id = None
        self.pending_date_valid = False
        self.pending_batch = []


class ImportOrchestrator:
    """
    Drives one import run over a gateway exposing create_order,
    batch_insert_details, begin_transaction, commit and rollback.
    """

    def __init__(self, gateway, report: ImportReport | None = None):
        self.gateway = gateway
        self.report = report if report is not None else ImportReport()
        self.state = ImportState()

    # ── Public API ─────────────────────────────────────────────────────

    def run(self, lines: Iterable[str]) -> ImportReport:
        """Process every line in order, then close the last order."""
        for line_no, line in enumerate(lines, start=1):
            self.report.total_lines += 1
            self.process(parse_record(line), line_no)
        self.finish()
        return self.report

    def process(self, record: Record, line_no: int = 0) -> None:
        logger.debug(
            f"line {line_no}: {record!r} "
            f"[order={self.state.pending_order_id} phase={self.state.phase.value}]"
        )
        if isinstance(record, OrderHeader):
            self._on_order(record, line_no)
        elif isinstance(record, ItemDetail):
            self._on_item(record, line_no)
        else:
            self._on_unrecognized(record, line_no)

    def finish(self) -> None:
        """End of input: close whatever order is still open."""
        self._close_current_order(self.report.total_lines)

    # ── Transitions ────────────────────────────────────────────────────

    def _on_order(self, record: OrderHeader, line_no: int):
        if self.state.phase is not Phase.NO_ORDER_OPEN:
            self._close_current_order(line_no)

        self.gateway.begin_transaction()
        result = self.gateway.create_order(record.date_text)

        if isinstance(result, OrderAccepted):
            self.state.open_valid(result.order_id)
            logger.info(f"New order {result.order_id} dated {record.date_text}")
            return

        self.state.open_invalid()
        self.report.orders_rejected += 1
        self.report.add_error(line_no, result.reason)
        logger.warning(f"line {line_no}: order rejected, items skipped until "
                       f"next order ({result.reason})")

    def _on_item(self, record: ItemDetail, line_no: int):
        if self.state.phase is not Phase.ORDER_OPEN_VALID:
            self.report.details_dropped += 1
            logger.debug(f"line {line_no}: item outside a valid order, dropped")
            return

        try:
            quantity = parse_quantity(record.quantity_text)
        except ValueError as exc:
            raise RecordError(line_no, str(exc)) from None

        self.state.pending_batch.append(
            DetailRow(quantity, record.description, self.state.pending_order_id)
        )

    def _on_unrecognized(self, record: Unrecognized, line_no: int):
        self.report.unrecognized += 1
        logger.debug(f"line {line_no}: unrecognized record {record.raw!r}")

    # ── Close current order ────────────────────────────────────────────

    def _close_current_order(self, line_no: int):
        state = self.state

        if state.phase is Phase.ORDER_OPEN_INVALID:
            self.gateway.rollback()

        elif state.phase is Phase.ORDER_OPEN_VALID:
            batch = state.pending_batch
            try:
                inserted = self.gateway.batch_insert_details(batch)
            except StoreError as exc:
                inserted = 0
                self.report.add_error(
                    line_no,
                    f"order {state.pending_order_id}: detail batch refused ({exc.reason})",
                )
                logger.error(f"Detail batch for order {state.pending_order_id} "
                             f"refused, header kept: {exc.reason}")

            state.tally += inserted
            self.report.details_inserted = state.tally
            self.report.details_failed += len(batch) - inserted
            self.gateway.commit()
            self.report.orders_committed += 1
            logger.info(f"Order {state.pending_order_id} committed with "
                        f"{inserted}/{len(batch)} details "
                        f"(total {state.tally})")

        state.reset()
