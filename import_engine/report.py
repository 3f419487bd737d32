"""
import_engine.report - Structured result of an order import run.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ImportReport:
    total_lines: int = 0
    orders_committed: int = 0
    orders_rejected: int = 0
    details_inserted: int = 0   # the import tally
    details_dropped: int = 0    # items outside a valid order
    details_failed: int = 0     # submitted but refused by the store
    unrecognized: int = 0
    errors: list[dict] = field(default_factory=list)   # [{line, reason}]

    def add_error(self, line: int, reason: str):
        self.errors.append({"line": line, "reason": reason})

    def to_dict(self) -> dict:
        return {
            "total_lines": self.total_lines,
            "orders_committed": self.orders_committed,
            "orders_rejected": self.orders_rejected,
            "details_inserted": self.details_inserted,
            "details_dropped": self.details_dropped,
            "details_failed": self.details_failed,
            "unrecognized": self.unrecognized,
            "errors": self.errors,
        }
