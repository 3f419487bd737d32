"""
import_engine.record_parser - Classify one raw input line.

Single-responsibility: given a line, return an OrderHeader, an
ItemDetail or an Unrecognized record.  No I/O, no validation of the
date or quantity text; that happens when the record is applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import config

ORDER_TOKEN = "order"
ITEM_TOKEN  = "item"


@dataclass(frozen=True)
class OrderHeader:
    date_text: str


@dataclass(frozen=True)
class ItemDetail:
    quantity_text: str
    description: str


@dataclass(frozen=True)
class Unrecognized:
    raw: str


Record = Union[OrderHeader, ItemDetail, Unrecognized]


def parse_record(line: str, delimiter: str = config.FIELD_DELIMITER) -> Record:
    """
    ``order,<date>``              → OrderHeader
    ``item,<quantity>,<desc>``    → ItemDetail
    anything else, including a known token with too few fields,
    → Unrecognized
    """
    fields = line.split(delimiter)
    kind = fields[0].strip().lower()

    if kind == ORDER_TOKEN and len(fields) >= 2:
        return OrderHeader(date_text=fields[1])
    if kind == ITEM_TOKEN and len(fields) >= 3:
        return ItemDetail(quantity_text=fields[1], description=fields[2])
    return Unrecognized(raw=line)
