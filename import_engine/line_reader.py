"""
import_engine.line_reader - Low-level input reading and cleaning.

Responsibilities:
  • BOM removal (UTF-8 / UTF-8-SIG)
  • Decoding bytes with replacement of invalid sequences
  • Splitting into lines; blank lines are kept so line numbers
    in diagnostics match the source file
"""

from __future__ import annotations


def read_lines(raw: str | bytes) -> list[str]:
    """
    Accept raw file content (bytes or str), clean it,
    and return its lines.  Returns [] if content is empty.
    """
    text = _decode(raw)
    if not text:
        return []
    return text.splitlines()


def _decode(raw: str | bytes) -> str:
    """UTF-8 text without a leading BOM; undecodable bytes become U+FFFD."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8-sig", errors="replace")
    return raw.removeprefix("\ufeff")
