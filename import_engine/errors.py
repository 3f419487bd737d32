"""
import_engine.errors - Exceptions raised by the import pipeline.
"""

from __future__ import annotations

from typing import Optional


class ImportEngineError(Exception):
    """Base class for import pipeline failures."""
    pass


class RecordError(ImportEngineError):
    """Raised when a record cannot be converted (e.g. non-integer quantity)."""

    def __init__(self, line: int, reason: str):
        super().__init__(f"line {line}: {reason}")
        self.line = line
        self.reason = reason


class ImportAborted(ImportEngineError):
    """
    A fatal error stopped the run.  Everything not yet committed has
    been rolled back.  ``stage`` is "bootstrap" or "import".
    """

    def __init__(self, stage: str, reason: str, line: Optional[int] = None):
        where = f" at line {line}" if line is not None else ""
        super().__init__(f"{stage} failed{where}: {reason}")
        self.stage = stage
        self.reason = reason
        self.line = line
