"""
import_engine - Order file import pipeline.

Public API:
    run_import(file_content) → ImportReport
"""

from import_engine.importer import run_import                     # noqa: F401
from import_engine.report import ImportReport                     # noqa: F401
from import_engine.errors import ImportAborted, RecordError       # noqa: F401
