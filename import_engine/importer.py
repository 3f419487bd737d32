"""
import_engine.importer - Top-level entry point.

Coordinates line_reader → record_parser → orchestrator → DB commit
inside one scoped session and produces a structured ImportReport.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from db.engine import session_scope
from import_engine.errors import ImportAborted, RecordError
from import_engine.line_reader import read_lines
from import_engine.orchestrator import ImportOrchestrator
from import_engine.report import ImportReport
from services.schema_gateway import SchemaGateway

logger = logging.getLogger(__name__)


def run_import(file_content: str | bytes) -> ImportReport:
    """
    Import an order file into the database.

    Parameters
    ----------
    file_content : raw file content (bytes or str)

    Returns
    -------
    ImportReport; report.details_inserted is the final tally

    Raises
    ------
    ImportAborted on a fatal error.  Orders committed before the
    failure stay committed; the order being read is rolled back.
    """
    try:
        exists = SchemaGateway().ensure_schema_exists()
    except SQLAlchemyError as exc:
        raise ImportAborted("bootstrap", str(exc)) from exc
    if not exists:
        raise ImportAborted("bootstrap", "order schema does not exist")

    lines = read_lines(file_content)
    report = ImportReport()

    try:
        with session_scope() as session:
            orchestrator = ImportOrchestrator(SchemaGateway(session), report)
            orchestrator.run(lines)
    except RecordError as exc:
        logger.error(f"Import aborted: {exc}")
        raise ImportAborted("import", exc.reason, line=exc.line) from exc
    except SQLAlchemyError as exc:
        logger.error(f"Import aborted by store error: {exc}")
        raise ImportAborted("import", str(exc), line=report.total_lines) from exc

    logger.info(f"{report.details_inserted} records added")
    return report
