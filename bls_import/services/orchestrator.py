from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from ..config.loader import ImportSettings
from ..csvio.rows import parse_import_rows
from ..db.result_writer import ResultWriter
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.import_report import ImportReport
from ..models.import_row import ImportRow, ParsedImport, RowError
from ..models.participant import Participant
from .matcher import build_index, find_duplicate_emails, resolve
from .progress import ProgressTracker
from .recorder import ResultRecorder

logger = logging.getLogger(__name__)

"""Import orchestration.

    text -> parse/validate -> directory read -> index -> per row:
        resolve -> record -> report

The directory read is the only fatal step: when it fails nothing has been
written and ProcessingError is raised. After that every row is independent
and best effort. Row problems are collected in the ImportReport and the
JSON Lines error log; processing always continues with the next row.
"""

__all__ = [
    "ProcessingError",
    "DirectoryReader",
    "DIRECTORY_READ_FAILED",
    "WRITE_FAILED",
    "ROW_PROCESSING_ERROR",
    "run_import",
    "import_rows",
]

DirectoryReader = Callable[[], list[Participant]]

DIRECTORY_READ_FAILED = "DIRECTORY_READ_FAILED"
WRITE_FAILED = "WRITE_FAILED"
ROW_PROCESSING_ERROR = "ROW_PROCESSING_ERROR"


class ProcessingError(Exception):
    """Fatal error: the run was aborted before any row was processed."""


def _load_directory(read_directory: DirectoryReader, source: str, error_log: ErrorLogBuffer) -> list[Participant]:
    try:
        return read_directory()
    except Exception as e:
        error_log.append(ErrorRecord.create(source, -1, DIRECTORY_READ_FAILED, str(e)))
        error_log.flush()
        raise ProcessingError(f"Import failed: {e}") from e


def _record_row_error(report: ImportReport, error_log: ErrorLogBuffer, source: str, err: RowError) -> None:
    report.add_error(err.row_number, err.message)
    error_log.append(ErrorRecord.create(source, err.row_number, err.error_type, err.message))


def _process_row(
    row: ImportRow,
    index: Mapping[str, Participant],
    recorder: ResultRecorder,
    report: ImportReport,
    error_log: ErrorLogBuffer,
    source: str,
) -> None:
    participant = resolve(row, index)
    if participant is None:
        logger.debug(f"row {row.row_number}: no participant for {row.email}")
        report.add_unmatched(row.email, row.name)
        return

    report.add_match()
    try:
        outcomes = recorder.record(row, participant)
    except Exception as e:
        # writer bugs and the like: still only this row is lost
        logger.error(f"row {row.row_number}: unexpected error: {e}")
        _record_row_error(report, error_log, source, RowError(row.row_number, ROW_PROCESSING_ERROR, str(e)))
        return

    for outcome in outcomes:
        if outcome.success:
            report.add_recorded()
        else:
            _record_row_error(
                report,
                error_log,
                source,
                RowError(row.row_number, WRITE_FAILED, outcome.message or "write failed"),
            )


def import_rows(
    parsed: ParsedImport,
    read_directory: DirectoryReader,
    writer: ResultWriter,
    settings: ImportSettings | None = None,
    *,
    source: str = "<text>",
    error_log: ErrorLogBuffer | None = None,
) -> ImportReport:
    """Run the reconciliation pipeline over already parsed rows.

    Args:
        parsed: Output of the parse step (rows and rejected rows)
        read_directory: Returns the participant directory; any exception is fatal
        writer: Result write boundary
        settings: Import settings (defaults when None)
        source: Name used in error log records
        error_log: Error log buffer (a fresh one writing to ./logs when None)

    Returns:
        The finished ImportReport

    Raises:
        ProcessingError: If the participant directory cannot be read
    """
    settings = settings or ImportSettings()
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    report = ImportReport()

    participants = _load_directory(read_directory, source, error_log)
    index = build_index(participants)
    logger.info(f"directory: {len(participants)} participants, {len(index)} distinct emails")

    duplicates = find_duplicate_emails(participants)
    if duplicates:
        report.duplicate_emails.extend(duplicates)
        logger.warning(
            f"directory has {len(duplicates)} duplicate email(s); the last entry wins: {', '.join(duplicates)}"
        )

    recorder = ResultRecorder(
        writer,
        total_possible=settings.total_possible,
        zero_score_policy=settings.zero_score_policy,
    )

    with ProgressTracker(parsed.total_rows) as progress:
        for item in parsed.in_order():
            report.add_row()
            if isinstance(item, RowError):
                _record_row_error(report, error_log, source, item)
            else:
                _process_row(item, index, recorder, report, error_log, source)
            progress.advance(
                matched=report.matched_count,
                recorded=report.recorded_count,
                errors=len(report.errors),
            )

    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning(f"failed to write error log: {e}")
    else:
        if report.errors and path is not None:
            by_type = " ".join(f"{k}={v}" for k, v in error_log.counts_by_type().items())
            logger.info(f"error details written to {path}: {error_log.total} record(s) ({by_type})")

    report.finish()
    return report


def run_import(
    text: str,
    read_directory: DirectoryReader,
    writer: ResultWriter,
    settings: ImportSettings | None = None,
    *,
    source: str = "<text>",
    error_log: ErrorLogBuffer | None = None,
) -> ImportReport:
    """Parse ``text`` and run the import. See import_rows()."""
    parsed = parse_import_rows(text)
    logger.info(f"parsed {len(parsed.rows)} valid row(s), {len(parsed.row_errors)} rejected")
    return import_rows(parsed, read_directory, writer, settings, source=source, error_log=error_log)
