from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from bls_import.config.loader import ImportSettings, ZeroScorePolicy
from bls_import.csvio.rows import parse_import_rows
from bls_import.db.result_writer import InMemoryResultWriter
from bls_import.logging.error_log import ErrorLogBuffer
from bls_import.logging.init import reset_logging
from bls_import.models.participant import Participant
from bls_import.services.orchestrator import ProcessingError, import_rows, run_import


@pytest.fixture()
def error_log(tmp_path: Path) -> ErrorLogBuffer:
    return ErrorLogBuffer(logs_dir=tmp_path / "logs")


def _log_lines(buf: ErrorLogBuffer) -> list[dict]:
    return [json.loads(line) for line in buf.file_path.read_text(encoding="utf-8").splitlines()]


def test_directory_failure_is_fatal(error_log):
    writer = InMemoryResultWriter()

    def broken_directory():
        raise RuntimeError("connection refused")

    with pytest.raises(ProcessingError, match="connection refused"):
        run_import("john@x.com,John,1,20,25\n", broken_directory, writer, error_log=error_log)
    assert writer.records == []
    lines = _log_lines(error_log)
    assert lines[0]["row"] == -1
    assert lines[0]["error_type"] == "DIRECTORY_READ_FAILED"


def test_counts_across_mixed_rows(participants, error_log):
    text = (
        "email,name,ic,pre test,post test\n"
        "john@x.com,John Doe,900101-01-1111,20,25\n"
        "ghost@x.com,Ghost,1,10,10\n"
        ",Missing Email,1,10,10\n"
        "jane.smith@x.com,Jane Smith,870123-45-6789,0,22\n"
        "ali@x.com,Ali,880202-02-2222,0,0\n"
    )
    writer = InMemoryResultWriter()
    report = run_import(text, lambda: participants, writer, source="results.csv", error_log=error_log)

    assert report.total_rows == 5
    assert report.matched_count == 3
    assert report.recorded_count == 3
    assert report.unmatched_emails == ["ghost@x.com (Ghost)"]
    assert report.errors == ["Row 3: Missing required fields"]
    assert not report.success
    assert report.end_time is not None
    lines = _log_lines(error_log)
    assert [(r["source"], r["row"], r["error_type"]) for r in lines] == [
        ("results.csv", 3, "MISSING_REQUIRED_FIELDS")
    ]


def test_write_failures_are_recorded_per_row(participants, error_log):
    writer = InMemoryResultWriter(fail_for={"p-1"})
    text = "john@x.com,John,1,20,25\njane.smith@x.com,Jane,2,18,22\n"
    report = run_import(text, lambda: participants, writer, error_log=error_log)

    assert report.matched_count == 2
    assert report.recorded_count == 2
    assert len(report.errors) == 2
    assert report.errors[0].startswith("Row 1: Failed to save pre-test result")
    assert report.errors[1].startswith("Row 1: Failed to save post-test result")
    assert {r["error_type"] for r in _log_lines(error_log)} == {"WRITE_FAILED"}


def test_unexpected_writer_error_only_loses_that_row(participants, error_log):
    class ExplodingWriter(InMemoryResultWriter):
        def insert(self, record, participant):
            if participant.id == "p-1":
                raise KeyError("boom")
            return super().insert(record, participant)

    writer = ExplodingWriter()
    text = "john@x.com,John,1,20,25\njane.smith@x.com,Jane,2,18,22\n"
    report = run_import(text, lambda: participants, writer, error_log=error_log)
    assert report.recorded_count == 2
    assert len(report.errors) == 1
    assert report.errors[0].startswith("Row 1:")


def test_duplicate_directory_emails_are_reported(error_log):
    directory = [
        Participant(id="old", email="dup@x.com", name="Old"),
        Participant(id="new", email="DUP@x.com", name="New"),
    ]
    writer = InMemoryResultWriter()
    report = run_import("dup@x.com,Dup,1,10,0\n", lambda: directory, writer, error_log=error_log)
    assert report.duplicate_emails == ["dup@x.com"]
    assert writer.records[0].participant_id == "new"
    assert report.success


def test_settings_flow_into_recorder(participants, error_log):
    settings = ImportSettings(total_possible=40, zero_score_policy=ZeroScorePolicy.RECORD)
    writer = InMemoryResultWriter()
    report = run_import("john@x.com,John,1,0,35\n", lambda: participants, writer, settings, error_log=error_log)
    assert report.recorded_count == 2
    assert [(r.score, r.total_possible) for r in writer.records] == [(0, 40), (35, 40)]


def test_import_rows_reuses_preview(participants, error_log):
    parsed = parse_import_rows("john@x.com,John,1,20,\n")
    writer = InMemoryResultWriter()
    report = import_rows(parsed, lambda: participants, writer, error_log=error_log)
    assert report.recorded_count == 1
    assert writer.records[0].score == 20


def test_no_errors_means_no_log_file(participants, error_log):
    run_import("john@x.com,John,1,20,25\n", lambda: participants, InMemoryResultWriter(), error_log=error_log)
    assert not error_log.file_path.parent.exists()


def test_closing_log_line_counts_error_records(participants, error_log, caplog):
    reset_logging()
    text = "john@x.com,,1,20,25\njane.smith@x.com,Jane,2,x,1\nali@x.com,Ali,3,5,6\n"
    with caplog.at_level(logging.INFO, logger="bls_import"):
        run_import(text, lambda: participants, InMemoryResultWriter(fail_for={"p-3"}), error_log=error_log)
    closing = [r.getMessage() for r in caplog.records if r.getMessage().startswith("error details written to")]
    assert closing == [
        f"error details written to {error_log.file_path}: 4 record(s) "
        "(INVALID_SCORE=1 MISSING_REQUIRED_FIELDS=1 WRITE_FAILED=2)"
    ]
