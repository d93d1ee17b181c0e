from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from ..models.participant import Participant
from ..models.result_record import ResultRecord

"""Result write boundary.

A ResultWriter accepts one ResultRecord (plus the matched participant, whose
details are copied into the submission row) and returns the new record id
or raises ResultWriteError. Writers never retry.

PostgresResultWriter expects an autocommit connection: every insert is its
own transaction, so one rejected record leaves earlier and later writes
untouched.
"""

__all__ = [
    "ResultWriteError",
    "ResultWriter",
    "WriteMetrics",
    "log_write_metrics",
    "PostgresResultWriter",
    "InMemoryResultWriter",
    "DEFAULT_JOB_CATEGORY",
]

logger = logging.getLogger(__name__)

DEFAULT_JOB_CATEGORY = "Non-Clinical"

_INSERT_SQL = (
    "INSERT INTO test_submissions ("
    "user_id, user_name, user_email, ic_number, job_position_name, job_category, "
    "test_type, score, total_questions, correct_answers, time_taken_seconds, "
    "submitted_at, is_completed, attempt_number"
    ") VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s) RETURNING id"
)

_ATTEMPT_SQL = (
    "SELECT COALESCE(MAX(attempt_number), 0) FROM test_submissions "
    "WHERE user_id = %s AND test_type = %s"
)

_JOB_CATEGORY_SQL = "SELECT category FROM jobs WHERE id = %s"


class ResultWriteError(Exception):
    pass


class ResultWriter(Protocol):
    def insert(self, record: ResultRecord, participant: Participant) -> str: ...


@dataclass(frozen=True)
class WriteMetrics:
    """Timing of one insert (sent to the optional metrics callback)."""
    participant_id: str
    test_type: str
    elapsed_seconds: float
    success: bool


def log_write_metrics(metrics: WriteMetrics) -> None:
    """Metrics callback that logs per-insert timing at DEBUG (shown with --debug)."""
    status = "ok" if metrics.success else "failed"
    logger.debug(
        f"insert {metrics.test_type} participant={metrics.participant_id} "
        f"{status} in {metrics.elapsed_seconds * 1000:.1f}ms"
    )


class PostgresResultWriter:
    """Writes ``test_submissions`` rows through a psycopg2 cursor."""

    def __init__(
        self,
        cursor: Any,
        metrics_callback: Callable[[WriteMetrics], None] | None = None,
    ) -> None:
        self._cursor = cursor
        self._metrics_callback = metrics_callback
        self._job_categories: dict[str, str] = {}

    def _job_category(self, job_position_id: str | None) -> str:
        if not job_position_id:
            return DEFAULT_JOB_CATEGORY
        if job_position_id not in self._job_categories:
            self._cursor.execute(_JOB_CATEGORY_SQL, (job_position_id,))
            row = self._cursor.fetchone()
            self._job_categories[job_position_id] = (row[0] if row and row[0] else DEFAULT_JOB_CATEGORY)
        return self._job_categories[job_position_id]

    def _next_attempt_number(self, participant_id: str, test_type: str) -> int:
        self._cursor.execute(_ATTEMPT_SQL, (participant_id, test_type))
        row = self._cursor.fetchone()
        previous = row[0] if row and row[0] is not None else 0
        return int(previous) + 1

    def insert(self, record: ResultRecord, participant: Participant) -> str:
        test_type = record.kind.value
        start = time.time()
        success = False
        try:
            job_category = self._job_category(participant.job_position_id)
            attempt = self._next_attempt_number(record.participant_id, test_type)
            self._cursor.execute(
                _INSERT_SQL,
                (
                    record.participant_id,
                    participant.name,
                    participant.email,
                    participant.id_number,
                    participant.job_position_name,
                    job_category,
                    test_type,
                    record.score,
                    record.total_possible,
                    record.score,  # correct_answers: one point per question
                    0,
                    record.submitted_at.isoformat(),
                    record.is_complete,
                    attempt,
                ),
            )
            row = self._cursor.fetchone()
            success = True
        except Exception as e:
            raise ResultWriteError(str(e)) from e
        finally:
            if self._metrics_callback is not None:
                self._metrics_callback(
                    WriteMetrics(
                        participant_id=record.participant_id,
                        test_type=test_type,
                        elapsed_seconds=time.time() - start,
                        success=success,
                    )
                )
        if not row:
            raise ResultWriteError("insert returned no id")
        return str(row[0])


class InMemoryResultWriter:
    """Collects records instead of writing them (dry runs, tests).

    Inserts for participant ids in ``fail_for`` raise ResultWriteError.
    """

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.records: list[ResultRecord] = []
        self._fail_for = fail_for or set()

    def insert(self, record: ResultRecord, participant: Participant) -> str:
        if record.participant_id in self._fail_for:
            raise ResultWriteError(f"insert rejected for participant {record.participant_id}")
        self.records.append(record)
        record_id = f"dry-{len(self.records)}"
        logger.debug(
            f"dry-run: {record.kind.value} score={record.score}/{record.total_possible} "
            f"participant={participant.email} id={record_id}"
        )
        return record_id
