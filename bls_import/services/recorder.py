from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from ..config.loader import DEFAULT_TOTAL_POSSIBLE, ZeroScorePolicy
from ..db.result_writer import ResultWriteError, ResultWriter
from ..models.import_row import ImportRow
from ..models.participant import Participant
from ..models.result_record import ResultKind, ResultRecord, WriteOutcome

"""Result recording for matched rows.

For each matched row at most two records are written, pre-test first. The
two writes are independent: a rejected pre-test record does not stop the
post-test attempt. Failures come back as WriteOutcome(success=False)
rather than exceptions so the caller can keep going with the next row.
"""

__all__ = [
    "ResultRecorder",
    "is_attempted",
]

logger = logging.getLogger(__name__)


def is_attempted(score: int | None, policy: ZeroScorePolicy) -> bool:
    """Whether a score cell counts as a sat test under ``policy``."""
    if score is None:
        return False
    if policy is ZeroScorePolicy.NOT_ATTEMPTED:
        return score > 0
    return score >= 0


class ResultRecorder:
    def __init__(
        self,
        writer: ResultWriter,
        total_possible: int = DEFAULT_TOTAL_POSSIBLE,
        zero_score_policy: ZeroScorePolicy = ZeroScorePolicy.NOT_ATTEMPTED,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.writer = writer
        self.total_possible = total_possible
        self.zero_score_policy = zero_score_policy
        self._clock = clock or (lambda: datetime.now(UTC))

    def build_records(self, row: ImportRow, participant: Participant) -> list[ResultRecord]:
        """Records that ``row`` should produce, without writing them."""
        records: list[ResultRecord] = []
        for kind, score in ((ResultKind.BEFORE, row.score_before), (ResultKind.AFTER, row.score_after)):
            if score is None or not is_attempted(score, self.zero_score_policy):
                continue
            records.append(
                ResultRecord(
                    participant_id=participant.id,
                    kind=kind,
                    score=score,
                    total_possible=self.total_possible,
                    submitted_at=self._clock(),
                    is_complete=True,
                )
            )
        return records

    def record(self, row: ImportRow, participant: Participant) -> list[WriteOutcome]:
        outcomes: list[WriteOutcome] = []
        for rec in self.build_records(row, participant):
            try:
                record_id = self.writer.insert(rec, participant)
            except ResultWriteError as e:
                logger.warning(f"row {row.row_number}: {rec.kind.label} write failed for {participant.email}: {e}")
                outcomes.append(
                    WriteOutcome(kind=rec.kind, success=False, message=f"Failed to save {rec.kind.label} result: {e}")
                )
                continue
            outcomes.append(WriteOutcome(kind=rec.kind, success=True, record_id=record_id))
        return outcomes
