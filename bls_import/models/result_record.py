from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Result record models for the BLS results importer.

ResultRecord is the append-only outcome record written against a matched
participant, one per attempted test half. WriteOutcome reports what
happened to each attempted write.
"""

__all__ = [
    "ResultKind",
    "ResultRecord",
    "WriteOutcome",
]


class ResultKind(Enum):
    """Which assessment checkpoint a record belongs to.

    The value is the ``test_type`` stored in ``test_submissions``.
    """
    BEFORE = "pre_test"
    AFTER = "post_test"

    @property
    def label(self) -> str:
        return "pre-test" if self is ResultKind.BEFORE else "post-test"


@dataclass(frozen=True)
class ResultRecord:
    participant_id: str
    kind: ResultKind
    score: int
    total_possible: int
    submitted_at: datetime  # UTC
    is_complete: bool = True


@dataclass(frozen=True)
class WriteOutcome:
    kind: ResultKind
    success: bool
    record_id: str | None = None
    message: str | None = None  # failure reason, None on success
