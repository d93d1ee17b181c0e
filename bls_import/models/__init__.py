"""Domain models for the BLS results importer.

This package contains the records that flow through one import run
(rows, participants, result records, the report) and the question-pool
models used by the pool assignment feature.
"""

from .import_report import ImportReport
from .import_row import ImportRow, ParsedImport, RowError
from .participant import Participant
from .question import PoolAssignments, Question, QuestionPool
from .result_record import ResultKind, ResultRecord, WriteOutcome

__all__ = [
    # Import pipeline models
    "ImportRow",
    "ParsedImport",
    "RowError",
    "Participant",
    "ResultKind",
    "ResultRecord",
    "WriteOutcome",
    "ImportReport",
    # Question pool models
    "Question",
    "QuestionPool",
    "PoolAssignments",
]
