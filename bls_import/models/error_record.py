from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for structured error logging.

Every row-level failure of an import run (and every run-level fatal error)
is written to the JSON Lines error log as one ErrorRecord. Run-level errors
use row=-1 since no single row is at fault.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Name of the imported file (or "<stdin>" / "<text>")
        row: Data row number (1-based). -1 for run-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str
    source: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON Lines entry (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
