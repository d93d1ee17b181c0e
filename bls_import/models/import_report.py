from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

"""ImportReport aggregator.

Created once per import run and mutated only by the processing loop, in
processing order. It is displayed (or rendered as a SUMMARY line) after
the run and never persisted.
"""

__all__ = [
    "ImportReport",
]


@dataclass
class ImportReport:
    """Counts and per-row failures for one import run.

    Attributes:
        total_rows: Every input data row, whatever its outcome
        matched_count: Rows resolved to a participant
        recorded_count: Successful result writes (0, 1 or 2 per row)
        errors: ``"Row <n>: <message>"`` entries for rejected rows and failed writes
        unmatched_emails: ``"<email> (<name>)"`` for rows with no participant
        duplicate_emails: Directory emails seen more than once (last entry wins)
    """
    total_rows: int = 0
    matched_count: int = 0
    recorded_count: int = 0
    errors: list[str] = field(default_factory=list)
    unmatched_emails: list[str] = field(default_factory=list)
    duplicate_emails: list[str] = field(default_factory=list)
    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None

    @property
    def success(self) -> bool:
        """True only when no row error or write failure occurred."""
        return not self.errors

    @property
    def elapsed_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()

    def add_row(self) -> None:
        self.total_rows += 1

    def add_match(self) -> None:
        self.matched_count += 1

    def add_recorded(self) -> None:
        self.recorded_count += 1

    def add_unmatched(self, email: str, name: str) -> None:
        self.unmatched_emails.append(f"{email} ({name})")

    def add_error(self, row_number: int, message: str) -> None:
        self.errors.append(f"Row {row_number}: {message}")

    def finish(self) -> None:
        self.end_time = datetime.now(UTC)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the field names of the results screen."""
        return {
            "success": self.success,
            "totalRows": self.total_rows,
            "matchedProfiles": self.matched_count,
            "importedResults": self.recorded_count,
            "errors": list(self.errors),
            "unmatchedEmails": list(self.unmatched_emails),
            "duplicateEmails": list(self.duplicate_emails),
        }
