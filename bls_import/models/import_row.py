from __future__ import annotations

from dataclasses import dataclass, field

"""ImportRow model for the BLS results importer.

An ImportRow is one validated line of an uploaded results spreadsheet,
prior to being matched against a participant profile. Rows that cannot be
validated become RowError instead, so nothing loosely shaped reaches the
matching or recording stages.
"""

__all__ = [
    "ImportRow",
    "RowError",
    "ParsedImport",
]


@dataclass(frozen=True)
class ImportRow:
    """Validated import row.

    Scores are ``None`` when the cell was left blank, which always means the
    participant did not sit that test. Whether an explicit ``0`` also means
    "not attempted" is decided by the recorder's zero-score policy.
    """
    row_number: int  # 1-based data row number (header excluded)
    email: str
    name: str
    id_number: str  # IC number in the source sheets
    score_before: int | None  # pre-test
    score_after: int | None  # post-test

    @property
    def normalized_email(self) -> str:
        return self.email.strip().lower()


@dataclass(frozen=True)
class RowError:
    """A data row rejected at the parse boundary."""
    row_number: int
    error_type: str  # UPPER_SNAKE
    message: str


@dataclass
class ParsedImport:
    """Result of the "Parse" step: validated rows plus rejected rows, in input order."""
    rows: list[ImportRow] = field(default_factory=list)
    row_errors: list[RowError] = field(default_factory=list)
    header: list[str] | None = None

    @property
    def total_rows(self) -> int:
        return len(self.rows) + len(self.row_errors)

    def in_order(self) -> list[ImportRow | RowError]:
        """All rows and row errors merged back into input order."""
        merged: list[ImportRow | RowError] = [*self.rows, *self.row_errors]
        return sorted(merged, key=lambda item: item.row_number)
