from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-run JSON Lines error log.

Each import run owns one buffer. The file name is stamped when the buffer is
created (``errors-YYYYMMDD-HHMMSS.log``, UTC) but the file and its directory
only appear once a record is actually flushed; a clean run leaves no file.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    def __init__(self, logs_dir: Path | None = None, *, started_at: datetime | None = None) -> None:
        stamp = (started_at or datetime.now(UTC)).strftime(TIMESTAMP_FMT)
        self.file_path = (logs_dir if logs_dir is not None else LOGS_DIR) / f"errors-{stamp}.log"
        self._pending: list[ErrorRecord] = []
        self._written = 0
        self._types: Counter[str] = Counter()

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)
        self._types[record.error_type] += 1

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def total(self) -> int:
        """Records seen so far, flushed or not."""
        return self._written + len(self._pending)

    def counts_by_type(self) -> dict[str, int]:
        return dict(sorted(self._types.items()))

    def flush(self) -> Path | None:
        """Append pending records; returns the file path, or None if never written."""
        if self._pending:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            with self.file_path.open("a", encoding="utf-8") as f:
                f.writelines(r.to_json_line() + "\n" for r in self._pending)
            self._written += len(self._pending)
            self._pending.clear()
        return self.file_path if self._written else None
