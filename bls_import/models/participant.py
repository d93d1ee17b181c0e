from __future__ import annotations

from dataclasses import dataclass
from typing import Any

__all__ = [
    "Participant",
]


@dataclass(frozen=True)
class Participant:
    """Participant directory entry (``profiles`` table).

    Owned by the directory; the importer only reads it.
    """
    id: str
    email: str
    name: str
    id_number: str | None = None
    job_position_name: str | None = None
    job_position_id: str | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Participant:
        """Build from a directory row using the stored column names."""
        job_id = data.get("job_position_id")
        return cls(
            id=str(data["id"]),
            email=str(data.get("email") or ""),
            name=str(data.get("name") or ""),
            id_number=data.get("ic_number") or None,
            job_position_name=data.get("job_position_name") or None,
            job_position_id=str(job_id) if job_id not in (None, "") else None,
        )
