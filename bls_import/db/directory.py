from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..csvio.parser import parse_csv, read_source_file
from ..models.participant import Participant

"""Participant directory readers.

fetch_participants() reads the ``profiles`` table through a DB-API cursor.
load_participants_file() reads an exported directory (CSV/XLSX with the
same column names) for dry runs without a database.

Any failure here is fatal for an import run and surfaces as
DirectoryReadError.
"""

__all__ = [
    "DirectoryReadError",
    "PARTICIPANT_COLUMNS",
    "fetch_participants",
    "load_participants_file",
]

logger = logging.getLogger(__name__)

PARTICIPANT_COLUMNS = ("id", "email", "name", "ic_number", "job_position_name", "job_position_id")

_SELECT_SQL = (
    f"SELECT {', '.join(PARTICIPANT_COLUMNS)} FROM profiles "
    "WHERE user_type = %s AND status = %s"
)


class DirectoryReadError(Exception):
    pass


def _row_to_participant(row: Any) -> Participant:
    if isinstance(row, dict):
        return Participant.from_mapping(row)
    return Participant.from_mapping(dict(zip(PARTICIPANT_COLUMNS, row, strict=False)))


def fetch_participants(
    cursor: Any, user_type: str = "participant", status: str = "approved"
) -> list[Participant]:
    """Return all directory entries with the given user type and status."""
    try:
        cursor.execute(_SELECT_SQL, (user_type, status))
        rows = cursor.fetchall()
    except Exception as e:
        raise DirectoryReadError(f"Failed to fetch profiles: {e}") from e
    participants = [_row_to_participant(r) for r in rows]
    logger.debug(f"directory: {len(participants)} participants (user_type={user_type} status={status})")
    return participants


def load_participants_file(path: Path) -> list[Participant]:
    """Read an exported directory file. The first line must be the header."""
    try:
        text = read_source_file(path)
    except OSError as e:
        raise DirectoryReadError(f"Failed to read participants file {path}: {e}") from e
    rows = list(parse_csv(text))
    if not rows:
        return []
    header = [h.strip().lower() for h in rows[0]]
    if "id" not in header or "email" not in header:
        raise DirectoryReadError(f"participants file {path.name} needs at least 'id' and 'email' columns")
    participants: list[Participant] = []
    for fields in rows[1:]:
        data = dict(zip(header, fields, strict=False))
        if not data.get("id"):
            continue
        participants.append(Participant.from_mapping(data))
    return participants
