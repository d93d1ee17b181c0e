from __future__ import annotations

from collections.abc import Iterable, Mapping

from ..models.import_row import ImportRow
from ..models.participant import Participant

"""Participant matching by email.

The index is keyed by the trimmed, lowercased email. When the directory
holds two participants with the same key the later one wins; callers that
care use find_duplicate_emails() to surface them.
"""

__all__ = [
    "normalize_email",
    "build_index",
    "find_duplicate_emails",
    "resolve",
]


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def build_index(participants: Iterable[Participant]) -> dict[str, Participant]:
    index: dict[str, Participant] = {}
    for participant in participants:
        key = normalize_email(participant.email)
        if not key:
            continue
        index[key] = participant
    return index


def find_duplicate_emails(participants: Iterable[Participant]) -> list[str]:
    """Lowercased emails that occur more than once, in first-seen order."""
    seen: set[str] = set()
    duplicates: list[str] = []
    for participant in participants:
        key = normalize_email(participant.email)
        if not key:
            continue
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    return duplicates


def resolve(row: ImportRow, index: Mapping[str, Participant]) -> Participant | None:
    return index.get(row.normalized_email)
