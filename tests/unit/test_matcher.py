from __future__ import annotations

from bls_import.models.import_row import ImportRow
from bls_import.models.participant import Participant
from bls_import.services.matcher import build_index, find_duplicate_emails, resolve


def _row(email: str) -> ImportRow:
    return ImportRow(row_number=1, email=email, name="X", id_number="1", score_before=1, score_after=1)


def test_resolve_is_case_insensitive(participants):
    index = build_index(participants)
    assert resolve(_row("JOHN@X.COM"), index).id == "p-1"
    assert resolve(_row(" jane.smith@x.com "), index).id == "p-2"


def test_resolve_not_found(participants):
    assert resolve(_row("ghost@x.com"), build_index(participants)) is None


def test_build_index_is_idempotent(participants):
    first = build_index(participants)
    second = build_index(participants)
    assert first == second
    for email in ("john@x.com", "jane.smith@x.com", "nobody@x.com"):
        assert resolve(_row(email), first) == resolve(_row(email), second)


def test_duplicate_email_last_entry_wins():
    dup = [
        Participant(id="old", email="Dup@x.com", name="Old"),
        Participant(id="new", email="dup@X.com", name="New"),
    ]
    assert resolve(_row("dup@x.com"), build_index(dup)).id == "new"
    assert find_duplicate_emails(dup) == ["dup@x.com"]


def test_participants_without_email_are_not_indexed():
    index = build_index([Participant(id="p", email="", name="No Mail")])
    assert index == {}
    assert find_duplicate_emails([Participant(id="a", email="", name="A"), Participant(id="b", email="", name="B")]) == []
