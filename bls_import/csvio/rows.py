from __future__ import annotations

from collections.abc import Iterable

from ..models.import_row import ImportRow, ParsedImport, RowError
from .parser import parse_csv

"""Row validation at the parse boundary.

Column layout of a results sheet (positional, extra columns ignored):

    email, name, ic, pre test, post test

A leading header row is recognised by its first cell and skipped. Data
rows are numbered from 1 in input order, and the same numbers are used in
the import report.
"""

__all__ = [
    "EXPECTED_COLUMNS",
    "TEMPLATE_HEADER",
    "MISSING_REQUIRED_FIELDS",
    "INVALID_SCORE",
    "is_header",
    "parse_score",
    "to_import_row",
    "parse_import_rows",
    "generate_sample_template",
]

TEMPLATE_HEADER = ["email", "name", "ic", "pre test", "post test"]
EXPECTED_COLUMNS = len(TEMPLATE_HEADER)

HEADER_ALIASES = {"email", "e-mail", "emel", "email address"}

MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
INVALID_SCORE = "INVALID_SCORE"

_SAMPLE_ROWS = [
    ["john.doe@gmail.com", "JOHN DOE", "123456789012", "20", "25"],
    ["jane.smith@gmail.com", "JANE SMITH", "123456789013", "18", "22"],
]


def is_header(fields: list[str]) -> bool:
    return bool(fields) and fields[0].strip().lower() in HEADER_ALIASES


def parse_score(text: str) -> int | None:
    """Parse a score cell.

    Blank -> None (not attempted). Integral decimals ("20.0") are accepted
    since spreadsheet exports produce them.

    Raises:
        ValueError: for anything that is not a non-negative whole number
    """
    stripped = text.strip()
    if not stripped:
        return None
    try:
        value = int(stripped)
    except ValueError:
        as_float = float(stripped)  # ValueError propagates for "abc"
        if not as_float.is_integer():
            raise ValueError(f"not a whole number: {stripped}") from None
        value = int(as_float)
    if value < 0:
        raise ValueError(f"negative score: {stripped}")
    return value


def to_import_row(row_number: int, fields: list[str]) -> ImportRow | RowError:
    if len(fields) < EXPECTED_COLUMNS:
        return RowError(row_number, MISSING_REQUIRED_FIELDS, "Missing required fields")
    email, name, id_number, before_text, after_text = fields[:EXPECTED_COLUMNS]
    if not email or not name or not id_number:
        return RowError(row_number, MISSING_REQUIRED_FIELDS, "Missing required fields")
    try:
        score_before = parse_score(before_text)
        score_after = parse_score(after_text)
    except ValueError:
        return RowError(row_number, INVALID_SCORE, "Invalid test scores")
    return ImportRow(
        row_number=row_number,
        email=email,
        name=name,
        id_number=id_number,
        score_before=score_before,
        score_after=score_after,
    )


def _validate(rows: Iterable[list[str]]) -> ParsedImport:
    parsed = ParsedImport()
    row_number = 0
    for fields in rows:
        if not any(fields):
            # padding such as ",,,," left by spreadsheet exports
            continue
        if row_number == 0 and parsed.header is None and is_header(fields):
            parsed.header = fields
            continue
        row_number += 1
        result = to_import_row(row_number, fields)
        if isinstance(result, RowError):
            parsed.row_errors.append(result)
        else:
            parsed.rows.append(result)
    return parsed


def parse_import_rows(text: str) -> ParsedImport:
    """The "Parse" step: raw CSV text -> validated rows + rejected rows."""
    return _validate(parse_csv(text))


def generate_sample_template() -> str:
    """Fixed header plus example rows, as offered for download."""
    lines = [",".join(TEMPLATE_HEADER)]
    lines.extend(",".join(r) for r in _SAMPLE_ROWS)
    return "\n".join(lines) + "\n"
