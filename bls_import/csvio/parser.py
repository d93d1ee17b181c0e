from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pandas as pd

"""Delimited text parsing for uploaded results sheets.

parse_csv() is deliberately small: comma separated, double quotes group a
field (embedded commas kept, the quote characters themselves dropped) and
every field is whitespace-trimmed. Column count validation is left to the
caller.

read_source_file() is the file based entry point. XLSX workbooks are read
with pandas and re-emitted as quoted CSV text so that both file kinds go
through the same parser.
"""

__all__ = [
    "UnsupportedFileError",
    "SUPPORTED_SUFFIXES",
    "parse_csv",
    "parse_line",
    "read_source_file",
    "read_excel_as_csv",
]

SUPPORTED_SUFFIXES = (".csv", ".xlsx")


class UnsupportedFileError(Exception):
    """Raised for files that are neither .csv nor .xlsx."""


def parse_line(line: str) -> list[str]:
    """Split one line on commas outside double quotes."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def parse_csv(text: str) -> Iterator[list[str]]:
    """Yield one list of fields per non-blank line of ``text``.

    Lazy and stateless: calling it again with the same text yields the same rows.
    """
    for line in text.split("\n"):
        if not line.strip():
            continue
        yield parse_line(line.rstrip("\r"))


def _cell_text(value: Any) -> str:
    if pd.isna(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # 20 stored as a number comes back as 20.0
        return str(int(value))
    # Alt+Enter line breaks inside a cell would split the row in parse_csv()
    text = str(value).replace("\r\n", " ").replace("\r", " ").replace("\n", " ")
    return text.strip()


def read_excel_as_csv(path: Path, sheet_name: str | int = 0) -> str:
    """Read one worksheet and render it as quoted CSV text.

    Embedded double quotes are dropped, matching what parse_csv() does
    with quotes anyway.
    """
    df = pd.read_excel(path, sheet_name=sheet_name, header=None, engine="openpyxl")
    lines: list[str] = []
    for _, raw in df.iterrows():
        if raw.isna().all():
            continue
        cells = [_cell_text(v).replace('"', "") for v in raw.tolist()]
        lines.append(",".join(f'"{c}"' for c in cells))
    return "\n".join(lines)


def read_source_file(path: Path) -> str:
    """Return the content of a .csv or .xlsx results file as CSV text."""
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedFileError(
            f"unsupported file type '{path.suffix}' (expected one of {', '.join(SUPPORTED_SUFFIXES)})"
        )
    if suffix == ".xlsx":
        return read_excel_as_csv(path)
    # utf-8-sig: spreadsheet exports often start with a BOM
    return path.read_text(encoding="utf-8-sig")
