from __future__ import annotations

from ..models.import_report import ImportReport

"""SUMMARY line rendering.

Format:
SUMMARY rows={n} matched={n} recorded={n} unmatched={n} errors={n} elapsed_sec={x}
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(report: ImportReport) -> str:
    """Render the SUMMARY line for a finished report.

    Examples:
        >>> report = ImportReport(total_rows=3, matched_count=2, recorded_count=4)
        >>> render_summary_line(report)
        'SUMMARY rows=3 matched=2 recorded=4 unmatched=0 errors=0 elapsed_sec=0'
    """
    return (
        f"SUMMARY rows={report.total_rows} "
        f"matched={report.matched_count} "
        f"recorded={report.recorded_count} "
        f"unmatched={len(report.unmatched_emails)} "
        f"errors={len(report.errors)} "
        f"elapsed_sec={_format_number(report.elapsed_seconds)}"
    )
