"""Generic CSV generation for admin exports."""

import csv
import io
from dataclasses import dataclass
from typing import Any, Callable, Iterable


@dataclass
class ColumnDef:
    """Definition for a single CSV column."""
    header: str
    getter: Callable[[Any], Any]


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "yes" if value else "no"
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def rows_to_csv(columns: list[ColumnDef], rows: Iterable[Any]) -> str:
    """Render a header line plus one line per row.

    Values containing commas, quotes or newlines are quoted and escaped
    by the csv module (minimal quoting, doubled quotes).
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow([c.header for c in columns])
    for row in rows:
        writer.writerow([_cell(c.getter(row)) for c in columns])
    return output.getvalue()
