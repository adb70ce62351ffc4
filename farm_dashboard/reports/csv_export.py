"""
CSV serialization for report rows.
"""

import csv
import io
from typing import Any, Mapping, Sequence


def format_value(value: Any) -> str:
    """
    Render one cell.

    None is empty, booleans are lowercase and whole floats drop their
    fractional part (0.0 renders as ``0``).
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def rows_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """
    Serialize flat rows to CSV text.

    The header comes from the first row's keys; every cell is quoted.
    Keys missing from later rows render empty and extra keys are ignored.

    Returns:
        CSV text, or an empty string when there are no rows
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([format_value(row.get(header)) for header in headers])
    return buffer.getvalue()
