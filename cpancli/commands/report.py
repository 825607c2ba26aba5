"""Rendering of query results in the three report formats.

- ``simple``: the classic plain-text layout, one line (or block) per row
- ``table``: a Rich table
- ``json``: a JSON array of row objects on stdout
"""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from cpancli.utils import print_table

Row = Dict[str, Any]

#: (row key, column label) pairs, in display order.
Columns = Sequence[Tuple[str, str]]


def render(
    rows: List[Row],
    *,
    output_format: str,
    columns: Columns,
    simple: Callable[[Row], str],
    preamble: Sequence[str] = (),
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Row], Optional[str]]] = None,
) -> None:
    """Print ``rows`` in ``output_format``.

    Args:
        rows: Result rows keyed by field name.
        output_format: ``simple``, ``table`` or ``json``.
        columns: Fields shown in table output, with their labels.
        simple: Formats one row for ``simple`` output.
        preamble: Header lines printed before ``simple`` rows.
        title: Table title.
        column_styles: Per-label Rich column styles.
        row_styler: Returns a Rich style for a table row (keyed by label).
    """
    if output_format == "json":
        print(json.dumps(rows, indent=2))
        return

    if output_format == "table":
        if not rows:
            return
        labels = [label for _, label in columns]
        data = [
            {label: _cell(row.get(key)) for key, label in columns}
            for row in rows
        ]
        print_table(
            data,
            headers=labels,
            title=title,
            column_styles=column_styles,
            row_styler=row_styler,
        )
        return

    for line in preamble:
        print(line)
    for row in rows:
        print(simple(row))


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)
