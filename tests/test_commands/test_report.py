from __future__ import annotations

import json

import pytest

from cpancli.commands.report import _cell, render

COLUMNS = (("module", "Module"), ("version", "Version"))

ROWS = [
    {"module": "Carp", "version": "1.50"},
    {"module": "Business::ISBN", "version": None},
]


def _simple(row) -> str:
    return f"{row['module']}\t{row['version']}"


@pytest.mark.unit
class TestRender:
    """Tests for render()."""

    def test_simple_with_preamble(self, capsys) -> None:
        render(
            ROWS,
            output_format="simple",
            columns=COLUMNS,
            simple=_simple,
            preamble=("Header", "------"),
        )

        assert capsys.readouterr().out == (
            "Header\n------\nCarp\t1.50\nBusiness::ISBN\tNone\n"
        )

    def test_simple_no_rows_still_prints_preamble(self, capsys) -> None:
        render([], output_format="simple", columns=COLUMNS, simple=_simple, preamble=("H",))
        assert capsys.readouterr().out == "H\n"

    def test_json(self, capsys) -> None:
        render(ROWS, output_format="json", columns=COLUMNS, simple=_simple, preamble=("H",))

        assert json.loads(capsys.readouterr().out) == ROWS

    def test_json_empty_list(self, capsys) -> None:
        render([], output_format="json", columns=COLUMNS, simple=_simple)
        assert json.loads(capsys.readouterr().out) == []

    def test_table(self, capsys) -> None:
        render(ROWS, output_format="table", columns=COLUMNS, simple=_simple, title="Modules")

        out = capsys.readouterr().out
        assert "Modules" in out
        assert "Module" in out
        assert "Business::ISBN" in out
        assert "1.50" in out
        assert "None" not in out

    def test_table_row_styler_sees_labels(self, capsys) -> None:
        seen = []

        def styler(row):
            seen.append(row)
            return None

        render(ROWS[:1], output_format="table", columns=COLUMNS, simple=_simple, row_styler=styler)

        assert seen == [{"Module": "Carp", "Version": "1.50"}]

    def test_table_no_rows_prints_nothing(self, capsys) -> None:
        render([], output_format="table", columns=COLUMNS, simple=_simple)
        assert capsys.readouterr().out == ""


@pytest.mark.unit
class TestCell:
    """Tests for table cell formatting."""

    @pytest.mark.parametrize(
        "value, expected",
        [(None, "-"), (True, "yes"), (False, "no"), (3, "3"), ("x", "x")],
    )
    def test_cell(self, value, expected: str) -> None:
        assert _cell(value) == expected
