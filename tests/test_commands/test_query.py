from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, List
from unittest.mock import patch

import httpx
import pytest

from cpancli.commands.query import (
    list_all_modules,
    show_author,
    show_author_mods,
    show_changes,
    show_details,
    show_out_of_date,
)
from cpancli.models import ModuleInfo
from cpancli.settings import Settings
from cpancli.utils.http import HTTPClient

CHANGES_URL = "https://fastapi.metacpan.org/v1/changes/BDFOY/Business-ISBN-3.009"


def _mock_client(handler: Callable[[httpx.Request], httpx.Response]):
    """HTTPClient factory that routes every request to ``handler``."""

    def factory(**kwargs) -> HTTPClient:
        return HTTPClient(transport=httpx.MockTransport(handler), max_retries=0, **kwargs)

    return factory


@pytest.fixture
def seen() -> List[httpx.Request]:
    return []


@pytest.fixture
def changes_api(seen: List[httpx.Request]):
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if str(request.url) == CHANGES_URL:
            return httpx.Response(200, json={"content": "3.009 2024-01-01\n\t* Fixed ISBN-13\n"})
        return httpx.Response(404, json={"code": 404, "message": "Not found"})

    with patch("cpancli.utils.http.HTTPClient", _mock_client(handler)):
        yield


@pytest.mark.unit
class TestShowChanges:
    """Tests for -C."""

    def test_prints_change_log(self, make_context, changes_api, seen, capsys) -> None:
        assert show_changes(make_context(), ["Business::ISBN"]) == 0

        out = capsys.readouterr().out
        assert "Checking Business::ISBN" in out
        assert f"Got {CHANGES_URL} ..." in out
        assert "* Fixed ISBN-13" in out
        assert [str(r.url) for r in seen] == [CHANGES_URL]

    def test_not_installed_module_skipped(
        self, make_context, fake_backend, isbn_module, changes_api, seen, capsys
    ) -> None:
        isbn_module.inst_file = None

        show_changes(make_context(), ["Business::ISBN"])

        assert seen == []
        assert "Got" not in capsys.readouterr().out

    def test_unknown_module_skipped(self, make_context, changes_api, seen) -> None:
        assert show_changes(make_context(), ["No::Such"]) == 0
        assert seen == []

    def test_fetch_failure_produces_no_output(
        self, make_context, isbn_module, changes_api, seen, capsys
    ) -> None:
        isbn_module.cpan_file = "B/BD/BDFOY/Business-ISBN-9.99.tar.gz"

        assert show_changes(make_context(), ["Business::ISBN"]) == 0

        assert len(seen) == 1
        assert "Got" not in capsys.readouterr().out

    def test_changes_url_setting(self, make_context, seen, capsys) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"content": "changes"})

        settings = Settings(changes_url="https://mirror.example/{author}/{release}/Changes")
        with patch("cpancli.utils.http.HTTPClient", _mock_client(handler)):
            show_changes(make_context(settings=settings), ["Business::ISBN"])

        assert str(seen[0].url) == "https://mirror.example/BDFOY/Business-ISBN-3.009/Changes"


@pytest.mark.unit
class TestShowAuthor:
    """Tests for -A."""

    def test_simple(self, make_context, capsys) -> None:
        show_author(make_context(), ["Business::ISBN", "No::Such"])

        assert capsys.readouterr().out == (
            "%-25s %-8s %-25s %s\n"
            % ("Business::ISBN", "BDFOY", "brian.d.foy@gmail.com", "brian d foy")
        )

    def test_json(self, make_context, capsys) -> None:
        show_author(make_context(output_format="json"), ["Business::ISBN"])

        assert json.loads(capsys.readouterr().out) == [
            {
                "module": "Business::ISBN",
                "userid": "BDFOY",
                "email": "brian.d.foy@gmail.com",
                "fullname": "brian d foy",
            }
        ]

    def test_table(self, make_context, capsys) -> None:
        show_author(make_context(output_format="table"), ["Business::ISBN"])

        out = capsys.readouterr().out
        assert "Module authors" in out
        assert "brian d foy" in out

    def test_unknown_author(self, make_context, fake_backend, capsys) -> None:
        fake_backend.authors.clear()

        show_author(make_context(), ["Business::ISBN"])

        assert capsys.readouterr().out.startswith("Business::ISBN")


@pytest.mark.unit
class TestShowDetails:
    """Tests for -D."""

    def test_simple_block(self, make_context, capsys) -> None:
        show_details(make_context(), ["Business::ISBN"])

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Business::ISBN"
        assert lines[1] == "-" * 73
        assert lines[2] == "\tWork with ISBNs"
        assert lines[3] == "\tB/BD/BDFOY/Business-ISBN-3.009.tar.gz"
        assert lines[4] == "\t/usr/lib/perl5/Business/ISBN.pm"
        assert lines[5] == "\tInstalled: 3.008"
        assert lines[6] == "\tCPAN:      3.009  Not up to date"
        assert lines[7] == "\tbrian d foy (BDFOY)"
        assert lines[8] == "\tbrian.d.foy@gmail.com"

    def test_up_to_date(self, make_context, isbn_module, capsys) -> None:
        isbn_module.inst_version = "3.009"

        show_details(make_context(), ["Business::ISBN"])

        assert capsys.readouterr().out.splitlines()[6] == "\tCPAN:      3.009  up to date"

    def test_json(self, make_context, capsys) -> None:
        show_details(make_context(output_format="json"), ["Business::ISBN"])

        (row,) = json.loads(capsys.readouterr().out)
        assert row["uptodate"] is False
        assert row["author"]["id"] == "BDFOY"

    def test_table(self, make_context, capsys) -> None:
        show_details(make_context(output_format="table"), ["Business::ISBN"])
        assert "brian d foy (BDFOY)" in capsys.readouterr().out


@pytest.fixture
def index_backend(fake_backend, isbn_module):
    fake_backend.modules.update(
        {
            "Carp": ModuleInfo(
                id="Carp",
                userid="XSAWYERX",
                inst_file="/usr/lib/perl5/Carp.pm",
                inst_version="1.54",
                cpan_version="1.54",
            ),
            "Acme::Bleach": ModuleInfo(id="Acme::Bleach", userid="DCONWAY", cpan_version="1.150"),
            "Business::ISSN": ModuleInfo(
                id="Business::ISSN",
                userid="bdfoy",
                inst_file="/usr/lib/perl5/Business/ISSN.pm",
                inst_version="1.004",
                cpan_version="1.004001",
            ),
        }
    )
    return fake_backend


@pytest.mark.unit
class TestShowOutOfDate:
    """Tests for -O."""

    def test_simple(self, make_context, index_backend, capsys) -> None:
        show_out_of_date(make_context(), [])

        assert capsys.readouterr().out.splitlines() == [
            "%-40s  %6s  %6s" % ("Module Name", "Local", "CPAN"),
            "-" * 73,
            "%-40s  %6s  %6s" % ("Business::ISBN", "3.008", "3.009"),
            "%-40s  %6s  %6s" % ("Business::ISSN", "1.004", "1.004001"),
        ]

    def test_json_includes_update_type(self, make_context, index_backend, capsys) -> None:
        show_out_of_date(make_context(output_format="json"), [])

        rows = json.loads(capsys.readouterr().out)
        assert [row["module"] for row in rows] == ["Business::ISBN", "Business::ISSN"]
        assert rows[0]["update"] == "minor"
        assert rows[1]["update"] == "patch"

    def test_nothing_out_of_date(self, make_context, isbn_module, capsys) -> None:
        isbn_module.inst_version = "3.010"

        show_out_of_date(make_context(), [])

        assert len(capsys.readouterr().out.splitlines()) == 2


@pytest.mark.unit
class TestListings:
    """Tests for -l and -L."""

    def test_list_all_modules(self, make_context, fake_backend, tmp_path: Path, capsys) -> None:
        lib = tmp_path / "lib"
        (lib / "Foo").mkdir(parents=True)
        (lib / "Foo.pm").write_text("our $VERSION = '1.0';\n", encoding="utf-8")
        (lib / "Foo" / "Bar.pm").write_text("1;\n", encoding="utf-8")
        fake_backend.search_path = [lib, tmp_path / "missing"]

        list_all_modules(make_context(), [])

        assert capsys.readouterr().out == "Foo\t1.0\nFoo::Bar\tundef\n"

    def test_show_author_mods_case_insensitive(self, make_context, index_backend, capsys) -> None:
        show_author_mods(make_context(), ["BDFOY", "dconway"])

        assert capsys.readouterr().out.splitlines() == [
            "Business::ISBN",
            "Acme::Bleach",
            "Business::ISSN",
        ]

    def test_show_author_mods_json(self, make_context, index_backend, capsys) -> None:
        show_author_mods(make_context(output_format="json"), ["xsawyerx"])

        assert json.loads(capsys.readouterr().out) == [{"module": "Carp", "author": "XSAWYERX"}]
