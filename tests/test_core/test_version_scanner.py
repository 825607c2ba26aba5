from __future__ import annotations

from pathlib import Path

import pytest

from cpancli.core.version_scanner import (
    eval_version,
    parse_version_safely,
    path_to_module,
    scan_search_path,
)


def _module(path: Path, source: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


@pytest.mark.unit
class TestParseVersionSafely:
    """Tests for parse_version_safely."""

    def test_simple_declaration(self, tmp_path: Path) -> None:
        path = _module(tmp_path / "Foo.pm", "package Foo;\nour $VERSION = '1.23';\n1;\n")
        assert parse_version_safely(path) == "1.23"

    def test_declaration_inside_pod_ignored(self, tmp_path: Path) -> None:
        source = "package Foo;\n\n=head1 SYNOPSIS\n\n  our $VERSION = '9.99';\n\n=cut\n\n1;\n"
        path = _module(tmp_path / "Foo.pm", source)
        assert parse_version_safely(path) == "undef"

    def test_declaration_after_pod(self, tmp_path: Path) -> None:
        source = "=pod\n\n$VERSION = '0.01';\n\n=cut\n\n$VERSION = '0.02';\n"
        path = _module(tmp_path / "Foo.pm", source)
        assert parse_version_safely(path) == "0.02"

    def test_comment_lines_ignored(self, tmp_path: Path) -> None:
        source = "# $VERSION = '0.01';\n  # our $VERSION = '0.02';\nour $VERSION = '0.03';\n"
        path = _module(tmp_path / "Foo.pm", source)
        assert parse_version_safely(path) == "0.03"

    def test_first_declaration_wins(self, tmp_path: Path) -> None:
        source = "our $VERSION = '1.02_01';\n$VERSION = eval $VERSION;\n"
        path = _module(tmp_path / "Foo.pm", source)
        assert parse_version_safely(path) == "1.02_01"

    def test_no_declaration(self, tmp_path: Path) -> None:
        path = _module(tmp_path / "Foo.pm", "package Foo;\nsub new { bless {}, shift }\n1;\n")
        assert parse_version_safely(path) == "undef"

    def test_dynamic_version_is_undef(self, tmp_path: Path) -> None:
        source = "our $VERSION = sprintf '%d.%02d', q$Revision: 1.5 $ =~ /(\\d+)/g;\n"
        path = _module(tmp_path / "Foo.pm", source)
        assert parse_version_safely(path) == "undef"

    def test_unreadable_file(self, tmp_path: Path) -> None:
        assert parse_version_safely(tmp_path / "missing.pm") is None


@pytest.mark.unit
class TestEvalVersion:
    """Tests for the restricted version expression evaluator."""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("our $VERSION = '1.23';", "1.23"),
            ('our $VERSION = "2.0";', "2.0"),
            ("$VERSION = q{3.01};", "3.01"),
            ("$VERSION = qq(3.02);", "3.02"),
            ("$VERSION = 1.230;", "1.23"),
            ("$VERSION = 5;", "5"),
            ("$VERSION = 1_000;", "1000"),
            ("$VERSION = v1.2.3;", "v1.2.3"),
            ("our $VERSION = version->declare('v2.3.4');", "v2.3.4"),
            ("our $VERSION = version->new(\"1.5\");", "1.5"),
            ("use version; our $VERSION = qv('1.2.3');", "1.2.3"),
            ("$VERSION = '1.' . '05';", "1.05"),
            ("$VERSION ||= '0.5';", "0.5"),
            ("$VERSION //= '0.6';", "0.6"),
            ("package Foo; our $VERSION = '4.2'; # comment", "4.2"),
            ("($VERSION) = '7.1';", "7.1"),
        ],
    )
    def test_supported_forms(self, line: str, expected: str) -> None:
        assert eval_version(line, "$", "VERSION") == expected

    def test_qualified_variable(self) -> None:
        line = "$Foo::Bar::VERSION = '0.42';"
        assert eval_version(line, "$", "Foo::Bar::VERSION") == "0.42"

    @pytest.mark.parametrize(
        "line",
        [
            "$VERSION = eval $VERSION;",
            '$VERSION = "$Foo::VERSION";',
            "$VERSION = do { 1 };",
            "$VERSION = '1.0' if 1;",
            "$VERSION == 1;",
            "$VERSION =~ tr/_//d;",
        ],
    )
    def test_unsupported_forms(self, line: str) -> None:
        assert eval_version(line, "$", "VERSION") is None


@pytest.mark.unit
class TestPathToModule:
    """Tests for path_to_module."""

    def test_nested_module(self) -> None:
        assert path_to_module("/usr/lib/perl5", "/usr/lib/perl5/Foo/Bar.pm") == "Foo::Bar"

    def test_arch_directory_dropped(self) -> None:
        assert (
            path_to_module("/usr/lib/perl5", "/usr/lib/perl5/x86_64-linux/List/Util.pm")
            == "List::Util"
        )

    def test_top_level_module(self) -> None:
        assert path_to_module(Path("lib"), Path("lib/Carp.pm")) == "Carp"

    def test_root_with_parent_reference(self) -> None:
        assert (
            path_to_module("/opt/perl/bin/../lib", "/opt/perl/lib/Foo/Bar.pm") == "Foo::Bar"
        )


@pytest.mark.unit
class TestScanSearchPath:
    """Tests for scan_search_path."""

    def test_lists_modules_with_versions(self, tmp_path: Path) -> None:
        _module(tmp_path / "Foo.pm", "our $VERSION = '1.0';\n")
        _module(tmp_path / "Foo" / "Bar.pm", "our $VERSION = '2.5';\n")
        _module(tmp_path / "Foo" / "NoVersion.pm", "1;\n")
        _module(tmp_path / "Foo" / "README.pod", "=head1 NAME\n")
        _module(tmp_path / "Foo" / "bad-name.pm", "our $VERSION = '3';\n")

        assert scan_search_path(tmp_path) == [
            ("Foo", "1.0"),
            ("Foo::Bar", "2.5"),
            ("Foo::NoVersion", "undef"),
        ]

    def test_missing_root(self, tmp_path: Path) -> None:
        assert scan_search_path(tmp_path / "nowhere") == []

    def test_root_with_parent_reference(self, tmp_path: Path) -> None:
        (tmp_path / "perl" / "bin").mkdir(parents=True)
        _module(tmp_path / "perl" / "lib" / "Foo.pm", "our $VERSION = '1.0';\n")

        assert scan_search_path(tmp_path / "perl" / "bin" / ".." / "lib") == [("Foo", "1.0")]
