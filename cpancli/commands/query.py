"""Read-only queries about modules and authors.

Every handler takes the invocation context and the remaining arguments
and prints a report in the context's output format. Module names that the
collaborator does not know are skipped without a message.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from cpancli.context import CpanContext
from cpancli.models import ModuleInfo
from cpancli.commands.report import Row, render
from cpancli.core.version_scanner import scan_search_path
from cpancli.exceptions import NetworkError
from cpancli.utils import get_logger, get_update_type, print_info
from cpancli.constants import EXIT_SUCCESS, RULE_WIDTH

logger = get_logger("commands.query")

_UPDATE_STYLES = {
    "major": "red",
    "minor": "yellow",
    "patch": "green",
}


def _update_style(row: Dict[str, Any]) -> Optional[str]:
    return _UPDATE_STYLES.get(row.get("Update", ""))


# ---------------------------------------------------------------------------
# -C: change logs
# ---------------------------------------------------------------------------


def _release_author(module: ModuleInfo) -> Optional[str]:
    """PAUSE id owning the release (``B/BD/BDFOY/...`` -> ``BDFOY``)."""
    if module.cpan_file:
        parts = module.cpan_file.split("/")
        if len(parts) >= 4:
            return parts[2]
    return module.userid.upper() if module.userid else None


def show_changes(ctx: CpanContext, args: List[str]) -> int:
    """Print the change log of each installed module's release.

    Modules that are not installed, or whose change log cannot be fetched,
    produce no output.
    """
    try:
        from cpancli.utils.http import HTTPClient
    except ImportError as exc:
        raise NetworkError("Reading Changes files requires httpx") from exc

    with HTTPClient(timeout=ctx.settings.timeout) as client:
        for name in args:
            print_info(f"Checking {name}")

            module = ctx.backend.expand_module(name)
            if module is None or not module.is_installed:
                logger.info("%s is not installed, skipping", name)
                continue

            author = _release_author(module)
            release = module.release_name
            if not author or not release:
                logger.warning("Cannot tell which release provides %s", name)
                continue

            url = ctx.settings.changes_url.format(author=author, release=release)
            try:
                data = client.get_json(url)
            except NetworkError as exc:
                logger.warning("Could not fetch Changes for %s: %s", name, exc)
                continue

            content = data.get("content")
            if not content:
                logger.info("No Changes file for %s", release)
                continue

            print(f"Got {url} ...")
            print(content)

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# -A / -D: author and detail reports
# ---------------------------------------------------------------------------


def show_author(ctx: CpanContext, args: List[str]) -> int:
    """Print the author of each named module."""
    rows: List[Row] = []
    for name in args:
        module = ctx.backend.expand_module(name)
        if module is None or not module.userid:
            continue
        author = ctx.backend.expand_author(module.userid)
        rows.append(
            {
                "module": name,
                "userid": module.userid,
                "email": author.email if author else None,
                "fullname": author.fullname if author else None,
            }
        )

    render(
        rows,
        output_format=ctx.output_format,
        columns=(
            ("module", "Module"),
            ("userid", "Author"),
            ("email", "Email"),
            ("fullname", "Name"),
        ),
        simple=lambda row: "%-25s %-8s %-25s %s"
        % (row["module"], row["userid"], row["email"] or "", row["fullname"] or ""),
        title="Module authors",
    )
    return EXIT_SUCCESS


def _detail_row(module: ModuleInfo, author: Any) -> Row:
    return {
        "module": module.id,
        "description": module.description,
        "cpan_file": module.cpan_file,
        "inst_file": module.inst_file,
        "inst_version": module.inst_version,
        "cpan_version": module.cpan_version,
        "uptodate": module.is_up_to_date,
        "author": author.to_dict() if author else None,
    }


def _detail_block(row: Row) -> str:
    author = row["author"] or {}
    status = "up to date" if row["uptodate"] else "Not up to date"
    lines = [
        row["module"],
        "-" * RULE_WIDTH,
        f"\t{row['description'] or '(no description)'}",
        f"\t{row['cpan_file'] or ''}",
        f"\t{row['inst_file'] or '(not installed)'}",
        f"\tInstalled: {row['inst_version'] or ''}",
        f"\tCPAN:      {row['cpan_version'] or ''}  {status}",
        f"\t{author.get('fullname') or ''} ({author.get('id') or ''})",
        f"\t{author.get('email') or ''}",
        "",
    ]
    return "\n".join(lines)


def show_details(ctx: CpanContext, args: List[str]) -> int:
    """Print a detail block for each named module."""
    rows: List[Row] = []
    for name in args:
        module = ctx.backend.expand_module(name)
        if module is None or not module.userid:
            continue
        author = ctx.backend.expand_author(module.userid)
        rows.append(_detail_row(module, author))

    if ctx.output_format == "table":
        for row in rows:
            author = row["author"] or {}
            row["author_name"] = f"{author.get('fullname') or ''} ({author.get('id') or ''})"

    render(
        rows,
        output_format=ctx.output_format,
        columns=(
            ("module", "Module"),
            ("description", "Description"),
            ("cpan_file", "CPAN file"),
            ("inst_file", "Installed file"),
            ("inst_version", "Installed"),
            ("cpan_version", "CPAN"),
            ("uptodate", "Up to date"),
            ("author_name", "Author"),
        ),
        simple=_detail_block,
        title="Module details",
    )
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# -O: out-of-date report
# ---------------------------------------------------------------------------


def show_out_of_date(ctx: CpanContext, args: List[str]) -> int:
    """List installed modules with a newer version on CPAN."""
    rows: List[Row] = []
    for module in ctx.backend.all_modules():
        if not module.is_installed or module.is_up_to_date:
            continue
        rows.append(
            {
                "module": module.id,
                "local": module.inst_version,
                "cpan": module.cpan_version,
                "update": get_update_type(module.inst_version, module.cpan_version),
            }
        )

    render(
        rows,
        output_format=ctx.output_format,
        columns=(
            ("module", "Module"),
            ("local", "Local"),
            ("cpan", "CPAN"),
            ("update", "Update"),
        ),
        simple=lambda row: "%-40s  %6s  %6s"
        % (row["module"], row["local"] or "", row["cpan"] or ""),
        preamble=(
            "%-40s  %6s  %6s" % ("Module Name", "Local", "CPAN"),
            "-" * RULE_WIDTH,
        ),
        title="Out of date modules",
        column_styles={
            "Local": {"justify": "right"},
            "CPAN": {"justify": "right", "style": "bold"},
        },
        row_styler=_update_style,
    )
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# -l / -L: module listings
# ---------------------------------------------------------------------------


def list_all_modules(ctx: CpanContext, args: List[str]) -> int:
    """List every module found on the Perl search path with its version."""
    rows: List[Row] = []
    for root in ctx.backend.module_search_path():
        logger.debug("Scanning %s", root)
        for name, version in scan_search_path(root):
            rows.append({"module": name, "version": version})

    render(
        rows,
        output_format=ctx.output_format,
        columns=(("module", "Module"), ("version", "Version")),
        simple=lambda row: f"{row['module']}\t{row['version']}",
        title="Installed modules",
    )
    return EXIT_SUCCESS


def show_author_mods(ctx: CpanContext, args: List[str]) -> int:
    """List the modules released by the named authors (case-insensitive)."""
    wanted = {author.lower() for author in args}
    rows: List[Row] = []
    for module in ctx.backend.all_modules():
        if module.userid and module.userid.lower() in wanted:
            rows.append({"module": module.id, "author": module.userid})

    render(
        rows,
        output_format=ctx.output_format,
        columns=(("module", "Module"), ("author", "Author")),
        simple=lambda row: row["module"],
        title="Modules by author",
    )
    return EXIT_SUCCESS
