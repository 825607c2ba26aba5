"""Meta operations: help, version, configuration dump, autobundle, recompile.

Each handler takes the invocation context and the remaining command-line
arguments and returns an exit code.
"""

from __future__ import annotations

import sys
from typing import IO, List, Optional

import click

from cpancli.context import CpanContext
from cpancli.__version__ import __version__
from cpancli.core.cpan_config import dump_perl_config
from cpancli.utils import get_logger, print_success, safe_write_file
from cpancli.constants import EXIT_ERROR, EXIT_SUCCESS

logger = get_logger("commands.meta")


def print_help(ctx: CpanContext, args: List[str]) -> int:
    """Print the usage documentation."""
    click.echo(ctx.usage)
    return EXIT_SUCCESS


def print_version(ctx: CpanContext, args: List[str]) -> int:
    """Print our version and the collaborator's version to stderr."""
    click.echo(
        f"{ctx.prog_name} script version {__version__}, "
        f"{ctx.backend.name} version {ctx.backend.version()}",
        err=True,
    )
    return EXIT_SUCCESS


def dump_config(
    ctx: CpanContext,
    args: List[str],
    stream: Optional[IO[str]] = None,
) -> int:
    """Write the active CPAN configuration in reloadable form.

    With an argument the dump goes to that file (an existing file is kept
    as ``<file>.bak``); otherwise to ``stream`` or stdout.
    """
    text = dump_perl_config(ctx.backend.config.data)

    if args:
        backup = safe_write_file(args[0], text)
        if backup:
            logger.info("Previous configuration saved as %s", backup)
        print_success(f"Configuration written to {args[0]}")
        return EXIT_SUCCESS

    (stream or sys.stdout).write(text)
    return EXIT_SUCCESS


def create_autobundle(ctx: CpanContext, args: List[str]) -> int:
    """Snapshot the installed modules into a Bundle file."""
    print(f"Creating autobundle in {ctx.backend.config.cpan_home}/Bundle")
    if not ctx.backend.autobundle():
        logger.error("%s could not create the autobundle", ctx.backend.name)
        return EXIT_ERROR
    return EXIT_SUCCESS


def recompile(ctx: CpanContext, args: List[str]) -> int:
    print("Recompiling dynamically-loaded extensions")
    if not ctx.backend.recompile():
        logger.error("%s could not recompile all extensions", ctx.backend.name)
        return EXIT_ERROR
    return EXIT_SUCCESS
