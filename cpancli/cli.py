"""
Command-line interface for cpancli.

``cpan`` is a single command driven by one-letter switches; the switch
that comes first in the dispatch table decides what happens (see
:mod:`cpancli.core.options`). This module parses the command line, sets
up logging, console and settings, and hands over to the dispatcher.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import click

from cpancli.settings import load_settings
from cpancli.__version__ import __version__
from cpancli.context import CpanContext
from cpancli.core.dispatcher import Dispatcher
from cpancli.core.options import Options, drop_install_token
from cpancli.backends import PerlCpanBackend
from cpancli.exceptions import CpanCliError
from cpancli.utils.logger import get_logger, level_for_verbosity, setup_logging
from cpancli.utils.console import print_error, print_warning, reconfigure_console
from cpancli.constants import (
    EXIT_ERROR,
    EXIT_INTERRUPTED,
    EXIT_SUCCESS,
    OUTPUT_FORMATS,
    PROG_NAME,
)

logger = get_logger("cli")

#: (switch, parameter name, help) for every one-letter switch. Parameter
#: names are explicit because click would fold ``-C`` and ``-c`` together.
SWITCHES: Tuple[Tuple[str, str, str], ...] = (
    ("h", "switch_h", "Print help."),
    ("v", "switch_v", "Print the script and CPAN.pm versions."),
    ("C", "switch_C", "Show the Changes file of each module."),
    ("A", "switch_A", "Show the author of each module."),
    ("D", "switch_D", "Show details about each module."),
    ("O", "switch_O", "Show installed modules that are out of date."),
    ("l", "switch_l", "List installed modules with their versions."),
    ("L", "switch_L", "List the modules of each author."),
    ("a", "switch_a", "Create an autobundle snapshot."),
    ("r", "switch_r", "Recompile dynamically-loaded extensions."),
    ("J", "switch_J", "Dump the configuration (to FILE if given)."),
    ("c", "switch_c", "Run `make clean` for each module."),
    ("f", "switch_f", "Force the action (default: install)."),
    ("i", "switch_i", "Install each module (the default)."),
    ("m", "switch_m", "Run `make` for each module."),
    ("t", "switch_t", "Run `make test` for each module."),
)

_PARAM_SWITCHES: Dict[str, str] = {param: switch for switch, param, _ in SWITCHES}
_PARAM_SWITCHES["switch_j"] = "j"


def _switch_options(func):
    """Attach one boolean click option per switch."""
    for switch, param, help_text in reversed(SWITCHES):
        func = click.option(f"-{switch}", param, is_flag=True, help=help_text)(func)
    return func


@click.command(
    context_settings={
        "help_option_names": ["--help"],
        "allow_interspersed_args": False,
    },
)
@_switch_options
@click.option(
    "-j",
    "switch_j",
    metavar="FILE",
    help="Load the CPAN configuration from FILE.",
)
@click.option(
    "--verbose",
    count=True,
    help="Increase verbosity (can be repeated: --verbose --verbose).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="CPANCLI_COLOR",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(list(OUTPUT_FORMATS)),
    default=None,
    help="Report format for -A, -D, -O, -l and -L.",
)
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to a cpancli settings file.",
    envvar="CPANCLI_SETTINGS",
)
@click.argument("args", nargs=-1)
@click.pass_context
def cli(
    ctx: click.Context,
    args: Tuple[str, ...],
    verbose: int,
    color: bool,
    output_format: Optional[str],
    settings_path: Optional[Path],
    **switches: object,
) -> None:
    """cpan - easily interact with CPAN from the command line.

    \b
    With no switches and no arguments, the CPAN.pm shell starts.
    With arguments and no switches, the modules are installed.

    \b
    Examples:
      cpan Business::ISBN         Install a module
      cpan install Foo::Bar       Same; the word "install" is dropped
      cpan -f -t Foo::Bar         Force the tests of a module
      cpan -O                     Show out-of-date modules
      cpan -j MyConfig.pm -J      Show a configuration file as CPAN.pm sees it
    """
    _configure_logging(verbose, color)
    reconfigure_console(color=color)

    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"

    settings = load_settings(settings_path)

    options = Options.from_flags(
        **{_PARAM_SWITCHES[name]: value for name, value in switches.items()}
    )

    # `cpan install Foo` means `cpan Foo`, but only without switches
    if not options.switches:
        args = tuple(drop_install_token(args))

    cpan_ctx = CpanContext(
        PerlCpanBackend(perl=settings.perl),
        settings=settings,
        options=options,
        output_format=output_format or settings.format,
        usage=ctx.get_help(),
        prog_name=ctx.info_name or PROG_NAME,
    )
    ctx.obj = cpan_ctx

    logger.debug("cpancli v%s", __version__)
    logger.debug("Switches: %s | Arguments: %s", sorted(options.switches), list(args))
    if settings.source_path:
        logger.debug("Loaded settings: %s", settings.to_log_dict())

    ctx.exit(Dispatcher(cpan_ctx).run(args))


def _configure_logging(verbose: int, color: bool) -> None:
    """Configure logging level based on verbosity flags."""
    level = level_for_verbosity(verbose)
    setup_logging(level=level, verbose=verbose >= 2, color=color)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the ``cpan`` command.

    Args:
        argv: Command-line arguments without the program name. Defaults
            to ``sys.argv[1:]``.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error
            3   Configuration error
            4   The collaborator cannot do what was asked
            5   Network error
            6   One or more modules failed
            130 Interrupted by user (Ctrl+C)
    """
    args: List[str] = list(sys.argv[1:] if argv is None else argv)

    try:
        rv = cli.main(args=args, prog_name=PROG_NAME, standalone_mode=False)
        return EXIT_SUCCESS if rv is None else int(rv)

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except CpanCliError as exc:
        print_error(str(exc))
        logger.debug(
            "%s details: %s",
            type(exc).__name__,
            exc.details or "<none>",
            exc_info=True,
        )
        return exc.exit_code

    except (KeyboardInterrupt, click.Abort):
        print_warning("\nOperation cancelled by user")
        return EXIT_INTERRUPTED

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
