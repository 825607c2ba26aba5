"""
Operation handlers for cpancli.

Each handler has the signature ``handler(ctx, args) -> int``: it receives
the :class:`~cpancli.context.CpanContext` and the non-switch command-line
arguments and returns an exit code.

- :mod:`cpancli.commands.meta`: help, version, configuration dump,
  autobundle, recompile
- :mod:`cpancli.commands.query`: change logs, authors, details, listings
- :mod:`cpancli.commands.actions`: install, make, test, clean
"""

from __future__ import annotations

from cpancli.commands.actions import run_module_action
from cpancli.commands.meta import (
    create_autobundle,
    dump_config,
    print_help,
    print_version,
    recompile,
)
from cpancli.commands.query import (
    list_all_modules,
    show_author,
    show_author_mods,
    show_changes,
    show_details,
    show_out_of_date,
)

__all__ = [
    "run_module_action",
    "create_autobundle",
    "dump_config",
    "print_help",
    "print_version",
    "recompile",
    "list_all_modules",
    "show_author",
    "show_author_mods",
    "show_changes",
    "show_details",
    "show_out_of_date",
]
