"""Dispatch one invocation to its operation handler.

The order of events:

1. No dispatch switch and no arguments: start the interactive shell.
2. Load the CPAN configuration, from ``-j`` if given (fatal on failure)
   or from the default locations (a warning on failure).
3. Imply ``-i`` when no switch other than ``-f`` was given.
4. Pick the first switch of the table that is present and run its
   handler. Arguments given to an operation that takes none are
   ignored with a warning.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from cpancli import commands
from cpancli.context import CpanContext
from cpancli.core.cpan_config import load_cpan_config, load_default_cpan_config
from cpancli.core.options import (
    Operation,
    OperationSpec,
    apply_implicit_install,
    build_operation_table,
    select_operation,
)
from cpancli.exceptions import UsageError
from cpancli.utils import get_logger, print_warning
from cpancli.constants import EXIT_SUCCESS, LOAD_CONFIG_SWITCH

logger = get_logger("dispatcher")

Handler = Callable[[CpanContext, List[str]], int]


def default_handlers() -> Dict[Operation, Handler]:
    """Map every dispatchable operation to its handler."""
    return {
        Operation.HELP: commands.print_help,
        Operation.VERSION: commands.print_version,
        Operation.DUMP_CONFIG: commands.dump_config,
        Operation.SHOW_CHANGES: commands.show_changes,
        Operation.SHOW_AUTHOR: commands.show_author,
        Operation.SHOW_DETAILS: commands.show_details,
        Operation.SHOW_OUT_OF_DATE: commands.show_out_of_date,
        Operation.LIST_ALL_MODULES: commands.list_all_modules,
        Operation.SHOW_AUTHOR_MODS: commands.show_author_mods,
        Operation.CREATE_AUTOBUNDLE: commands.create_autobundle,
        Operation.RECOMPILE: commands.recompile,
        Operation.MODULE_ACTION: commands.run_module_action,
    }


class Dispatcher:
    """Runs the operation selected by the command-line switches.

    Args:
        ctx: Invocation context; ``ctx.options`` holds the switches.
        table: Ordered switch table. Defaults to
            :func:`~cpancli.core.options.build_operation_table`.
        handlers: Operation -> handler. Defaults to :func:`default_handlers`.
    """

    def __init__(
        self,
        ctx: CpanContext,
        *,
        table: Optional[Sequence[OperationSpec]] = None,
        handlers: Optional[Dict[Operation, Handler]] = None,
    ) -> None:
        self.ctx = ctx
        self.table = list(table) if table is not None else build_operation_table()
        self.handlers = handlers if handlers is not None else default_handlers()

    def run(self, args: Sequence[str]) -> int:
        """Run the selected operation and return its exit code."""
        options = self.ctx.options
        args = list(args)

        if not options.present(self.table) and not args:
            logger.info("Nothing given, starting the %s shell", self.ctx.backend.name)
            return self.ctx.backend.shell()

        self._load_config()
        apply_implicit_install(options, self.table)

        spec = select_operation(options, self.table)
        if spec is None:
            raise UsageError("No operation selected")

        if args and not spec.takes_args:
            print_warning(f"{spec.description} -- ignoring other arguments")

        handler = self.handlers.get(spec.operation)
        if handler is None:
            raise UsageError(f"-{spec.switch} is not supported")

        logger.debug(
            "Switch -%s selected %s with %d argument(s)",
            spec.switch,
            spec.operation.value,
            len(args),
        )
        result = handler(self.ctx, args)
        return EXIT_SUCCESS if result is None else result

    def _load_config(self) -> None:
        """Install the CPAN configuration on the collaborator.

        Raises:
            ConfigError: The ``-j`` file is missing or cannot be parsed.
        """
        options = self.ctx.options
        path = options.config_file

        if path:
            self.ctx.backend.config = load_cpan_config(Path(path))
            options.discard(LOAD_CONFIG_SWITCH)
            return

        self.ctx.backend.config = load_default_cpan_config()
