"""Per-module actions: install, make, test, clean (optionally forced)."""

from __future__ import annotations

from typing import List

from cpancli.context import CpanContext
from cpancli.core.options import resolve_module_action
from cpancli.exceptions import DelegationError, ModuleActionError
from cpancli.utils import get_logger, print_error
from cpancli.constants import EXIT_SUCCESS

logger = get_logger("commands.actions")


def run_module_action(ctx: CpanContext, args: List[str]) -> int:
    """Apply the selected action to every named module, in order.

    A failing module does not stop the loop; failures are reported
    together once every module has been tried.

    Raises:
        UsageError: An action switch was given without modules.
        DelegationError: The collaborator has no such action.
        ModuleActionError: At least one module failed.
    """
    action, force = resolve_module_action(ctx.options, args)
    backend = ctx.backend

    if action is None:
        return backend.shell()

    if not backend.supports(action):
        raise DelegationError(
            f"{backend.name} cannot {action.method}!",
            method=action.method,
        )

    failed: List[str] = []
    for module in args:
        logger.info("%s%s %s", "force " if force else "", action.method, module)
        if not backend.run_action(action, module, force=force):
            print_error(f"{action.method} {module} failed")
            failed.append(module)

    if failed:
        raise ModuleActionError(
            f"Could not {action.method} {len(failed)} of {len(args)} module(s)",
            action=action.method,
            failed=failed,
        )

    return EXIT_SUCCESS
