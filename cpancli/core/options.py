"""Switch table and module-action selection.

The command line is a set of single-character switches. Exactly one of
them decides what happens; which one is fixed by an ordered table:

1. Meta switches, in the order ``h v C A D O l L a r j J``.
2. Module-action switches, alphabetically: ``c f i m t``.

The first switch present wins and every other switch is ignored. ``-f``
is not an action of its own but turns the chosen action into its force
variant, and ``-j`` is consumed before the table is walked (it only loads
a configuration file).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from cpancli.exceptions import UsageError
from cpancli.constants import (
    FORCE_SWITCH,
    INSTALL_TOKEN,
    DEFAULT_SWITCH,
    META_SWITCHES,
    LOAD_CONFIG_SWITCH,
    MODULE_ACTION_SWITCHES,
)


class Operation(enum.Enum):
    """Everything a single invocation can do."""

    HELP = "help"
    VERSION = "version"
    LOAD_CONFIG = "load-config"
    DUMP_CONFIG = "dump-config"
    SHOW_CHANGES = "show-changes"
    SHOW_AUTHOR = "show-author"
    SHOW_DETAILS = "show-details"
    SHOW_OUT_OF_DATE = "show-out-of-date"
    LIST_ALL_MODULES = "list-all-modules"
    SHOW_AUTHOR_MODS = "show-author-mods"
    CREATE_AUTOBUNDLE = "create-autobundle"
    RECOMPILE = "recompile"
    MODULE_ACTION = "module-action"


class ModuleAction(enum.Enum):
    """Per-module actions; the value is the collaborator's method name."""

    CLEAN = "clean"
    INSTALL = "install"
    MAKE = "make"
    TEST = "test"

    @property
    def method(self) -> str:
        return self.value


#: Module-action switch -> action. ``f`` is a modifier and has no entry.
SWITCH_ACTIONS: Dict[str, ModuleAction] = {
    "c": ModuleAction.CLEAN,
    "i": ModuleAction.INSTALL,
    "m": ModuleAction.MAKE,
    "t": ModuleAction.TEST,
}


@dataclass(frozen=True)
class OperationSpec:
    """One row of the switch table.

    Attributes:
        switch: Command-line switch character.
        operation: What the switch does.
        takes_args: Whether remaining arguments are consumed.
        description: Progress text shown when arguments are ignored.
    """

    switch: str
    operation: Operation
    takes_args: bool
    description: str


def build_operation_table() -> List[OperationSpec]:
    """Return the ordered switch table (meta switches first)."""
    rows = {
        "h": (Operation.HELP, False, "Printing help"),
        "v": (Operation.VERSION, False, "Printing version"),
        "C": (Operation.SHOW_CHANGES, True, "Showing Changes file"),
        "A": (Operation.SHOW_AUTHOR, True, "Showing Author"),
        "D": (Operation.SHOW_DETAILS, True, "Showing Details"),
        "O": (Operation.SHOW_OUT_OF_DATE, False, "Showing Out of date"),
        "l": (Operation.LIST_ALL_MODULES, False, "Listing all modules"),
        "L": (Operation.SHOW_AUTHOR_MODS, True, "Showing author mods"),
        "a": (Operation.CREATE_AUTOBUNDLE, False, "Creating autobundle"),
        "r": (Operation.RECOMPILE, False, "Recompiling"),
        "j": (Operation.LOAD_CONFIG, True, "Use specified config file"),
        "J": (Operation.DUMP_CONFIG, True, "Dump configuration to stdout"),
        "c": (Operation.MODULE_ACTION, True, "Running `make clean`"),
        "f": (Operation.MODULE_ACTION, True, "Installing with force"),
        "i": (Operation.MODULE_ACTION, True, "Running `make install`"),
        "m": (Operation.MODULE_ACTION, True, "Running `make`"),
        "t": (Operation.MODULE_ACTION, True, "Running `make test`"),
    }
    order = tuple(META_SWITCHES) + tuple(MODULE_ACTION_SWITCHES)
    return [OperationSpec(switch, *rows[switch]) for switch in order]


SwitchValue = Union[bool, str]


@dataclass
class Options:
    """Switches given on the command line.

    Attributes:
        switches: Switch character -> ``True`` (or the value of a switch
            that takes one, such as ``-j``). Absent switches are missing
            or falsy.
    """

    switches: Dict[str, SwitchValue] = field(default_factory=dict)

    @classmethod
    def from_flags(cls, **flags: Optional[SwitchValue]) -> "Options":
        return cls({name: value for name, value in flags.items() if value})

    def __contains__(self, switch: str) -> bool:
        return bool(self.switches.get(switch))

    def get(self, switch: str) -> Optional[SwitchValue]:
        return self.switches.get(switch) or None

    def set(self, switch: str, value: SwitchValue = True) -> None:
        self.switches[switch] = value

    def discard(self, switch: str) -> None:
        self.switches.pop(switch, None)

    @property
    def force(self) -> bool:
        return FORCE_SWITCH in self

    @property
    def config_file(self) -> Optional[str]:
        value = self.get(LOAD_CONFIG_SWITCH)
        return str(value) if value else None

    def present(self, table: Sequence[OperationSpec]) -> List[str]:
        """Switches that are set, in table order."""
        return [spec.switch for spec in table if spec.switch in self]


def drop_install_token(argv: Sequence[str]) -> List[str]:
    """Discard a leading ``install`` when more arguments follow.

    People type ``cpan install Foo::Bar``; the word is not a module.
    """
    args = list(argv)
    if len(args) > 1 and args[0] == INSTALL_TOKEN:
        return args[1:]
    return args


def apply_implicit_install(options: Options, table: Sequence[OperationSpec]) -> None:
    """Set ``-i`` when no switch was given.

    ``-f`` does not count (it only modifies an action) and ``-j`` has been
    consumed already, so ``cpan -f Foo`` force-installs ``Foo``.
    """
    counted = [
        switch
        for switch in options.present(table)
        if switch not in (FORCE_SWITCH, LOAD_CONFIG_SWITCH)
    ]
    if not counted:
        options.set(DEFAULT_SWITCH)


def select_operation(
    options: Options,
    table: Sequence[OperationSpec],
) -> Optional[OperationSpec]:
    """Return the first table row whose switch is present.

    ``-j`` is skipped; it is handled before dispatch.
    """
    for spec in table:
        if spec.switch == LOAD_CONFIG_SWITCH:
            continue
        if spec.switch in options:
            return spec
    return None


def resolve_module_action(
    options: Options,
    args: Sequence[str],
) -> Tuple[Optional[ModuleAction], bool]:
    """Decide which module action to run.

    Rules:

    1. The first of ``c i m t`` that is present (``f`` is skipped).
    2. No switch but arguments: install.
    3. No switch and no arguments: ``(None, force)``, meaning the shell.
    4. A switch but no arguments: :class:`UsageError`.

    Returns:
        ``(action, force)``.

    Raises:
        UsageError: ``Nothing to <method>!``.
    """
    action: Optional[ModuleAction] = None
    for switch in MODULE_ACTION_SWITCHES:
        if switch == FORCE_SWITCH:
            continue
        if switch in options:
            action = SWITCH_ACTIONS[switch]
            break

    if action is None:
        if args:
            return ModuleAction.INSTALL, options.force
        return None, options.force

    if not args:
        raise UsageError(f"Nothing to {action.method}!")

    return action, options.force
