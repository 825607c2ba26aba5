"""
Core functionality exports for cpancli.

    from cpancli.core import build_operation_table, parse_version_safely

The dispatcher itself lives in :mod:`cpancli.core.dispatcher`; it depends
on the command handlers and is imported from there directly.
"""

from __future__ import annotations

from cpancli.core.options import (
    ModuleAction,
    Operation,
    OperationSpec,
    Options,
    build_operation_table,
    drop_install_token,
    resolve_module_action,
)
from cpancli.core.cpan_config import (
    CpanConfig,
    dump_perl_config,
    load_cpan_config,
    parse_perl_config,
)
from cpancli.core.version_scanner import (
    parse_version_safely,
    path_to_module,
)

__all__ = [
    "ModuleAction",
    "Operation",
    "OperationSpec",
    "Options",
    "build_operation_table",
    "drop_install_token",
    "resolve_module_action",
    "CpanConfig",
    "dump_perl_config",
    "load_cpan_config",
    "parse_perl_config",
    "parse_version_safely",
    "path_to_module",
]
