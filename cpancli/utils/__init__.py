"""
Utility helpers for cpancli.

This package provides reusable utilities used across cpancli, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers and module file discovery
- A blocking HTTP client
- CPAN version comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from cpancli.utils.filesystem import (
    iter_module_files,
    safe_read_file,
    safe_write_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from cpancli.utils.logger import (
    get_logger,
    level_for_verbosity,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from cpancli.utils.console import (
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from cpancli.utils.version_utils import (
    get_update_type,
    is_up_to_date,
    normalize_perl_version,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

# HTTPClient is imported from cpancli.utils.http where it is needed so that
# httpx is only loaded by ``cpan -C``.

__all__ = [
    # Console
    "print_error",
    "print_info",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    # Logging
    "get_logger",
    "setup_logging",
    "level_for_verbosity",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "iter_module_files",
    # Version utilities
    "get_update_type",
    "is_up_to_date",
    "normalize_perl_version",
]
