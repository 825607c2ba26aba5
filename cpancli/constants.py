"""
Centralized constants for cpancli.

This module defines immutable configuration values used across cpancli,
including the command-line switch layout, exit codes, network settings,
file patterns and logging formats. All values are intended to be treated
as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: Name of the installed console script.
PROG_NAME: Final[str] = "cpan"

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "cpancli/{version} (+https://metacpan.org)"

# ---------------------------------------------------------------------------
# Command-line switches
# ---------------------------------------------------------------------------

#: Meta switches, in the order they are tested. The first one present wins.
META_SWITCHES: Final[Sequence[str]] = (
    "h", "v", "C", "A", "D", "O", "l", "L", "a", "r", "j", "J",
)

#: Module-action switches, tested alphabetically after the meta switches.
MODULE_ACTION_SWITCHES: Final[Sequence[str]] = ("c", "f", "i", "m", "t")

#: Switch that turns the chosen module action into its force variant.
FORCE_SWITCH: Final[str] = "f"

#: Switch implied when no other switch is given.
DEFAULT_SWITCH: Final[str] = "i"

#: Switch carrying the configuration file path.
LOAD_CONFIG_SWITCH: Final[str] = "j"

#: Leading argument that is silently discarded (``cpan install Foo::Bar``).
INSTALL_TOKEN: Final[str] = "install"

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: Final[int] = 0
EXIT_ERROR: Final[int] = 1
EXIT_USAGE: Final[int] = 2
EXIT_CONFIG: Final[int] = 3
EXIT_DELEGATION: Final[int] = 4
EXIT_NETWORK: Final[int] = 5
EXIT_MODULE_FAILED: Final[int] = 6
EXIT_INTERRUPTED: Final[int] = 130

# ---------------------------------------------------------------------------
# Collaborator (CPAN.pm) settings
# ---------------------------------------------------------------------------

#: Default Perl interpreter used to drive CPAN.pm.
DEFAULT_PERL: Final[str] = "perl"

#: Variable name written by ``-J`` and expected by ``-j``.
CPAN_CONFIG_VARIABLE: Final[str] = "$CPAN::Config"

#: Per-user CPAN.pm configuration file, relative to the home directory.
USER_CPAN_CONFIG: Final[str] = ".cpan/CPAN/MyConfig.pm"

#: File name pattern of module source files collected by ``-l``.
MODULE_FILE_PATTERN: Final[str] = r"\A\w+\.pm\Z"

#: Version reported when no ``$VERSION`` declaration is found.
UNDEF_VERSION: Final[str] = "undef"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Release change log endpoint (MetaCPAN API).
DEFAULT_CHANGES_URL: Final[str] = "https://fastapi.metacpan.org/v1/changes/{author}/{release}"

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Maximum number of retries for failed HTTP requests.
DEFAULT_MAX_RETRIES: Final[int] = 2

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

#: Supported report formats.
OUTPUT_FORMATS: Final[Sequence[str]] = ("simple", "table", "json")

#: Default report format.
DEFAULT_FORMAT: Final[str] = "simple"

#: Width of the rules printed under report headers.
RULE_WIDTH: Final[int] = 73

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading configuration files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
