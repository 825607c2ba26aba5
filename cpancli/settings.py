"""Settings file loader for cpancli.

These are cpancli's own settings, not CPAN.pm's configuration (that one
is handled by :mod:`cpancli.core.cpan_config` and ``-j``/``-J``).

Supports two formats:

- ``cpancli.toml``: settings under ``[cpancli]`` table
- ``pyproject.toml``: settings under ``[tool.cpancli]`` table

Discovery order:

1. Explicit path from ``--settings`` or ``CPANCLI_SETTINGS``
2. ``cpancli.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.cpancli]`` section

Example (``cpancli.toml``)::

    [cpancli]
    perl = "/opt/perl/bin/perl"
    timeout = 10
    format = "table"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from cpancli.exceptions import ConfigError
from cpancli.utils.logger import get_logger
from cpancli.constants import (
    DEFAULT_CHANGES_URL,
    DEFAULT_FORMAT,
    DEFAULT_PERL,
    DEFAULT_TIMEOUT,
    OUTPUT_FORMATS,
)

logger = get_logger("settings")

SETTINGS_FILE = "cpancli.toml"


@dataclass
class Settings:
    """Parsed and validated cpancli settings.

    All fields have defaults, so empty settings files are valid.

    Attributes:
        perl: Perl interpreter used to drive CPAN.pm.
        timeout: HTTP timeout in seconds for ``-C``.
        changes_url: Change log URL template with ``{author}`` and
            ``{release}`` placeholders.
        format: Default report format (``simple``, ``table`` or ``json``).
        source_path: Path to the loaded file, or ``None`` for defaults.
    """

    perl: str = DEFAULT_PERL
    timeout: int = DEFAULT_TIMEOUT
    changes_url: str = DEFAULT_CHANGES_URL
    format: str = DEFAULT_FORMAT

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return settings as a dictionary for debug logging."""
        return {
            "perl": self.perl,
            "timeout": self.timeout,
            "changes_url": self.changes_url,
            "format": self.format,
        }


def discover_settings_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the settings file to load.

    Args:
        explicit_path: Explicit path. If provided, must exist.

    Returns:
        Resolved path, or ``None`` if no settings file was found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Settings file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit settings: %s", resolved)
        return resolved

    cwd = Path.cwd()

    settings_toml = cwd / SETTINGS_FILE
    if settings_toml.is_file():
        logger.debug("Found %s: %s", SETTINGS_FILE, settings_toml)
        return settings_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.cpancli] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No settings file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Check whether pyproject.toml has a ``[tool.cpancli]`` table.

    Parse errors mean "no", so a broken unrelated pyproject.toml does not
    stop the tool.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "cpancli" in raw.get("tool", {})


def load_settings(settings_path: Optional[Path] = None) -> Settings:
    """Load and validate cpancli settings.

    Args:
        settings_path: Explicit path. If ``None``, uses auto-discovery
            (see :func:`discover_settings_file`).

    Returns:
        Validated :class:`Settings` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid
            values.
    """
    resolved = discover_settings_file(settings_path)

    if resolved is None:
        return Settings()

    logger.info("Loading settings from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("cpancli", {})
    else:
        section = raw.get("cpancli", {})

    if not section:
        logger.debug("Settings file has no cpancli section, using defaults")
        return Settings(source_path=resolved)

    settings = _parse_section(section, config_path=str(resolved))
    settings.source_path = resolved

    logger.debug("Loaded settings: %s", settings.to_log_dict())
    return settings


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read settings file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(section: Dict[str, Any], *, config_path: str) -> Settings:
    """Validate the ``[cpancli]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type.
    """
    settings = Settings()

    unknown = set(section.keys()) - {"perl", "timeout", "changes_url", "format"}
    if unknown:
        raise ConfigError(
            f"Unknown settings keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "perl" in section:
        settings.perl = _require_str(section, "perl", config_path)

    if "timeout" in section:
        val = section["timeout"]
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"timeout must be a positive integer, got {val!r}",
                config_path=config_path,
                option="timeout",
            )
        settings.timeout = val

    if "changes_url" in section:
        url = _require_str(section, "changes_url", config_path)
        if "{author}" not in url or "{release}" not in url:
            raise ConfigError(
                "changes_url must contain {author} and {release} placeholders",
                config_path=config_path,
                option="changes_url",
            )
        settings.changes_url = url

    if "format" in section:
        fmt = _require_str(section, "format", config_path)
        if fmt not in OUTPUT_FORMATS:
            raise ConfigError(
                f"format must be one of {', '.join(OUTPUT_FORMATS)}, got {fmt!r}",
                config_path=config_path,
                option="format",
            )
        settings.format = fmt

    return settings


def _require_str(section: Dict[str, Any], key: str, config_path: str) -> str:
    val = section[key]
    if not isinstance(val, str) or not val:
        raise ConfigError(
            f"{key} must be a non-empty string, got {type(val).__name__}",
            config_path=config_path,
            option=key,
        )
    return val
