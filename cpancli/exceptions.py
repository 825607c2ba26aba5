"""
Custom exception hierarchy for cpancli.

All exceptions inherit from :class:`CpanCliError`, support optional
structured metadata via the ``details`` attribute and carry the process
exit code that :func:`cpancli.cli.main` returns when the error escapes a
command.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional

from cpancli.constants import (
    EXIT_ERROR,
    EXIT_USAGE,
    EXIT_CONFIG,
    EXIT_NETWORK,
    EXIT_DELEGATION,
    EXIT_MODULE_FAILED,
)


class CpanCliError(Exception):
    """Base exception for all cpancli errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    exit_code: int = EXIT_ERROR

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class UsageError(CpanCliError):
    """Raised when a switch is used without the arguments it needs."""

    __slots__ = ()

    exit_code = EXIT_USAGE


class ConfigError(CpanCliError):
    """Raised when a configuration file is missing or cannot be loaded.

    Covers both the CPAN.pm configuration loaded with ``-j`` and the
    cpancli settings file.

    Args:
        message: Error description.
        config_path: Path of the offending file.
        option: Offending option name, if the error concerns one key.
        line_number: Line where parsing failed.
    """

    __slots__ = ("config_path", "option", "line_number")

    exit_code = EXIT_CONFIG

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
        line_number: Optional[int] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)
        _add_if(details, "line", line_number)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
        self.line_number = line_number


class DelegationError(CpanCliError):
    """Raised when the collaborator cannot perform a requested operation.

    Args:
        message: Error description.
        method: Collaborator method that was requested.
    """

    __slots__ = ("method",)

    exit_code = EXIT_DELEGATION

    def __init__(self, message: str, *, method: Optional[str] = None) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "method", method)
        super().__init__(message, details)
        self.method = method


class BackendError(DelegationError):
    """Raised when the collaborator process cannot be run or answers garbage.

    Args:
        message: Error description.
        command: Command line that was executed.
        returncode: Exit status of the collaborator process.
        stderr: Captured error output, truncated for safety.
    """

    __slots__ = ("command", "returncode", "stderr")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
        method: Optional[str] = None,
    ) -> None:
        super().__init__(message, method=method)
        _add_if(self.details, "command", command)
        _add_if(self.details, "returncode", returncode)
        if stderr:
            self.details["stderr"] = _truncate(stderr.strip())

        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class ModuleActionError(CpanCliError):
    """Raised when a module action fails for one or more modules.

    Args:
        message: Error description.
        action: Collaborator method that was run.
        failed: Names of the modules that failed.
    """

    __slots__ = ("action", "failed")

    exit_code = EXIT_MODULE_FAILED

    def __init__(
        self,
        message: str,
        *,
        action: Optional[str] = None,
        failed: Optional[list] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "action", action)
        if failed:
            details["failed"] = ", ".join(failed)

        super().__init__(message, details)

        self.action = action
        self.failed = list(failed or [])


class NetworkError(CpanCliError):
    """Raised when HTTP or network operations fail.

    Args:
        message: Error description.
        url: URL being accessed.
        status_code: HTTP status code, if available.
        response_body: Raw response body, truncated for safety.
    """

    __slots__ = ("url", "status_code", "response_body")

    exit_code = EXIT_NETWORK

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "url", url)
        _add_if(details, "status_code", status_code)

        if response_body is not None:
            details["response"] = _truncate(response_body)

        super().__init__(message, details)

        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class FileOperationError(CpanCliError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
