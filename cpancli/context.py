"""
Runtime context shared by the operation handlers.

One instance is created per invocation by :mod:`cpancli.cli` and handed
to whichever handler the dispatcher selects.
"""

from __future__ import annotations

from typing import Optional

from cpancli.settings import Settings
from cpancli.core.options import Options
from cpancli.backends.base import PackageManager
from cpancli.constants import DEFAULT_FORMAT, PROG_NAME


class CpanContext:
    """Global context object for one ``cpan`` invocation.

    Attributes:
        backend: The package-management collaborator.
        settings: cpancli settings.
        options: Switches given on the command line.
        output_format: Report format (``simple``, ``table``, ``json``).
        usage: Rendered help text, printed by ``-h``.
        prog_name: Name the tool was invoked as.
    """

    __slots__ = ("backend", "settings", "options", "output_format", "usage", "prog_name")

    def __init__(
        self,
        backend: PackageManager,
        *,
        settings: Optional[Settings] = None,
        options: Optional[Options] = None,
        output_format: str = DEFAULT_FORMAT,
        usage: str = "",
        prog_name: str = PROG_NAME,
    ) -> None:
        self.backend = backend
        self.settings: Settings = settings or Settings()
        self.options: Options = options or Options()
        self.output_format = output_format
        self.usage = usage
        self.prog_name = prog_name
