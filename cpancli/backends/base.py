"""Interface of the package-management collaborator.

Everything substantive (installing, building, index lookups) is done by
the collaborator; cpancli only decides *which* capability to call. A
backend exposes exactly the capabilities the dispatcher needs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List, Optional

from cpancli.core.options import ModuleAction
from cpancli.core.cpan_config import CpanConfig
from cpancli.models import AuthorInfo, ModuleInfo


class PackageManager(ABC):
    """Capability set of the package-management collaborator.

    Attributes:
        config: Active CPAN configuration. Set once by the dispatcher
            before any operation runs.
    """

    #: Name used in diagnostics ("CPAN.pm cannot make!").
    name: str = "CPAN.pm"

    def __init__(self, config: Optional[CpanConfig] = None) -> None:
        self.config: CpanConfig = config or CpanConfig()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @abstractmethod
    def version(self) -> str:
        """Return the collaborator's own version."""

    @abstractmethod
    def shell(self) -> int:
        """Run the interactive shell; return its exit status."""

    # ------------------------------------------------------------------
    # Module actions
    # ------------------------------------------------------------------

    def supports(self, action: ModuleAction) -> bool:
        """Whether ``action`` (and its force variant) can be run."""
        return True

    @abstractmethod
    def run_action(self, action: ModuleAction, module: str, *, force: bool = False) -> bool:
        """Run ``action`` on one module.

        Args:
            action: What to do.
            module: Module or distribution name as typed by the user.
            force: Use the "run even if it failed before" variant.

        Returns:
            ``True`` on success, ``False`` when the collaborator reports a
            failure for this module.
        """

    @abstractmethod
    def autobundle(self) -> bool:
        """Write a snapshot bundle of the installed modules."""

    @abstractmethod
    def recompile(self) -> bool:
        """Rebuild all installed XS extensions."""

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @abstractmethod
    def expand_module(self, name: str) -> Optional[ModuleInfo]:
        """Look up one module; ``None`` when the index does not know it."""

    @abstractmethod
    def expand_author(self, author_id: str) -> Optional[AuthorInfo]:
        """Look up one author; ``None`` when unknown."""

    @abstractmethod
    def all_modules(self) -> Iterator[ModuleInfo]:
        """Iterate over every module the index knows."""

    @abstractmethod
    def module_search_path(self) -> List[Path]:
        """Directories searched for installed modules (Perl's ``@INC``)."""
