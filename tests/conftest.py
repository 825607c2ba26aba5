from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Optional, Tuple

import pytest

from cpancli.context import CpanContext
from cpancli.core.options import ModuleAction, Options
from cpancli.backends.base import PackageManager
from cpancli.models import AuthorInfo, ModuleInfo
from cpancli.settings import Settings
from cpancli.utils.console import reconfigure_console
from cpancli.utils.logger import ROOT_LOGGER_NAME


class FakeBackend(PackageManager):
    """In-memory collaborator recording every call it receives."""

    def __init__(
        self,
        *,
        modules: Iterable[ModuleInfo] = (),
        authors: Iterable[AuthorInfo] = (),
        search_path: Iterable[Path] = (),
        unsupported: Iterable[ModuleAction] = (),
        failing: Iterable[str] = (),
        cpan_version: str = "2.36",
        shell_status: int = 0,
    ) -> None:
        super().__init__()
        self.modules = {module.id: module for module in modules}
        self.authors = {author.id: author for author in authors}
        self.search_path = list(search_path)
        self.unsupported = set(unsupported)
        self.failing = set(failing)
        self.cpan_version = cpan_version
        self.shell_status = shell_status
        self.autobundle_ok = True
        self.recompile_ok = True
        self.calls: List[Tuple[Any, ...]] = []

    def version(self) -> str:
        self.calls.append(("version",))
        return self.cpan_version

    def shell(self) -> int:
        self.calls.append(("shell",))
        return self.shell_status

    def supports(self, action: ModuleAction) -> bool:
        return action not in self.unsupported

    def run_action(self, action: ModuleAction, module: str, *, force: bool = False) -> bool:
        self.calls.append((action.method, module, force))
        return module not in self.failing

    def autobundle(self) -> bool:
        self.calls.append(("autobundle",))
        return self.autobundle_ok

    def recompile(self) -> bool:
        self.calls.append(("recompile",))
        return self.recompile_ok

    def expand_module(self, name: str) -> Optional[ModuleInfo]:
        return self.modules.get(name)

    def expand_author(self, author_id: str) -> Optional[AuthorInfo]:
        return self.authors.get(author_id)

    def all_modules(self) -> Iterator[ModuleInfo]:
        return iter(list(self.modules.values()))

    def module_search_path(self) -> List[Path]:
        return list(self.search_path)


@pytest.fixture(autouse=True)
def _plain_console(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep Rich output uncolored and rebuild consoles per test."""
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.setenv("COLUMNS", "200")
    reconfigure_console(color=False)
    yield
    reconfigure_console(color=True)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo setup_logging() so caplog sees cpancli records again."""
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.handlers.clear()
    root.propagate = True
    root.setLevel(logging.NOTSET)


@pytest.fixture
def isbn_module() -> ModuleInfo:
    return ModuleInfo(
        id="Business::ISBN",
        userid="BDFOY",
        description="Work with ISBNs",
        cpan_file="B/BD/BDFOY/Business-ISBN-3.009.tar.gz",
        inst_file="/usr/lib/perl5/Business/ISBN.pm",
        inst_version="3.008",
        cpan_version="3.009",
        uptodate=False,
    )


@pytest.fixture
def bdfoy() -> AuthorInfo:
    return AuthorInfo(id="BDFOY", fullname="brian d foy", email="brian.d.foy@gmail.com")


@pytest.fixture
def fake_backend(isbn_module: ModuleInfo, bdfoy: AuthorInfo) -> FakeBackend:
    return FakeBackend(modules=[isbn_module], authors=[bdfoy])


@pytest.fixture
def make_context(fake_backend: FakeBackend):
    """Build a CpanContext around the fake backend."""

    def _make(
        *,
        backend: Optional[PackageManager] = None,
        switches: Optional[dict] = None,
        output_format: str = "simple",
        settings: Optional[Settings] = None,
    ) -> CpanContext:
        return CpanContext(
            backend or fake_backend,
            settings=settings,
            options=Options(dict(switches or {})),
            output_format=output_format,
            usage="Usage: cpan [OPTIONS] [ARGS]...",
        )

    return _make
