"""
Module and author records returned by the package-management collaborator.

These are plain snapshots of what CPAN.pm reports for ``expand("Module",
...)`` and ``expand("Author", ...)``; the collaborator owns all lookups.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from cpancli.utils.version_utils import is_up_to_date

_ARCHIVE_SUFFIXES = (".tar.gz", ".tar.bz2", ".tar.xz", ".tgz", ".zip")


def _text(value: Any) -> Optional[str]:
    """Coerce a JSON scalar into an optional string (``None``/"" -> ``None``)."""
    if value is None:
        return None
    text = str(value)
    return text if text else None


@dataclass
class AuthorInfo:
    """A CPAN author.

    Attributes:
        id: PAUSE identifier (``BDFOY``).
        fullname: Display name.
        email: Contact address.
    """

    id: str
    fullname: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AuthorInfo":
        return cls(
            id=str(data.get("id") or ""),
            fullname=_text(data.get("fullname")),
            email=_text(data.get("email")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ModuleInfo:
    """A module as known to the CPAN index and the local installation.

    Attributes:
        id: Module name (``Business::ISBN``).
        userid: Author id of the distribution that provides it.
        description: One-line description from the module list.
        cpan_file: Distribution path on CPAN (``B/BD/BDFOY/Foo-1.0.tar.gz``).
        inst_file: Installed file, or ``None`` when not installed.
        inst_version: Installed version.
        cpan_version: Version available from the index.
        uptodate: Up-to-date flag as reported by the collaborator.
    """

    id: str
    userid: Optional[str] = None
    description: Optional[str] = None
    cpan_file: Optional[str] = None
    inst_file: Optional[str] = None
    inst_version: Optional[str] = None
    cpan_version: Optional[str] = None
    uptodate: Optional[bool] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ModuleInfo":
        uptodate = data.get("uptodate")
        return cls(
            id=str(data.get("id") or ""),
            userid=_text(data.get("userid")),
            description=_text(data.get("description")),
            cpan_file=_text(data.get("cpan_file")),
            inst_file=_text(data.get("inst_file")),
            inst_version=_text(data.get("inst_version")),
            cpan_version=_text(data.get("cpan_version")),
            uptodate=None if uptodate is None else bool(uptodate),
        )

    @property
    def is_installed(self) -> bool:
        return self.inst_file is not None

    @property
    def is_up_to_date(self) -> bool:
        """Installed version equals or exceeds the index version.

        Falls back to the collaborator's own flag when either version
        cannot be compared (``undef``, odd formats).
        """
        computed = is_up_to_date(self.inst_version, self.cpan_version)
        if computed is not None:
            return computed
        return bool(self.uptodate)

    @property
    def distribution_name(self) -> str:
        """Distribution-style name of the module (``Foo::Bar`` -> ``Foo-Bar``)."""
        return self.id.replace("::", "-")

    @property
    def release_name(self) -> Optional[str]:
        """Release the module ships in (``Foo-Bar-1.02``).

        Taken from the distribution file when known, since one release
        can provide many modules; otherwise built from the module name
        and the index version.
        """
        if self.cpan_file:
            basename = self.cpan_file.rsplit("/", 1)[-1]
            for suffix in _ARCHIVE_SUFFIXES:
                if basename.endswith(suffix):
                    return basename[: -len(suffix)]
        if self.cpan_version:
            return f"{self.distribution_name}-{self.cpan_version}"
        return None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["uptodate"] = self.is_up_to_date
        return data
