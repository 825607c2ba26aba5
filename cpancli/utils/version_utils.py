"""
Version comparison utilities for cpancli.

CPAN versions are not PEP 440 versions: ``1.10`` is *lower* than ``1.9``
because decimal versions compare as numbers, and ``1.55_02`` marks a
developer release. Versions are first normalized to a dotted integer form
(the same mapping ``version.pm`` uses) and then compared with
:class:`packaging.version.Version`.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from packaging.version import InvalidVersion, Version

_DECIMAL_RE = re.compile(r"^(\d+)(?:\.(\d*))?$")
_DOTTED_RE = re.compile(r"^v?(\d+(?:\.\d+)+)$|^v(\d+)$")


def normalize_perl_version(value: Optional[str]) -> Optional[Version]:
    """Convert a CPAN version string into a comparable ``Version``.

    Args:
        value: Version string as reported by CPAN.pm or found in a file.

    Returns:
        Normalized version, or ``None`` when the string is empty, ``undef``
        or not a recognizable version.

    Examples:
        >>> normalize_perl_version("1.0203")
        <Version('1.20.300')>
        >>> normalize_perl_version("v1.2.3")
        <Version('1.2.3')>
        >>> normalize_perl_version("1.55_02") == normalize_perl_version("1.5502")
        True
    """
    if value is None:
        return None

    text = str(value).strip()
    if not text or text == "undef":
        return None

    # Underscores only separate developer releases; they do not change order
    text = text.replace("_", "")

    # Dotted-decimal: v1.2.3, 1.2.3, v5
    if text.startswith("v") or text.count(".") > 1:
        match = _DOTTED_RE.match(text)
        if not match:
            return None
        return _to_version(match.group(1) or match.group(2))

    match = _DECIMAL_RE.match(text)
    if not match:
        return None

    integer, fraction = match.group(1), match.group(2) or ""
    groups = [str(int(integer))]
    if fraction:
        padded = fraction + "0" * (-len(fraction) % 3)
        groups.extend(str(int(padded[i : i + 3])) for i in range(0, len(padded), 3))
    return _to_version(".".join(groups))


def _to_version(text: str) -> Optional[Version]:
    try:
        return Version(text)
    except InvalidVersion:
        return None


def is_up_to_date(installed: Optional[str], latest: Optional[str]) -> Optional[bool]:
    """Return whether ``installed`` is at least ``latest``.

    Returns:
        ``True`` or ``False``, or ``None`` when either side cannot be
        normalized and the caller has to rely on another source.
    """
    current = normalize_perl_version(installed)
    target = normalize_perl_version(latest)
    if current is None or target is None:
        return None
    return current >= target


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Classify the change from ``current_version`` to ``target_version``.

    Returns:
        One of ``"new"``, ``"same"``, ``"downgrade"``, ``"major"``,
        ``"minor"``, ``"patch"``, ``"update"`` or ``"unknown"``.

    Examples:
        >>> get_update_type("1.09", "2.00")
        'major'
        >>> get_update_type("1.9", "1.10")
        'downgrade'
        >>> get_update_type(None, "0.01")
        'new'
    """
    if current_version is None and target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    current = normalize_perl_version(current_version)
    target = normalize_perl_version(target_version)
    if current is None or target is None:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _classify_upgrade(current: Version, target: Version) -> str:
    """Classify an upgrade between two valid versions."""
    current_major, current_minor, current_patch = _normalize_release(current)
    target_major, target_minor, target_patch = _normalize_release(target)

    if current_major != target_major:
        return "major"

    if current_minor != target_minor:
        return "minor"

    if current_patch != target_patch:
        return "patch"

    return "update"


def _normalize_release(version: Version) -> Tuple[int, int, int]:
    """Normalize a version's release segment to (major, minor, patch)."""
    release = version.release
    major = release[0] if len(release) > 0 else 0
    minor = release[1] if len(release) > 1 else 0
    patch = release[2] if len(release) > 2 else 0
    return major, minor, patch
