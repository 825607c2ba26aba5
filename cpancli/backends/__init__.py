"""
Package-management collaborators.

    from cpancli.backends import PerlCpanBackend

The dispatcher only talks to :class:`PackageManager`; tests substitute
their own implementation.
"""

from __future__ import annotations

from cpancli.backends.base import PackageManager
from cpancli.backends.perl import PerlCpanBackend

__all__ = [
    "PackageManager",
    "PerlCpanBackend",
]
