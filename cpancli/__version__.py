"""
cpancli version information.

Single source of truth for the package version, reported by ``cpan -v``
next to the version of the CPAN.pm collaborator.
"""

from __future__ import annotations

__version__ = "0.1.0.dev0"
