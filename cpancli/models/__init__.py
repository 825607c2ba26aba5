"""
Data model exports for cpancli.

Example:
    >>> from cpancli.models import ModuleInfo, AuthorInfo
"""

from __future__ import annotations

from cpancli.models.module import AuthorInfo, ModuleInfo

__all__ = [
    "AuthorInfo",
    "ModuleInfo",
]
