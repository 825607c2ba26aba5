"""
cpancli - a command-line front end to CPAN.pm

cpancli maps one-letter switches onto the capabilities of the CPAN.pm
package manager: installing, building, testing and cleaning modules,
reporting on authors, versions and change logs, and loading or dumping
CPAN.pm configuration files.

    cpan Business::ISBN
    cpan -O
    cpan -j MyConfig.pm -J
"""

from __future__ import annotations

from cpancli.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "cpancli Contributors"
__license__ = "Apache-2.0"
__description__ = "Command-line front end to the CPAN.pm package manager."

__all__ = [
    "__version__",
]
