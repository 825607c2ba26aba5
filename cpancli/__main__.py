"""
Executable module for cpancli.

Running:
    python -m cpancli

is equivalent to:
    cpan

This module simply forwards execution to the CLI entrypoint defined in
`cpancli.cli`.
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entrypoint when executing `python -m cpancli`.

    Returns:
        Exit code returned by the CLI.
    """
    # Import lazily so dependencies are only loaded during CLI use
    from cpancli.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
