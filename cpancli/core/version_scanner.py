"""Best-effort ``$VERSION`` extraction from Perl module sources.

``cpan -l`` lists every installed module together with its version. The
version is found the way PAUSE does it: scan the file line by line, skip
POD blocks and comment lines, and take the first line that assigns to a
(possibly package-qualified) ``VERSION`` variable.

PAUSE then evaluates that line as Perl. Here the line is handed to a small
evaluator that only understands the forms version declarations use in
practice and refuses everything else:

- quoted literals: ``'1.23'``, ``"1.23"``, ``q{1.23}``, ``qq(1.23)``
  (no variable interpolation)
- numeric literals with Perl stringification (``1.230`` -> ``1.23``,
  ``1_000`` -> ``1000``)
- v-strings (``v1.2.3``), kept as written
- concatenation with ``.`` and grouping parentheses
- ``version->declare(...)``, ``version->new(...)``, ``version->parse(...)``
  and ``qv(...)`` wrappers
- the assignment operators ``=``, ``||=`` and ``//=``

Lines that compute the version dynamically (``eval``, ``sprintf``, regex
captures from ``$Revision$`` keywords, ...) are reported as ``undef``.

Typical usage::

    >>> parse_version_safely(Path("lib/Foo/Bar.pm"))
    '1.23'
    >>> path_to_module(Path("lib"), Path("lib/Foo/Bar.pm"))
    'Foo::Bar'
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import List, Optional, Tuple, Union

from cpancli.utils.logger import get_logger
from cpancli.utils.filesystem import iter_module_files
from cpancli.constants import UNDEF_VERSION

logger = get_logger("version_scanner")

PathLike = Union[str, Path]

_POD_START_RE = re.compile(r"^=(?!cut)")
_POD_END_RE = re.compile(r"^=cut")
_COMMENT_RE = re.compile(r"^\s*#")
_DECLARATION_RE = re.compile(r"([$*])(([\w:']*)\bVERSION)\b.*=")

_NUMBER_RE = re.compile(r"\d[\d_]*(?:\.[\d_]*)?(?:[eE][-+]?\d+)?|\.\d[\d_]*")
_VSTRING_RE = re.compile(r"v\d+(?:\.\d+)*")
_WRAPPER_RE = re.compile(r"(?:version\s*->\s*(?:declare|new|parse)|qv)\s*(?=\()")
_ASSIGN_RE = re.compile(r"\s*\)?\s*(\|\|=|//=|=(?![=~>]))")

_BRACKETS = {"(": ")", "[": "]", "{": "}", "<": ">"}


class _Unsupported(Exception):
    """The expression uses something outside the evaluator's subset."""


def parse_version_safely(file_path: PathLike) -> Optional[str]:
    """Return the declared version of a Perl source file.

    Args:
        file_path: File to scan.

    Returns:
        The version string, ``"undef"`` when no usable declaration exists,
        or ``None`` when the file cannot be read.
    """
    try:
        with open(file_path, encoding="utf-8", errors="replace") as fh:
            lines = fh.read().splitlines()
    except OSError as exc:
        logger.debug("Cannot read %s: %s", file_path, exc)
        return None

    in_pod = False
    version: Optional[str] = None

    for line in lines:
        if _POD_START_RE.match(line):
            in_pod = True
        elif _POD_END_RE.match(line):
            in_pod = False

        if in_pod or _COMMENT_RE.match(line):
            continue

        match = _DECLARATION_RE.search(line)
        if not match:
            continue

        version = eval_version(line, match.group(1), match.group(2))
        break

    if version is None:
        return UNDEF_VERSION
    return version


def eval_version(line: str, sigil: str, var: str) -> Optional[str]:
    """Evaluate the assignment to ``sigil`` + ``var`` found on ``line``.

    Only the statement that assigns to the variable is looked at;
    whatever precedes it on the line (``package Foo;``, ``our``) is
    ignored.

    Returns:
        The assigned value as Perl would stringify it, or ``None`` when the
        line does not assign a supported expression.
    """
    start = line.find(sigil + var)
    if start < 0:
        return None

    assignment = _ASSIGN_RE.match(line, start + len(sigil) + len(var))
    if not assignment:
        return None

    try:
        evaluator = _Evaluator(line, assignment.end())
        return evaluator.statement()
    except _Unsupported as exc:
        logger.debug("Unsupported version expression %r: %s", line.strip(), exc)
        return None


class _Evaluator:
    """Evaluates ``expr ;`` starting at ``pos`` in ``text``."""

    def __init__(self, text: str, pos: int) -> None:
        self.text = text
        self.pos = pos

    def _skip_ws(self) -> None:
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def _peek(self) -> str:
        self._skip_ws()
        return self.text[self.pos : self.pos + 1]

    def statement(self) -> str:
        value = self.expression()
        tail = self._peek()
        if tail not in ("", ";", "#"):
            raise _Unsupported(f"unexpected {self.text[self.pos:]!r}")
        return value

    def expression(self) -> str:
        value = self.term()
        while self._peek() == "." and not self.text[self.pos + 1 : self.pos + 2].isdigit():
            self.pos += 1
            if self._peek() == "=":
                raise _Unsupported("'.=' is not an expression")
            value += self.term()
        return value

    def term(self) -> str:
        char = self._peek()
        rest = self.text[self.pos :]

        if char == "(":
            self.pos += 1
            value = self.expression()
            if self._peek() != ")":
                raise _Unsupported("unbalanced parentheses")
            self.pos += 1
            return value

        if char == "\\":
            # *VERSION = \'1.00';
            self.pos += 1
            return self.term()

        if char in ("'", '"'):
            self.pos += 1
            return self._quoted(char, interpolating=char == '"')

        wrapper = _WRAPPER_RE.match(rest)
        if wrapper:
            self.pos += wrapper.end()
            return self.term()

        quote_op = re.match(r"(qq|q)\s*([^\w\s])", rest)
        if quote_op:
            self.pos += quote_op.end()
            return self._quoted(quote_op.group(2), interpolating=quote_op.group(1) == "qq")

        vstring = _VSTRING_RE.match(rest)
        if vstring:
            self.pos += vstring.end()
            return vstring.group()

        number = _NUMBER_RE.match(rest)
        if number:
            self.pos += number.end()
            return _stringify_number(number.group())

        raise _Unsupported(f"unsupported term {rest[:20]!r}")

    def _quoted(self, opener: str, *, interpolating: bool) -> str:
        closer = _BRACKETS.get(opener, opener)
        depth = 0
        chars: List[str] = []

        while self.pos < len(self.text):
            char = self.text[self.pos]
            self.pos += 1

            if char == "\\" and self.pos < len(self.text):
                nxt = self.text[self.pos]
                self.pos += 1
                if nxt in (opener, closer, "\\") or interpolating:
                    chars.append(nxt)
                else:
                    chars.append("\\" + nxt)
                continue

            if closer != opener and char == opener:
                depth += 1
            elif char == closer:
                if depth == 0:
                    return "".join(chars)
                depth -= 1
            elif interpolating and char in "$@":
                raise _Unsupported("variable interpolation")

            chars.append(char)

        raise _Unsupported("unterminated string")


def _stringify_number(literal: str) -> str:
    """Render a numeric literal the way Perl prints the number."""
    cleaned = literal.replace("_", "")
    if re.fullmatch(r"\d+", cleaned):
        return str(int(cleaned))
    number = float(cleaned)
    if number.is_integer() and abs(number) < 1e15:
        return str(int(number))
    return "%.15g" % number


# ---------------------------------------------------------------------------
# Search path helpers
# ---------------------------------------------------------------------------


def path_to_module(root: PathLike, path: PathLike) -> str:
    """Turn a module file path into a module name.

    The search-path ``root`` is removed, the ``.pm`` suffix stripped and
    any path component containing non-word characters (architecture
    directories such as ``x86_64-linux``) dropped. Both paths are
    normalized first, so roots like ``/opt/perl/bin/../lib`` work.

    Example::

        >>> path_to_module("/usr/lib/perl5", "/usr/lib/perl5/x86_64-linux/Foo/Bar.pm")
        'Foo::Bar'
    """
    relative = Path(os.path.normpath(path)).relative_to(os.path.normpath(root))
    parts = list(relative.parts)
    if parts and parts[-1].endswith(".pm"):
        parts[-1] = parts[-1][: -len(".pm")]
    return "::".join(part for part in parts if part and not re.search(r"\W", part))


def scan_search_path(root: PathLike) -> List[Tuple[str, str]]:
    """Return ``(module name, version)`` for every module below ``root``."""
    results: List[Tuple[str, str]] = []
    for file in iter_module_files(root):
        version = parse_version_safely(file)
        results.append((path_to_module(root, file), version or UNDEF_VERSION))
    return results
