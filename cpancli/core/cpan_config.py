"""CPAN.pm configuration files: loading, parsing and dumping.

CPAN.pm keeps its configuration in a Perl file that assigns an anonymous
hash to ``$CPAN::Config``::

    $CPAN::Config = {
      'cpan_home' => '/home/me/.cpan',
      'urllist' => [
        'https://www.cpan.org/'
      ],
    };
    1;
    __END__

``cpan -j FILE`` loads such a file and ``cpan -J`` writes the active
configuration back out in the same form. Rather than evaluating Perl, this
module parses the data subset those files actually use:

- hashes (``{ ... }``) and arrays (``[ ... ]``), nested freely
- single- and double-quoted strings, ``q{...}`` / ``qq{...}`` with any
  delimiter (double-quoted strings must not interpolate variables)
- integer and decimal numbers, ``undef``
- bareword hash keys, ``=>`` and ``,`` separators, trailing commas
- ``$CPAN::Config->{key} = value;`` statements
- ``#`` comments, a trailing ``1;`` and anything after ``__END__``

Typical usage::

    config = load_cpan_config(Path("MyConfig.pm"))
    print(config.cpan_home)
    text = dump_perl_config(config.data)   # reloadable with -j
"""

from __future__ import annotations

import re
import math
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from cpancli.utils.logger import get_logger
from cpancli.utils.filesystem import safe_read_file
from cpancli.exceptions import ConfigError, FileOperationError
from cpancli.constants import CPAN_CONFIG_VARIABLE, USER_CPAN_CONFIG

logger = get_logger("cpan_config")

__all__ = [
    "CpanConfig",
    "parse_perl_config",
    "dump_perl_config",
    "load_cpan_config",
    "discover_cpan_config",
    "load_default_cpan_config",
]


# ---------------------------------------------------------------------------
# Active configuration
# ---------------------------------------------------------------------------


@dataclass
class CpanConfig:
    """The configuration mapping CPAN.pm runs with.

    Attributes:
        data: The ``$CPAN::Config`` hash.
        source_path: File it was loaded from, or ``None`` for an empty
            configuration.
        explicit: ``True`` when the file came from ``-j`` and therefore has
            to be handed to CPAN.pm instead of its own default lookup.
    """

    data: Dict[str, Any] = field(default_factory=dict)
    source_path: Optional[Path] = None
    explicit: bool = False

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    @property
    def cpan_home(self) -> str:
        return str(self.data.get("cpan_home") or "")


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<comment>\#[^\n]*)
  | (?P<end>__END__|__DATA__)
  | (?P<var>\$[A-Za-z_][\w:]*)
  | (?P<arrow>=>|->)
  | (?P<number>-?(?:\d[\d_]*)?\.?\d+(?:[eE][-+]?\d+)?)
  | (?P<quote>["'])
  | (?P<word>[A-Za-z_]\w*)
  | (?P<punct>[{}\[\]();,=])
    """,
    re.VERBOSE,
)

_BRACKETS = {"{": "}", "[": "]", "(": ")", "<": ">"}
_DQ_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "f": "\f",
    "e": "\x1b",
    "a": "\a",
    "0": "\0",
}

Token = Tuple[str, Any, int]


class _Tokenizer:
    """Turns configuration text into ``(kind, value, line)`` tokens."""

    def __init__(self, text: str, config_path: Optional[str]) -> None:
        self.text = text
        self.pos = 0
        self.config_path = config_path

    def _line(self, pos: Optional[int] = None) -> int:
        return self.text.count("\n", 0, self.pos if pos is None else pos) + 1

    def _error(self, message: str, pos: Optional[int] = None) -> ConfigError:
        return ConfigError(
            message,
            config_path=self.config_path,
            line_number=self._line(pos),
        )

    def tokens(self) -> List[Token]:
        result: List[Token] = []
        while self.pos < len(self.text):
            match = _TOKEN_RE.match(self.text, self.pos)
            if not match:
                raise self._error(f"Unexpected character {self.text[self.pos]!r}")

            kind = match.lastgroup
            start = self.pos
            self.pos = match.end()

            if kind in ("ws", "comment"):
                continue
            if kind == "end":
                break
            if kind == "quote":
                value = self._quoted(match.group(), interpolating=match.group() == '"')
                result.append(("string", value, self._line(start)))
            elif kind == "word" and match.group() in ("q", "qq") and self._at_delimiter():
                value = self._quoted(self._take_delimiter(), interpolating=match.group() == "qq")
                result.append(("string", value, self._line(start)))
            else:
                result.append((kind, match.group(), self._line(start)))

        result.append(("eof", None, self._line()))
        return result

    def _at_delimiter(self) -> bool:
        rest = self.text[self.pos :].lstrip()
        return bool(rest) and not rest[0].isalnum() and rest[0] not in "_,;=)"

    def _take_delimiter(self) -> str:
        while self.text[self.pos].isspace():
            self.pos += 1
        delimiter = self.text[self.pos]
        self.pos += 1
        return delimiter

    def _quoted(self, opener: str, *, interpolating: bool) -> str:
        """Read a string body up to the closing delimiter."""
        closer = _BRACKETS.get(opener, opener)
        nests = closer != opener
        depth = 0
        start = self.pos - 1
        chars: List[str] = []

        while self.pos < len(self.text):
            char = self.text[self.pos]
            self.pos += 1

            if char == "\\" and self.pos < len(self.text):
                nxt = self.text[self.pos]
                self.pos += 1
                if nxt in (opener, closer, "\\"):
                    chars.append(nxt)
                elif interpolating:
                    chars.append(_DQ_ESCAPES.get(nxt, nxt))
                else:
                    chars.append("\\" + nxt)
                continue

            if nests and char == opener:
                depth += 1
            elif char == closer:
                if depth == 0:
                    return "".join(chars)
                depth -= 1
            elif interpolating and char in "$@":
                following = self.text[self.pos : self.pos + 1]
                if following and (following.isalnum() or following in "_{:"):
                    raise self._error(
                        "Variable interpolation is not supported in configuration strings",
                        self.pos - 1,
                    )

            chars.append(char)

        raise self._error("Unterminated string", start)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    """Recursive-descent parser over the token list."""

    def __init__(self, tokens: List[Token], config_path: Optional[str]) -> None:
        self.tokens = tokens
        self.index = 0
        self.config_path = config_path

    @property
    def current(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        if token[0] != "eof":
            self.index += 1
        return token

    def _error(self, message: str, token: Optional[Token] = None) -> ConfigError:
        line = (token or self.current)[2]
        return ConfigError(message, config_path=self.config_path, line_number=line)

    def _expect(self, kind: str, value: Optional[str] = None) -> Token:
        token = self.current
        if token[0] != kind or (value is not None and token[1] != value):
            wanted = value or kind
            raise self._error(f"Expected {wanted!r}, found {_describe(token)}")
        return self._advance()

    def _accept(self, kind: str, value: Optional[str] = None) -> bool:
        token = self.current
        if token[0] == kind and (value is None or token[1] == value):
            self._advance()
            return True
        return False

    def parse_file(self) -> Dict[str, Any]:
        config: Optional[Dict[str, Any]] = None

        while self.current[0] != "eof":
            if self._accept("punct", ";"):
                continue

            token = self.current
            if token[0] == "number":
                # The customary trailing "1;"
                self._advance()
                self._expect("punct", ";")
                continue

            if token[0] == "word" and token[1] == "our":
                self._advance()
                token = self.current

            if token[0] != "var" or token[1] != CPAN_CONFIG_VARIABLE:
                raise self._error(
                    f"Expected an assignment to {CPAN_CONFIG_VARIABLE}, found {_describe(token)}"
                )
            self._advance()

            if self._accept("arrow", "->"):
                # $CPAN::Config->{key} = value;
                self._expect("punct", "{")
                key = self._key()
                self._expect("punct", "}")
                self._expect("punct", "=")
                if config is None:
                    config = {}
                config[key] = self._value()
            else:
                self._expect("punct", "=")
                value = self._value()
                if not isinstance(value, dict):
                    raise self._error(f"{CPAN_CONFIG_VARIABLE} must be a hash reference", token)
                config = value

            if self.current[0] != "eof":
                self._expect("punct", ";")

        if config is None:
            raise self._error(f"No {CPAN_CONFIG_VARIABLE} assignment found")
        return config

    def _value(self) -> Any:
        token = self._advance()
        kind, value = token[0], token[1]

        if kind == "string":
            return value
        if kind == "number":
            return _number(value)
        if kind == "word" and value == "undef":
            return None
        if kind == "punct" and value == "{":
            return self._hash()
        if kind == "punct" and value == "[":
            return self._array()

        raise self._error(f"Unsupported value {_describe(token)}", token)

    def _key(self) -> str:
        token = self._advance()
        if token[0] in ("string", "word", "number"):
            return str(token[1])
        raise self._error(f"Invalid hash key {_describe(token)}", token)

    def _hash(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        while not self._accept("punct", "}"):
            key = self._key()
            if not (self._accept("arrow", "=>") or self._accept("punct", ",")):
                raise self._error(f"Expected '=>' after key {key!r}, found {_describe(self.current)}")
            result[key] = self._value()
            if not self._accept("punct", ","):
                self._expect("punct", "}")
                break
        return result

    def _array(self) -> List[Any]:
        result: List[Any] = []
        while not self._accept("punct", "]"):
            result.append(self._value())
            if not self._accept("punct", ","):
                self._expect("punct", "]")
                break
        return result


def _describe(token: Token) -> str:
    if token[0] == "eof":
        return "end of file"
    return repr(token[1])


def _number(text: str) -> Any:
    cleaned = text.replace("_", "")
    if re.fullmatch(r"-?\d+", cleaned):
        return int(cleaned)
    return float(cleaned)


def parse_perl_config(text: str, *, config_path: Optional[str] = None) -> Dict[str, Any]:
    """Parse the text of a CPAN.pm configuration file.

    Args:
        text: File contents.
        config_path: Path used in error messages.

    Returns:
        The ``$CPAN::Config`` mapping.

    Raises:
        ConfigError: The text is not a configuration file this parser
            understands. ``line_number`` points at the offending token.
    """
    tokens = _Tokenizer(text, config_path).tokens()
    return _Parser(tokens, config_path).parse_file()


# ---------------------------------------------------------------------------
# Dumper
# ---------------------------------------------------------------------------


def _quote(text: str) -> str:
    return "'" + text.replace("\\", "\\\\").replace("'", "\\'") + "'"


def _dump_value(value: Any, indent: int) -> str:
    pad = "  " * (indent + 1)
    close = "  " * indent

    if value is None:
        return "undef"
    if isinstance(value, bool):
        return "1" if value else "''"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return _quote(repr(value))
        return repr(value)
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = [
            f"{pad}{_quote(str(key))} => {_dump_value(value[key], indent + 1)}"
            for key in sorted(value, key=str)
        ]
        return "{\n" + ",\n".join(items) + f"\n{close}}}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [f"{pad}{_dump_value(item, indent + 1)}" for item in value]
        return "[\n" + ",\n".join(items) + f"\n{close}]"
    return _quote(str(value))


def dump_perl_config(data: Dict[str, Any]) -> str:
    """Serialize ``data`` as a CPAN.pm configuration file.

    The layout matches ``Data::Dumper`` with ``Indent=1`` and sorted keys,
    followed by ``1;`` and ``__END__``, so CPAN.pm itself can ``require``
    the result and :func:`parse_perl_config` reads it back unchanged.
    """
    return f"{CPAN_CONFIG_VARIABLE} = {_dump_value(data, 0)};\n1;\n__END__\n"


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_cpan_config(path: Path) -> CpanConfig:
    """Load the configuration file given with ``-j``.

    Raises:
        ConfigError: ``Config file [path] does not exist!`` or
            ``Could not load [path]: reason``.
    """
    if not path.exists():
        raise ConfigError(f"Config file [{path}] does not exist!", config_path=str(path))

    try:
        text = safe_read_file(path)
        data = parse_perl_config(text, config_path=str(path))
    except (ConfigError, FileOperationError) as exc:
        raise ConfigError(
            f"Could not load [{path}]: {exc.message}",
            config_path=str(path),
            line_number=getattr(exc, "line_number", None),
        ) from exc

    logger.info("Loaded CPAN configuration from %s (%d keys)", path, len(data))
    return CpanConfig(data=data, source_path=path, explicit=True)


def discover_cpan_config(home: Optional[Path] = None) -> Optional[Path]:
    """Return the per-user CPAN.pm configuration file, if there is one."""
    candidate = (home or Path.home()) / USER_CPAN_CONFIG
    if candidate.is_file():
        logger.debug("Found CPAN configuration: %s", candidate)
        return candidate
    logger.debug("No CPAN configuration at %s", candidate)
    return None


def load_default_cpan_config(home: Optional[Path] = None) -> CpanConfig:
    """Load the configuration CPAN.pm would use when ``-j`` is absent.

    Like CPAN.pm's silent load, problems are not fatal: an unreadable or
    unparseable file is reported as a warning and an empty configuration
    is used.
    """
    path = discover_cpan_config(home)
    if path is None:
        return CpanConfig()

    try:
        data = parse_perl_config(safe_read_file(path), config_path=str(path))
    except (ConfigError, FileOperationError) as exc:
        logger.warning("Ignoring CPAN configuration %s: %s", path, exc)
        return CpanConfig()

    return CpanConfig(data=data, source_path=path)
