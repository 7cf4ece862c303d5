import re

from typing import Optional

# --- Scan -------------------------------------------------------------- #


class Scan:
    """
    A simple scanner over the text of a single command-line value.
    """

    _src: str
    _off: int

    def __init__(self, src: str, off: int = 0):
        """
        Initializes a new `Scan` object.

        Args:
            src: The string to scan.
            off: The starting offset within the string.
        """
        self._src = src
        self._off = off

    def curr(self) -> str:
        """
        Returns the current character being scanned.

        Returns:
            The current character, or '\0' if at the end of the string.
        """
        if self.eof():
            return "\0"
        return self._src[self._off]

    def next(self) -> str:
        """
        Advances the scanner to the next character.

        Returns:
            The new current character, or '\0' if at the end of the string.
        """
        if self.eof():
            return "\0"

        self._off += 1
        return self.curr()

    def eof(self) -> bool:
        """
        Checks if the scanner is at the end of the string.

        Returns:
            True if at the end of the string, False otherwise.
        """
        return self._off >= len(self._src)


# --- Coercion ---------------------------------------------------------- #

Value = str | bool | int | float | re.Pattern | None

NULLS = ("null", "nil")
TRUES = ("true", "yes")
FALSES = ("false", "no")

_INT_RE = re.compile(r"\d+", re.ASCII)
_FLOAT_RE = re.compile(r"\d+\.\d+", re.ASCII)
_REGEX_RE = re.compile(r"/(.*)/", re.DOTALL)
_QUOTED_RE = re.compile(r"'.*'|\".*\"", re.DOTALL)

# Escapes recognized inside double quoted values
_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "e": "\033",
    "f": "\f",
    "s": " ",
    "v": "\v",
}


def _unescapeSingle(s: Scan) -> str:
    """Unescapes the body of a single quoted value, only `\\\\` and `\\'` are special."""
    res = ""
    while not s.eof():
        c = s.curr()
        if c == "\\":
            escaped = s.next()
            if escaped in ("\\", "'") and not s.eof():
                res += escaped
            else:
                # Not an escape, the next character is read as is
                res += c
                continue
        else:
            res += c
        s.next()
    return res


def _unescapeDouble(s: Scan) -> str:
    """Unescapes the body of a double quoted value."""
    res = ""
    while not s.eof():
        c = s.curr()
        if c == "\\":
            if s.next() == "\0" and s.eof():
                res += c
                break
            c = s.curr()
            res += _ESCAPES.get(c, c)
        else:
            res += c
        s.next()
    return res


def unquote(raw: str) -> str:
    """
    Strips the quotes around `raw` and interprets the body as a literal
    string. No code is ever evaluated.
    """
    body = Scan(raw[1:-1])
    if raw[0] == "'":
        return _unescapeSingle(body)
    return _unescapeDouble(body)


def _tryCompile(pattern: str) -> Optional[re.Pattern]:
    """Tries to compile a regular expression, returning None if unsuccessful."""
    try:
        return re.compile(pattern)
    except re.error:
        return None


def coerce(raw: Optional[str]) -> Value:
    """
    Converts a raw command-line value into a typed value.

    The rules are tried in order and the first match wins, so "1" is an
    integer and never a string. Anything that matches no rule is returned
    unchanged, this function never raises.
    """
    if raw is None or raw in NULLS:
        return None

    if raw in TRUES:
        return True

    if raw in FALSES:
        return False

    if _INT_RE.fullmatch(raw):
        return int(raw)

    if _FLOAT_RE.fullmatch(raw):
        return float(raw)

    if match := _REGEX_RE.fullmatch(raw):
        pattern = _tryCompile(match.group(1))
        return raw if pattern is None else pattern

    if _QUOTED_RE.fullmatch(raw):
        return unquote(raw)

    return raw
