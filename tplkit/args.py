import re
import logging

from enum import Enum
from typing import Sequence

from . import values

_logger = logging.getLogger(__name__)

Opt = str | bool


# --- Errors ------------------------------------------------------------ #


class CommandOptionError(RuntimeError):
    """Base class for errors caused by a bad command line."""

    pass


class InvalidContextValue(CommandOptionError):
    def __init__(self, token: str):
        super().__init__(f"{token}: invalid context value.")
        self.token = token


class MissingArgument(CommandOptionError):
    def __init__(self, option: str):
        super().__init__(f"-{option}: argument required.")
        self.option = option


class UnknownOption(CommandOptionError):
    def __init__(self, option: str):
        super().__init__(f"-{option}: unknown option.")
        self.option = option


# --- Option table ------------------------------------------------------ #


class ArgClass(Enum):
    """
    How a single character option consumes its value.
    """

    NONE = 0
    REQUIRED = 1
    OPTIONAL = 2


class OptionTable:
    _classes: dict[str, ArgClass]

    def __init__(self, classes: dict[str, ArgClass] | None = None):
        self._classes = dict(classes or {})

    @staticmethod
    def of(none: str = "", required: str = "", optional: str = "") -> "OptionTable":
        """
        Builds a table from three strings of option characters.

        Args:
            none: Flags that never take a value (e.g. "hv").
            required: Options that must be followed by a value.
            optional: Options whose value is the rest of the cluster, if any.
        """
        table = OptionTable()
        for chars, cls in (
            (none, ArgClass.NONE),
            (required, ArgClass.REQUIRED),
            (optional, ArgClass.OPTIONAL),
        ):
            for c in chars:
                table.add(c, cls)
        return table

    def add(self, char: str, cls: ArgClass):
        if len(char) != 1:
            raise ValueError(f"Option '{char}' must be a single character")
        if char in self._classes and self._classes[char] != cls:
            raise ValueError(
                f"Option '-{char}' is both {self._classes[char].name} and {cls.name}"
            )
        self._classes[char] = cls

    def lookup(self, char: str) -> ArgClass:
        if char not in self._classes:
            raise UnknownOption(char)
        return self._classes[char]

    def __contains__(self, char: str) -> bool:
        return char in self._classes


# --- Parser ------------------------------------------------------------ #


class Args:
    opts: dict[str, Opt]
    context: dict[str, values.Value]
    args: list[str]

    def __init__(self):
        self.opts = {}
        self.context = {}
        self.args = []

    def consumeOpt(self, key: str, default: Opt) -> Opt:
        if key in self.opts:
            result = self.opts[key]
            del self.opts[key]
            return result
        return default

    def tryConsumeOpt(self, key: str) -> Opt | None:
        if key in self.opts:
            result = self.opts[key]
            del self.opts[key]
            return result
        return None

    def consumeArg(self) -> str | None:
        if len(self.args) == 0:
            return None

        first = self.args[0]
        del self.args[0]
        return first


_CONTEXT_RE = re.compile(r"-([-\w]+)(?:=(.*))?", re.DOTALL)


def _parseContext(res: Args, token: str):
    """Parses a `--name[=value]` token into the context."""
    match = _CONTEXT_RE.fullmatch(token[1:])
    if not match:
        raise InvalidContextValue(token)

    name = match.group(1).replace("-", "_")
    value = match.group(2)
    res.context[name] = True if value is None else values.coerce(value)


def _parseCluster(res: Args, table: OptionTable, cluster: str, stack: list[str]):
    """Parses a cluster of short options such as `-hv` or `-fdata.yaml`."""
    while cluster:
        char, cluster = cluster[0], cluster[1:]
        cls = table.lookup(char)

        if cls == ArgClass.NONE:
            res.opts[char] = True
            continue

        if cls == ArgClass.REQUIRED:
            if cluster:
                res.opts[char] = cluster
            elif len(stack) > 0:
                res.opts[char] = stack.pop(0)
            else:
                raise MissingArgument(char)
        else:
            res.opts[char] = cluster if cluster else True

        # Whatever follows a valued option belongs to it
        return


def parse(argv: Sequence[str], table: OptionTable) -> Args:
    """
    Parses the leading options of `argv` according to `table`.

    Parsing stops at the first token that does not start with '-', this
    token and everything after it end up in `Args.args`. `argv` itself is
    left untouched.
    """
    res = Args()
    stack = list(argv)

    while len(stack) > 0 and stack[0].startswith("-"):
        token = stack.pop(0)
        _logger.debug(f"Parsing option '{token}'")

        if token.startswith("--"):
            _parseContext(res, token)
        else:
            _parseCluster(res, table, token[1:], stack)

    res.args = stack
    return res


def parseArgv(
    argv: list[str], none: str = "", required: str = "", optional: str = ""
) -> tuple[dict[str, Opt], dict[str, values.Value]]:
    """
    Parses the leading options of `argv` and removes them from it.

    Returns:
        The options and the context, `argv` keeps the positional arguments.
    """
    res = parse(argv, OptionTable.of(none, required, optional))
    argv[:] = res.args
    return res.opts, res.context
