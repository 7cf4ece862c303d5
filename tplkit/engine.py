import os
import locale
import logging
import dataclasses as dt

from typing import Any, Callable, Optional

import jinja2

_logger = logging.getLogger(__name__)


@dt.dataclass
class EngineConfig:
    """
    Settings shared by every renderer of one invocation.

    Attributes:
        pattern: Embedded pattern such as "<% %>", None for the Jinja2 syntax.
        trim: Strip the whitespace around block tags.
        searchPath: Directories searched for included templates.
        encoding: Encoding of template files, None for the locale default.
        globals: Values visible to every template.
    """

    pattern: Optional[str] = None
    trim: bool = True
    searchPath: list[str] = dt.field(default_factory=list)
    encoding: Optional[str] = None
    globals: dict[str, Any] = dt.field(default_factory=dict)

    def fileEncoding(self) -> str:
        """The encoding used for the template and everything it includes."""
        return self.encoding or locale.getpreferredencoding(False)


def parsePattern(pattern: str) -> tuple[str, str]:
    parts = pattern.split()
    if len(parts) != 2:
        raise ValueError(f"Expected two delimiters in pattern '{pattern}'")
    return parts[0], parts[1]


def _delimiters(pattern: Optional[str]) -> dict[str, str]:
    if pattern is None:
        return {}

    start, end = parsePattern(pattern)
    return {
        "block_start_string": start,
        "block_end_string": end,
        "variable_start_string": start + "=",
        "variable_end_string": end,
        "comment_start_string": start + "#",
        "comment_end_string": end,
    }


class Renderer:
    """
    A compiled template together with the environment it was compiled in.
    """

    autoescape: bool = False
    undefined: type[jinja2.Undefined] = jinja2.Undefined

    _env: jinja2.Environment
    _text: str
    _filename: Optional[str]
    _template: jinja2.Template

    def __init__(self, text: str, config: EngineConfig, filename: Optional[str] = None):
        self._env = self.environment(config, filename)
        self._text = text
        self._filename = filename
        self._template = self._env.from_string(text)

    @classmethod
    def environment(
        cls, config: EngineConfig, filename: Optional[str] = None
    ) -> jinja2.Environment:
        searchPath = list(config.searchPath)
        if filename is not None:
            searchPath.append(os.path.dirname(os.path.abspath(filename)))

        env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(
                searchPath, encoding=config.fileEncoding()
            ),
            autoescape=cls.autoescape,
            undefined=cls.undefined,
            trim_blocks=config.trim,
            lstrip_blocks=config.trim,
            keep_trailing_newline=True,
            **_delimiters(config.pattern),
        )
        env.globals.update(config.globals)
        return env

    @classmethod
    def loadFile(cls, path: str, config: EngineConfig) -> "Renderer":
        _logger.info(f"Loading template {path}")
        with open(path, "r", encoding=config.fileEncoding()) as f:
            return cls(f.read(), config, path)

    @classmethod
    def fromString(cls, text: str, config: EngineConfig) -> "Renderer":
        return cls(text, config)

    def source(self) -> str:
        """Returns the Python source the template compiles to."""
        return self._env.compile(self._text, filename=self._filename, raw=True)

    def evaluate(self, context: dict[str, Any]) -> str:
        _logger.debug(f"Evaluating {self._filename or '<stdin>'}")
        return self._template.render(context)


_flavors: dict[str, type[Renderer]] = {}


def flavor(name: str) -> Callable:
    """
    Decorator registering a renderer flavor under `name`, libraries
    loaded with `-r` may use it to add their own.
    """

    def wrap(cls: type[Renderer]):
        _logger.info(f"Registering flavor '{name}'")
        if name in _flavors:
            raise ValueError(f"Flavor '{name}' is already defined")
        _flavors[name] = cls
        return cls

    return wrap


def lookup(name: str) -> Optional[type[Renderer]]:
    return _flavors.get(name)


def flavors() -> list[str]:
    return sorted(_flavors.keys())


@flavor("Template")
class Template(Renderer):
    pass


@flavor("XmlTemplate")
class XmlTemplate(Renderer):
    """Escapes `&`, `<`, `>` and quotes in every expression."""

    autoescape = True


@flavor("StrictTemplate")
class StrictTemplate(Renderer):
    """Fails on undefined variables instead of rendering them empty."""

    undefined = jinja2.StrictUndefined
