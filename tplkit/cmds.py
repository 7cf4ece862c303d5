import re
import sys
import codecs
import logging
import dataclasses as dt
import importlib
import importlib.machinery
import importlib.util

from types import ModuleType
from typing import IO, Any, Optional, cast

from tplkit import const, data, engine, vt100
from tplkit.args import Args, CommandOptionError, Opt, OptionTable, parse

_logger = logging.getLogger(__name__)

OPTIONS = OptionTable.of(const.OPTS_NONE, const.OPTS_REQUIRED, const.OPTS_OPTIONAL)


@dt.dataclass
class Config:
    """
    Everything an invocation needs, derived from the command line.
    """

    flavor: type[engine.Renderer]
    engineConfig: engine.EngineConfig
    dataFiles: list[str] = dt.field(default_factory=list)
    untabify: bool = False
    normalizeKeys: bool = False
    source: bool = False
    script: bool = False


def usage() -> str:
    rows = [
        ("-h, --help", "help"),
        ("-v", "version"),
        ("-s", "compiled template source"),
        ("-x", "compiled template source (without the last debug line)"),
        ("-T", "no trimming"),
        ("-p pattern", "embedded pattern, e.g. '<% %>' (default Jinja2 syntax)"),
        (
            "-c class",
            f"renderer class ({', '.join(engine.flavors())}) (default {const.DEFAULT_FLAVOR})",
        ),
        ("-I path", "include path for templates and libraries"),
        ("-r library", "import library and expose it to templates"),
        ("-K encoding", "input encoding (euc, sjis, utf8, none) (default none)"),
        ("-f file.yaml", "YAML file for context values (read stdin if filename is '-')"),
        ("-t", "expand tab characters in YAML file"),
        ("-k", "normalize mapping keys of YAML file"),
        ("--name=value", "context name and value"),
    ]
    return (
        f"Usage: {const.ARGV0} [..options..] [file ...]\n"
        + vt100.indent(vt100.columns(rows))
        + "\n"
    )


def version() -> str:
    return const.VERSION_STR


def _split(opt: Opt | None) -> list[str]:
    if not isinstance(opt, str):
        return []
    return [e for e in opt.split(",") if e]


def _encoding(name: str) -> Optional[str]:
    if name in const.ENCODINGS:
        return const.ENCODINGS[name]
    try:
        return codecs.lookup(name).name
    except LookupError:
        raise CommandOptionError(f"-K {name}: unknown encoding.")


def require(name: str, searchPath: list[str]) -> ModuleType:
    """
    Imports the library `name`, looking into `searchPath` before `sys.path`.
    `sys.path` itself is left alone.
    """
    _logger.info(f"Importing library {name}")
    if name in sys.modules:
        return sys.modules[name]

    top = name.split(".", 1)[0]
    if top not in sys.modules:
        _loadTopLevel(top, name, searchPath)

    if top == name:
        return sys.modules[name]

    # Submodules resolve through the `__path__` of the loaded package
    try:
        return importlib.import_module(name)
    except ImportError as e:
        raise CommandOptionError(f"-r {name}: {e}")


def _loadTopLevel(top: str, name: str, searchPath: list[str]):
    spec = importlib.machinery.PathFinder.find_spec(top, searchPath + sys.path)
    if spec is None:
        # Built-in and frozen modules have no path entry
        if importlib.util.find_spec(top) is None:
            raise CommandOptionError(f"-r {name}: library not found.")
        importlib.import_module(top)
        return

    if not spec.loader:
        raise CommandOptionError(f"-r {name}: library not found.")

    module = importlib.util.module_from_spec(spec)
    sys.modules[top] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        del sys.modules[top]
        raise


def configure(args: Args) -> Config:
    """Turns the parsed options into a `Config`, importing libraries on the way."""
    encoding = None
    if kanji := args.tryConsumeOpt("K"):
        encoding = _encoding(cast(str, kanji))

    pattern = cast(Optional[str], args.tryConsumeOpt("p"))
    if pattern is not None:
        try:
            engine.parsePattern(pattern)
        except ValueError:
            raise CommandOptionError(f"-p {pattern}: invalid pattern.")

    engineConfig = engine.EngineConfig(
        pattern=pattern,
        trim=not args.consumeOpt("T", False),
        searchPath=_split(args.tryConsumeOpt("I")),
        encoding=encoding,
    )

    for library in _split(args.tryConsumeOpt("r")):
        module = require(library, engineConfig.searchPath)
        engineConfig.globals[library.rsplit(".", 1)[-1]] = module

    classname = cast(str, args.consumeOpt("c", const.DEFAULT_FLAVOR))
    flavor = engine.lookup(classname)
    if flavor is None or not classname.endswith("Template"):
        raise CommandOptionError(f"-c {classname}: invalid class name.")

    return Config(
        flavor=flavor,
        engineConfig=engineConfig,
        dataFiles=_split(args.tryConsumeOpt("f")),
        untabify=bool(args.consumeOpt("t", False)),
        normalizeKeys=bool(args.consumeOpt("k", False)),
        source=bool(args.consumeOpt("s", False)),
        script=bool(args.consumeOpt("x", False)),
    )


_LAST_LINE_RE = re.compile(r"^.+\s*\Z", re.MULTILINE)


def result(renderer: engine.Renderer, context: dict[str, Any], config: Config) -> str:
    if config.script:
        return _LAST_LINE_RE.sub("", renderer.source(), count=1)
    elif config.source:
        return renderer.source()
    return renderer.evaluate(context)


def execute(
    argv: list[str],
    stdin: Optional[IO[str]] = None,
    stdout: Optional[IO[str]] = None,
):
    """
    Runs one invocation of the command line, `argv` excludes the program name.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout

    args = parse(argv, OPTIONS)
    if args.context.get("help"):
        args.opts["h"] = True

    showHelp = args.consumeOpt("h", False)
    showVersion = args.consumeOpt("v", False)
    if showHelp or showVersion:
        if showVersion:
            print(version(), file=stdout)
        if showHelp:
            print(usage(), end="", file=stdout)
        return

    config = configure(args)

    context: dict[str, Any] = args.context
    if config.dataFiles:
        context = data.load(
            config.dataFiles,
            encoding=config.engineConfig.encoding,
            untab=config.untabify,
            normalize=config.normalizeKeys,
            stdin=stdin,
        )
        context.update(args.context)

    if args.args:
        while (filename := args.consumeArg()) is not None:
            renderer = config.flavor.loadFile(filename, config.engineConfig)
            stdout.write(result(renderer, context, config))
    else:
        text = data.readStream(stdin, config.engineConfig.encoding)
        renderer = config.flavor.fromString(text, config.engineConfig)
        stdout.write(result(renderer, context, config))
