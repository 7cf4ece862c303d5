import os


VERSION = (0, 3, 1)
VERSION_STR = f"{VERSION[0]}.{VERSION[1]}.{VERSION[2]}{'-' +  str(VERSION[-1]) if len(VERSION) > 3 else ''}"


ARGV0 = "tplkit"
DESCRIPTION = "Render Jinja2 templates with values from YAML files or the command line"
GLOBAL_DIR = os.path.join(os.path.expanduser("~"), ".tplkit")
GLOBAL_LOG_FILE: str = os.path.join(GLOBAL_DIR, "tplkit.log")

ENV_EXTRA_ARGS = "TPLKIT_EXTRA_ARGS"
ENV_VERBOSE = "TPLKIT_VERBOSE"

# Option classes of the command line, see `cmds.usage()`
OPTS_NONE = "hvsxTtk"
OPTS_REQUIRED = "pcrfKI"
OPTS_OPTIONAL = ""

DEFAULT_FLAVOR = "Template"

ENCODINGS: dict[str, str | None] = {
    "euc": "euc_jp",
    "sjis": "shift_jis",
    "utf8": "utf-8",
    "none": None,
}
