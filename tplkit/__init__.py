import os
import sys
import logging

from . import (
    args,
    const,
    vt100,
)

_logger = logging.getLogger(__name__)


class logger:
    @staticmethod
    def setup(verbose: bool = False):
        if verbose:
            logging.basicConfig(
                level=logging.DEBUG,
                format=f"{vt100.CYAN}%(asctime)s{vt100.RESET} {vt100.YELLOW}%(levelname)s{vt100.RESET} %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        else:
            os.makedirs(os.path.dirname(const.GLOBAL_LOG_FILE), exist_ok=True)

            logging.basicConfig(
                level=logging.INFO,
                filename=const.GLOBAL_LOG_FILE,
                filemode="w",
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )


def argv() -> list[str]:
    """The command line, prefixed with the extra arguments from the environment."""
    extra = os.environ.get(const.ENV_EXTRA_ARGS, None)
    return (extra.split(" ") if extra else []) + sys.argv[1:]


def main() -> int:
    # Imported here so setup.py can read `const` before jinja2 is installed
    from . import cmds

    logger.setup(bool(os.environ.get(const.ENV_VERBOSE)))

    try:
        cmds.execute(argv())
        return 0

    except args.CommandOptionError as e:
        _logger.error(e)
        vt100.error(str(e))
        return 1

    except KeyboardInterrupt:
        print()
        return 1
