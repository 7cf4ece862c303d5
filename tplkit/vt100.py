import sys


RED = "\033[31m"
CYAN = "\033[36m"
YELLOW = "\033[33m"
RESET = "\033[0m"


def indent(text: str, indent: int = 2) -> str:
    return " " * indent + text.replace("\n", "\n" + " " * indent)


def columns(rows: list[tuple[str, str]], sep: str = " : ") -> str:
    """Align `rows` of (flag, description) pairs into two columns."""
    width = max((len(flag) for flag, _ in rows), default=0)
    return "\n".join(f"{flag.ljust(width)}{sep}{desc}" for flag, desc in rows)


def error(msg: str) -> None:
    print(f"{RED}Error:{RESET} {msg}\n", file=sys.stderr)
