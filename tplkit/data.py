import sys
import logging

from typing import Any, IO, Optional

import yaml

from .args import CommandOptionError

_logger = logging.getLogger(__name__)

Document = dict[str, Any]


def _isUrl(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def _fetch(url: str, encoding: Optional[str] = None) -> str:
    import requests

    _logger.debug(f"Downloading {url}")
    r = requests.get(url)
    r.raise_for_status()
    if encoding:
        r.encoding = encoding
    return r.text


def readStream(stream: IO[str], encoding: Optional[str] = None) -> str:
    """Reads a text stream, decoding its raw bytes when `encoding` is given."""
    if encoding and hasattr(stream, "buffer"):
        return stream.buffer.read().decode(encoding)
    return stream.read()


def read(source: str, encoding: Optional[str] = None, stdin: Optional[IO[str]] = None) -> str:
    """
    Read the text of a data source: '-' for standard input, an http(s) URL
    or a file path.
    """
    if source == "-":
        _logger.debug("Reading data from stdin")
        return readStream(stdin or sys.stdin, encoding)

    if _isUrl(source):
        return _fetch(source, encoding)

    _logger.debug(f"Reading data from {source}")
    with open(source, "r", encoding=encoding) as f:
        return f.read()


def untabify(text: str, width: int = 8) -> str:
    return "".join(line.expandtabs(width) for line in text.splitlines(keepends=True))


def normalizeKeys(doc: Any) -> Any:
    """
    Recursively turn mapping keys into template friendly names, `1` becomes
    "1" and "first-name" becomes "first_name".
    """
    if isinstance(doc, dict):
        return {str(k).replace("-", "_"): normalizeKeys(v) for k, v in doc.items()}
    elif isinstance(doc, list):
        return [normalizeKeys(v) for v in doc]
    return doc


def load(
    sources: list[str],
    encoding: Optional[str] = None,
    untab: bool = False,
    normalize: bool = False,
    stdin: Optional[IO[str]] = None,
) -> Document:
    """
    Load and merge YAML documents, later sources override earlier ones.
    """
    result: Document = {}
    for source in sources:
        text = read(source, encoding, stdin)
        if untab:
            text = untabify(text)

        doc = yaml.safe_load(text)
        if not isinstance(doc, dict):
            raise CommandOptionError(f"{source}: root object is not a mapping.")

        if normalize:
            doc = normalizeKeys(doc)

        _logger.info(f"Loaded {len(doc)} values from {source}")
        result.update(doc)
    return result
