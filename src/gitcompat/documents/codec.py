"""
Reading and writing project documents.

Documents are rendered with two-space indentation, matching what the editor
produces when pretty-printing. A field listed in ``compact_fields`` is the
exception: its array is written one compact element per line, so that a
line-based merge sees one changed line per changed element instead of a
whole indented block.

Parsing and leaf encoding use orjson.
"""

import logging
from pathlib import Path
from typing import Any, Iterable

import orjson

from ..errors import DocumentError

logger = logging.getLogger(__name__)

INDENT = "  "


def decode_document(raw: bytes, path: Path | str = "<memory>") -> Any:
    """Parse raw document bytes.

    Args:
        raw: File contents
        path: Origin of the bytes, used in error messages

    Returns:
        Parsed JSON value (usually a dict or a list)

    Raises:
        DocumentError: If the bytes are not valid JSON
    """
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise DocumentError(path, f"invalid JSON: {e}") from e


def load_document(path: Path) -> Any:
    """Read and parse a document from disk."""
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise DocumentError(path, f"cannot read file: {e}") from e
    return decode_document(raw, path)


def encode_document(document: Any, compact_fields: Iterable[str] = ()) -> str:
    """Serialize a document.

    Args:
        document: Parsed document
        compact_fields: Top-level keys whose array values are rendered
            one compact element per line

    Returns:
        Serialized text, without a trailing newline
    """
    compact = frozenset(compact_fields)
    if isinstance(document, dict) and compact:
        return _encode_object(document, 0, compact)
    return _encode_value(document, 0)


def write_document(path: Path, text: str) -> bool:
    """Write serialized text unless the file already holds exactly these bytes.

    Returns:
        True if the file was written, False if it was left untouched
    """
    data = text.encode("utf-8")
    if path.is_file() and path.read_bytes() == data:
        logger.debug(f"No changes in file '{path}'. Ignoring")
        return False

    logger.debug(f"Writing '{path}'")
    path.write_bytes(data)
    return True


def _encode_scalar(value: Any) -> str:
    return orjson.dumps(value).decode("utf-8")


def _encode_value(value: Any, level: int) -> str:
    if isinstance(value, dict):
        return _encode_object(value, level, frozenset())
    if isinstance(value, list):
        if not value:
            return "[]"
        inner = INDENT * (level + 1)
        items = [inner + _encode_value(item, level + 1) for item in value]
        return "[\n" + ",\n".join(items) + "\n" + INDENT * level + "]"
    return _encode_scalar(value)


def _encode_object(value: dict, level: int, compact: frozenset) -> str:
    if not value:
        return "{}"
    inner = INDENT * (level + 1)
    items = []
    for key, item in value.items():
        if key in compact and isinstance(item, list):
            rendered = _encode_compact_array(item, level + 1)
        else:
            rendered = _encode_value(item, level + 1)
        items.append(f"{inner}{_encode_scalar(str(key))}: {rendered}")
    return "{\n" + ",\n".join(items) + "\n" + INDENT * level + "}"


def _encode_compact_array(items: list, level: int) -> str:
    """Render an array with one compact (single-line) element per line."""
    if not items:
        return "[]"
    inner = INDENT * (level + 1)
    lines = [inner + _encode_scalar(item) for item in items]
    return "[\n" + ",\n".join(lines) + "\n" + INDENT * level + "]"
