"""
Project document handling: parsing, canonical serialization, redaction
of per-user editor state, and discovery of documents in a project tree.
"""

from .codec import decode_document, encode_document, load_document, write_document
from .redaction import redact_document
from .scanner import iter_documents
from .models import (
    Document,
    SceneObject,
    ObjectTable,
    MapIndexEntry,
    MapIndexTable,
    EVENTS_KEY,
    MAP_INDEX_SIZE,
    map_filename,
    is_map_filename,
)

__all__ = [
    # Codec
    "decode_document",
    "encode_document",
    "load_document",
    "write_document",
    # Helpers
    "redact_document",
    "iter_documents",
    # Type aliases
    "Document",
    "SceneObject",
    "ObjectTable",
    "MapIndexEntry",
    "MapIndexTable",
    # Constants
    "EVENTS_KEY",
    "MAP_INDEX_SIZE",
    "map_filename",
    "is_map_filename",
]
