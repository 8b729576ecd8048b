"""
Layout detection and the Flat -> Nested migration of the link document.

Two shapes exist on disk:

    Flat    {id: entry}                    legacy, no user scoping
    Nested  {username: {id: entry}}        current, one namespace per user

Documents written by this code carry a reserved `_schema` tag, so the layout
of anything we saved is known without guessing. Untagged documents (legacy
files, or files written by older tools) fall back to the heuristic: Flat iff
some top-level value is an object with an `id` field.
"""

import enum
from typing import Any, Dict, Iterator, Tuple

SCHEMA_KEY = "_schema"
NESTED_SCHEMA = "nested-v2"
GLOBAL_NAMESPACE = "global"
RESERVED_KEYS = frozenset({SCHEMA_KEY})


class Layout(enum.Enum):
    FLAT = "flat"
    NESTED = "nested"


def _looks_like_entry(value: Any) -> bool:
    return isinstance(value, dict) and "id" in value


def is_tag(key: str, value: Any) -> bool:
    """
    True for the schema tag itself.

    Only a string value is the tag: a legacy flat file may hold an entry
    whose id happens to be "_schema", and that entry must survive.
    """
    return key == SCHEMA_KEY and isinstance(value, str)


def classify_layout(document: Dict[str, Any]) -> Layout:
    if document.get(SCHEMA_KEY) == NESTED_SCHEMA:
        return Layout.NESTED
    if any(_looks_like_entry(v) for v in document.values()):
        return Layout.FLAT
    return Layout.NESTED


def iter_namespaces(document: Dict[str, Any]) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """Yield (username, entries) in insertion order, skipping tags and non-mappings."""
    for key, value in document.items():
        if is_tag(key, value) or not isinstance(value, dict):
            continue
        yield key, value


def iter_flat_entries(document: Dict[str, Any]) -> Iterator[Tuple[str, Dict[str, Any]]]:
    for key, value in document.items():
        if is_tag(key, value):
            continue
        yield key, value


def migrate_to_nested(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Move every flat entry, verbatim, under the reserved "global" namespace.

    Returns a new document; the input is left untouched so a failed write
    never leaves the caller holding a half-migrated mapping.
    """
    return {
        SCHEMA_KEY: NESTED_SCHEMA,
        GLOBAL_NAMESPACE: dict(iter_flat_entries(document)),
    }


def tag_nested(document: Dict[str, Any]) -> Dict[str, Any]:
    """Stamp a Nested document with the schema tag, keeping the tag first."""
    tagged = {SCHEMA_KEY: NESTED_SCHEMA}
    tagged.update((k, v) for k, v in document.items() if k != SCHEMA_KEY)
    return tagged
