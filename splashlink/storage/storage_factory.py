"""
Storage factory – switch document backend from config (lazy env version)
=======================================================================

This module centralizes selection of the document backend so the stores can
stay ignorant of where data lives.

- Reads environment **at call time** to avoid stale values in tests.
- Imports the Postgres backend **only if** the selected backend is "postgres".

Environment variables
---------------------
- SPLASH_STORAGE_BACKEND: "json" (default), "memory" or "postgres"
- SPLASH_DB_DSN:          DSN string if backend == "postgres"
"""

import logging
import os
from typing import Optional

from splashlink.storage.json_storage import JsonFileDocument
from splashlink.storage.storage import MemoryDocument

log = logging.getLogger("splashlink.storage")


def get_document(name: str, path: Optional[str] = None, backend: Optional[str] = None, **kwargs):
    """
    Return a document backend for the named document.

    Parameters
    ----------
    name : str
        Logical document name ("links" or "users").
    path : str, optional
        File path, required for the "json" backend.
    backend : str, optional
        "json", "memory" or "postgres". If omitted, reads SPLASH_STORAGE_BACKEND.
    kwargs : dict
        Extra args. For postgres, use dsn="...".

    Returns
    -------
    BaseDocumentBackend-compatible instance
    """
    be = (backend or os.getenv("SPLASH_STORAGE_BACKEND", "json")).strip().lower()
    log.debug("Selected document backend for %s: %r", name, be)

    if be == "json":
        if not path:
            raise ValueError(f"A file path is required for the json backend ({name})")
        return JsonFileDocument(path)

    if be == "memory":
        return MemoryDocument(kwargs.get("initial"))

    if be == "postgres":
        dsn = kwargs.get("dsn") or os.getenv("SPLASH_DB_DSN", "")
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env SPLASH_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from splashlink.storage.db_storage import PostgresDocument
        return PostgresDocument(dsn=dsn, name=name)

    raise ValueError(f"Unknown storage backend: {be!r}")
