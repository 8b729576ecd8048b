"""
LinkStore module for Splashlink.

Responsibilities:
    - Own the link document: short identifier -> redirect entry
    - Detect the document layout (Flat legacy vs Nested per-user) on every load
    - Migrate Flat -> Nested exactly once, on the first create or registration
    - Enforce global identifier uniqueness and per-user ownership on delete

Design notes:
    - No state survives between calls: each operation loads the document,
      mutates its own copy and writes the whole thing back.
    - The backend lock serialises that cycle inside one process; across
      processes the last writer wins.
    - A duplicate id or an ownership violation raises before anything is
      written, so the stored document is left byte-for-byte untouched.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..assets.asset_store import AssetStore
from ..errors import DuplicateId, Forbidden, InvalidInput, NotFound, Unauthorized
from ..storage.base import BaseDocumentBackend
from ..storage.layout import (
    GLOBAL_NAMESPACE,
    RESERVED_KEYS,
    Layout,
    classify_layout,
    iter_flat_entries,
    iter_namespaces,
    migrate_to_nested,
    tag_nested,
)

log = logging.getLogger("splashlink.links")

LinkEntry = Dict[str, Any]


def make_entry(link_id: str, image: str, url_mobile: str, url_desktop: Optional[str] = None) -> LinkEntry:
    """Build an entry; `urlDesktop` is always present, possibly empty."""
    return {
        "id": link_id,
        "image": image,
        "urlMobile": url_mobile,
        "urlDesktop": url_desktop or "",
    }


class LinkStore:
    def __init__(self, document: BaseDocumentBackend, assets: Optional[AssetStore] = None):
        """
        Args:
            document (BaseDocumentBackend): Backend holding the link document.
            assets (Optional[AssetStore]): Where entry images live; when omitted,
                deletes skip asset cleanup.
        """
        self.document = document
        self.assets = assets

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def load(self) -> Tuple[Dict[str, Any], Layout]:
        document = self.document.load()
        return document, classify_layout(document)

    @staticmethod
    def _locate(document: Dict[str, Any], layout: Layout, link_id: str) -> Optional[Tuple[Optional[str], LinkEntry]]:
        """
        Find `link_id` anywhere in the document.

        Returns:
            (owner, entry) where owner is None for Flat documents, or None if absent.
        """
        if layout is Layout.FLAT:
            entry = document.get(link_id)
            return (None, entry) if isinstance(entry, dict) else None
        for owner, entries in iter_namespaces(document):
            if link_id in entries:
                return owner, entries[link_id]
        return None

    def _persist(self, document: Dict[str, Any], layout: Layout) -> None:
        self.document.save(tag_nested(document) if layout is Layout.NESTED else document)

    @staticmethod
    def _require_user(username: Optional[str]) -> str:
        if not username:
            raise Unauthorized()
        if username in RESERVED_KEYS:
            raise InvalidInput("Invalid username")
        return username

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def layout(self) -> Layout:
        return self.load()[1]

    def lookup(self, link_id: str) -> Optional[LinkEntry]:
        """
        Resolve an identifier regardless of owner (public redirect path).

        Returns:
            Optional[LinkEntry]: The stored entry, or None if absent. When two
            namespaces hold the same id, the first in document order wins.
        """
        document, layout = self.load()
        found = self._locate(document, layout, link_id)
        return found[1] if found else None

    def owner_of(self, link_id: str) -> Optional[str]:
        """Namespace owning `link_id` (None for Flat documents or unknown ids)."""
        document, layout = self.load()
        found = self._locate(document, layout, link_id)
        return found[0] if found else None

    def list_links(self, username: str) -> Dict[str, LinkEntry]:
        """
        Entries visible to `username`, keyed by id.

        Flat documents have no owners, so every caller sees every legacy entry.
        """
        username = self._require_user(username)
        document, layout = self.load()
        if layout is Layout.FLAT:
            return {k: v for k, v in iter_flat_entries(document) if isinstance(v, dict)}
        entries = document.get(username)
        return dict(entries) if isinstance(entries, dict) else {}

    def list_entries(self, username: str) -> List[LinkEntry]:
        return list(self.list_links(username).values())

    def create(self, username: str, link_id: str, entry: LinkEntry) -> LinkEntry:
        """
        Store `entry` under `username`, migrating a Flat document first.

        Raises:
            DuplicateId: If `link_id` already exists in any namespace (or at the
                Flat root). Nothing is written.
        """
        username = self._require_user(username)
        if not link_id or link_id in RESERVED_KEYS:
            raise InvalidInput("Invalid id")

        with self.document.lock:
            document, layout = self.load()
            if self._locate(document, layout, link_id) is not None:
                raise DuplicateId()

            if layout is Layout.FLAT:
                log.info("Migrating flat link document under %r (first create by %s)", GLOBAL_NAMESPACE, username)
                document = migrate_to_nested(document)

            entries = document.get(username)
            if not isinstance(entries, dict):
                entries = {}
            entries[link_id] = entry
            document[username] = entries
            self._persist(document, Layout.NESTED)

        log.info("Created link %s for %s", link_id, username)
        return entry

    def delete(self, requester: Optional[str], link_id: str) -> LinkEntry:
        """
        Remove `link_id` and (best effort) its stored image.

        Flat documents are communally owned: anyone, even an anonymous caller,
        may delete. Nested documents require the owning user.

        Raises:
            NotFound: If the id does not exist.
            Unauthorized: If the document is Nested and there is no requester.
            Forbidden: If another namespace owns the id. Nothing is written.
        """
        with self.document.lock:
            document, layout = self.load()
            if layout is Layout.NESTED:
                requester = self._require_user(requester)

            found = self._locate(document, layout, link_id)
            if found is None:
                raise NotFound()
            owner, entry = found

            if layout is Layout.FLAT:
                del document[link_id]
            else:
                if owner != requester:
                    log.warning("User %s tried to delete %s owned by %s", requester, link_id, owner)
                    raise Forbidden()
                del document[owner][link_id]

            if self.assets is not None:
                self.assets.delete(entry.get("image"))
            self._persist(document, layout)

        log.info("Deleted link %s (requester=%s)", link_id, requester or "-")
        return entry

    def ensure_namespace(self, username: str) -> None:
        """
        Make sure `username` owns a (possibly empty) namespace.

        Used by registration; migrates a Flat document the same way create does.
        """
        username = self._require_user(username)
        with self.document.lock:
            document, layout = self.load()
            if layout is Layout.FLAT:
                log.info("Migrating flat link document under %r (registration of %s)", GLOBAL_NAMESPACE, username)
                document = migrate_to_nested(document)
            if not isinstance(document.get(username), dict):
                document[username] = {}
            self._persist(document, Layout.NESTED)
