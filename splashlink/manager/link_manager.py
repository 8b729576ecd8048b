"""
LinkManager module for Splashlink.

Responsibilities:
    - Validate identifiers and destination URLs before anything touches disk
    - Store the uploaded loading image, then register the entry in the LinkStore
    - Roll back the stored image when the entry cannot be created
    - Optionally verify that destinations are reachable (HEAD, then GET)

Design notes:
    - Identifiers are user-chosen; they are never generated here.
    - The duplicate check is repeated by LinkStore.create under its lock; the
      early check only avoids writing an image that would be thrown away.
"""

import logging
import re
from typing import BinaryIO, Optional
from urllib.parse import urlparse

import requests

from ..assets.asset_store import AssetStore
from ..config import settings
from ..errors import DuplicateId, InvalidInput, SplashlinkError
from .link_store import LinkEntry, LinkStore, make_entry

log = logging.getLogger("splashlink.manager")

IdPattern = re.compile(r"^[0-9A-Za-z_-]+$")

# Route prefixes a short id must not shadow.
RESERVED_IDS = frozenset({"api", "uploads", "health_splash", "docs", "redoc", "openapi.json", "favicon.ico"})


class LinkManager:
    def __init__(self, store: LinkStore, assets: AssetStore, max_id_length: Optional[int] = None):
        self.store = store
        self.assets = assets
        self.max_id_length = max_id_length or settings.MAX_ID_LENGTH

    # ---------------------------------------------------------------------
    # Validation Helpers
    # ---------------------------------------------------------------------
    def _validate_id(self, link_id: str) -> str:
        """
        Trim and check a short identifier.

        Raises:
            InvalidInput: If empty, too long, reserved, or using characters
                outside 0-9a-zA-Z, "_" and "-".
        """
        link_id = (link_id or "").strip()
        if not link_id:
            raise InvalidInput("ID is required")
        if len(link_id) > self.max_id_length:
            raise InvalidInput("ID too long")
        if not IdPattern.match(link_id):
            raise InvalidInput("ID must contain only 0-9a-zA-Z, '_' or '-'")
        if link_id.lower() in RESERVED_IDS:
            raise InvalidInput("ID is reserved")
        return link_id

    def _validate_url(self, url: str, field: str) -> str:
        url = (url or "").strip()
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise InvalidInput(f"Invalid URL format for {field}")
        return url

    def _is_reachable(self, url: str, timeout: float = 5.0) -> bool:
        """
        Best-effort reachability check.

        HEAD first (following redirects); 403/405 answers fall through to a
        streamed GET whose body is never read.
        """
        try:
            resp = requests.head(url, allow_redirects=True, timeout=timeout)
            if 200 <= resp.status_code < 400:
                return True
            if resp.status_code not in (403, 405):
                return False
        except requests.RequestException:
            return False

        try:
            with requests.get(url, stream=True, allow_redirects=True, timeout=timeout) as resp:
                return 200 <= resp.status_code < 400
        except requests.RequestException:
            return False

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def create_link(
        self,
        username: str,
        link_id: str,
        url_mobile: str,
        url_desktop: Optional[str],
        image_name: str,
        image_stream: BinaryIO,
        check_reachable: bool = False,
    ) -> LinkEntry:
        """
        Create a redirect entry with its loading image.

        Rules:
            - id must be valid and unused anywhere in the document.
            - urlMobile is required; urlDesktop may be empty.
            - With check_reachable, every given destination must answer 2xx/3xx.

        Raises:
            InvalidInput, DuplicateId, StorageFailure.
        """
        link_id = self._validate_id(link_id)
        url_mobile = self._validate_url(url_mobile, "urlMobile")
        url_desktop = (url_desktop or "").strip()
        if url_desktop:
            url_desktop = self._validate_url(url_desktop, "urlDesktop")

        if check_reachable:
            for url in filter(None, (url_mobile, url_desktop)):
                if not self._is_reachable(url):
                    raise InvalidInput(f"URL is not reachable: {url}")

        if self.store.lookup(link_id) is not None:
            raise DuplicateId()

        image = self.assets.save(link_id, image_name, image_stream)
        entry = make_entry(link_id, image, url_mobile, url_desktop)
        try:
            return self.store.create(username, link_id, entry)
        except SplashlinkError:
            # Lost a race or failed to persist: drop the orphaned image
            self.assets.delete(image)
            raise

    def delete_link(self, requester: Optional[str], link_id: str) -> LinkEntry:
        return self.store.delete(requester, link_id)

    def resolve(self, link_id: str) -> Optional[LinkEntry]:
        return self.store.lookup(link_id)

    @staticmethod
    def short_url(origin: str, link_id: str) -> str:
        return f"{(origin or '').rstrip('/')}/{link_id}"
