"""
AssetStore – uploaded loading images on local disk.

Two path conventions are in circulation:

    /api/uploads/<file>   current; files live in UPLOADS_DIR
    /uploads/<file>       legacy; files live in PUBLIC_DIR/uploads

Anything else is treated as relative to PUBLIC_DIR (the convention the
oldest entries were written with).
"""

import logging
import os
import re
import shutil
import time
from typing import BinaryIO, Optional, Tuple

from ..errors import InvalidInput, NotFound, StorageFailure

log = logging.getLogger("splashlink.assets")

CURRENT_PREFIX = "/api/uploads/"
LEGACY_PREFIX = "/uploads/"

CONTENT_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


def content_type_for(filename: str) -> str:
    ext = os.path.splitext(filename)[1].lower()
    return CONTENT_TYPES.get(ext, "application/octet-stream")


def _within(root: str, candidate: str) -> bool:
    root = os.path.realpath(root)
    candidate = os.path.realpath(candidate)
    return os.path.commonpath([root, candidate]) == root


class AssetStore:
    def __init__(self, uploads_dir: str, public_dir: str) -> None:
        self.uploads_dir = uploads_dir
        self.public_dir = public_dir

    @property
    def legacy_dir(self) -> str:
        return os.path.join(self.public_dir, "uploads")

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    @staticmethod
    def build_filename(link_id: str, original_name: str, now_ms: Optional[int] = None) -> str:
        """`<id>-<epoch ms>-<original name, whitespace runs replaced by "_">`."""
        base = os.path.basename((original_name or "").replace("\\", "/"))
        base = re.sub(r"\s+", "_", base)
        if not base:
            raise InvalidInput("Image filename is required")
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        return f"{link_id}-{stamp}-{base}"

    def save(self, link_id: str, original_name: str, stream: BinaryIO) -> str:
        """Persist an uploaded image and return its public reference."""
        filename = self.build_filename(link_id, original_name)
        target = os.path.join(self.uploads_dir, filename)
        try:
            os.makedirs(self.uploads_dir, exist_ok=True)
            with open(target, "wb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as exc:
            log.exception("Failed to store asset %s", target)
            raise StorageFailure(f"Cannot store image: {exc}") from exc
        log.info("Stored asset %s for link %s", filename, link_id)
        return CURRENT_PREFIX + filename

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve(self, reference: str) -> Optional[str]:
        """
        Map a stored image reference onto a filesystem path.

        Returns None when the reference escapes its directory.
        """
        if reference.startswith(CURRENT_PREFIX):
            root, rel = self.uploads_dir, reference[len(CURRENT_PREFIX):]
        elif reference.startswith(LEGACY_PREFIX):
            root, rel = self.legacy_dir, reference[len(LEGACY_PREFIX):]
        else:
            root, rel = self.public_dir, reference.lstrip("/")
        path = os.path.join(root, rel)
        if not rel or not _within(root, path):
            return None
        return path

    def open_path(self, filename: str, legacy: bool = False) -> Tuple[str, str]:
        """Locate a served asset; raise NotFound when it is not a regular file."""
        root = self.legacy_dir if legacy else self.uploads_dir
        path = os.path.join(root, filename)
        if not filename or not _within(root, path) or not os.path.isfile(path):
            raise NotFound()
        return path, content_type_for(filename)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------
    def delete(self, reference: Optional[str]) -> bool:
        """Best-effort removal. Never raises; returns whether a file was removed."""
        if not reference or not isinstance(reference, str):
            return False
        path = self.resolve(reference)
        if path is None:
            log.debug("Refusing to delete asset outside its directory: %r", reference)
            return False
        try:
            os.unlink(path)
        except OSError as exc:
            log.debug("Asset cleanup skipped for %s: %s", path, exc)
            return False
        return True
