"""
JsonFileDocument – the default on-disk backend.

The whole document lives in one JSON file. Writes go to a temporary file in
the same directory and are moved into place with `os.replace`, so a reader
never sees a half-written file. There is no cross-process locking: two
processes writing the same file are last-writer-wins.
"""

import json
import logging
import os
import stat
import tempfile
from typing import Any, Dict

from ..errors import StorageFailure
from .base import BaseDocumentBackend

log = logging.getLogger("splashlink.storage.json")


def _creation_mode() -> int:
    """Mode a plain `open(path, "w")` would give a new file under the current umask."""
    mask = os.umask(0)
    os.umask(mask)
    return 0o666 & ~mask


_NEW_FILE_MODE = _creation_mode()


class JsonFileDocument(BaseDocumentBackend):
    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = path

    def load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            log.warning("Document %s is not valid JSON; treating as empty", self.path)
            return {}
        except OSError as exc:
            raise StorageFailure(f"Cannot read {self.path}: {exc}") from exc

        # A JSON array or scalar is as unusable as a parse error
        if not isinstance(data, dict):
            log.warning("Document %s is not a JSON object; treating as empty", self.path)
            return {}
        return data

    def save(self, document: Dict[str, Any]) -> None:
        directory = os.path.dirname(self.path) or "."
        tmp_name = None
        try:
            os.makedirs(directory, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=directory, delete=False, encoding="utf-8", suffix=".tmp"
            ) as tf:
                tmp_name = tf.name
                json.dump(document, tf, indent=2, ensure_ascii=False)
            # NamedTemporaryFile is created 0600; keep the mode the document already had
            if os.path.exists(self.path):
                os.chmod(tmp_name, stat.S_IMODE(os.stat(self.path).st_mode))
            else:
                os.chmod(tmp_name, _NEW_FILE_MODE)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            log.exception("Failed to write document %s", self.path)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageFailure(f"Cannot write {self.path}: {exc}") from exc
