"""
Storage module for Splashlink (in-memory implementation).

Responsibilities:
    - Hold one document as an in-process snapshot
    - Hand out deep copies so callers mutate their own copy, exactly as they
      would after reading a file from disk

Design:
    - This is an in-memory reference implementation of BaseDocumentBackend.
    - It keeps unit/integration tests fast and free of filesystem state.
    - For production, use the JSON file or Postgres backends.
"""

import copy
from typing import Any, Dict, Optional

from .base import BaseDocumentBackend


class MemoryDocument(BaseDocumentBackend):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        """
        Initialize the snapshot.

        Args:
            initial (Optional[Dict[str, Any]]): Seed document (copied), e.g. a
                legacy flat mapping in migration tests.
        """
        super().__init__()
        self.snapshot: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def load(self) -> Dict[str, Any]:
        return copy.deepcopy(self.snapshot)

    def save(self, document: Dict[str, Any]) -> None:
        self.snapshot = copy.deepcopy(document)
