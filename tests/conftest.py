"""
Global pytest fixtures for the Splashlink test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory, bound to
      documents and upload directories under tmp_path
    - Provide in-memory document backends and stores for direct testing
    - Provide a legacy flat document for migration tests
"""

import io

import pytest
from fastapi.testclient import TestClient

from main import create_app
from auth.service import CredentialStore
from splashlink.assets.asset_store import AssetStore
from splashlink.manager.link_manager import LinkManager
from splashlink.manager.link_store import LinkStore, make_entry
from splashlink.storage.json_storage import JsonFileDocument
from splashlink.storage.storage import MemoryDocument

PIXEL_GIF = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00"
    b",\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)


def flat_document():
    """Two legacy entries, as written before user namespaces existed."""
    return {
        "a": make_entry("a", "/uploads/a-1-a.gif", "https://m.example.com/a", "https://example.com/a"),
        "b": make_entry("b", "/uploads/b-1-b.gif", "https://m.example.com/b"),
    }


@pytest.fixture
def assets(tmp_path) -> AssetStore:
    return AssetStore(str(tmp_path / "uploads"), str(tmp_path / "public"))


@pytest.fixture
def link_document() -> MemoryDocument:
    return MemoryDocument()


@pytest.fixture
def link_store(link_document, assets) -> LinkStore:
    return LinkStore(link_document, assets=assets)


@pytest.fixture
def flat_store(assets) -> LinkStore:
    return LinkStore(MemoryDocument(flat_document()), assets=assets)


@pytest.fixture
def credentials(link_store) -> CredentialStore:
    return CredentialStore(MemoryDocument(), link_store=link_store)


@pytest.fixture
def manager(link_store, assets) -> LinkManager:
    return LinkManager(link_store, assets)


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def client(tmp_path, data_dir) -> TestClient:
    """
    Fresh TestClient with a new app instance over JSON files in tmp_path.

    Notes:
        - The app factory gives every test its own stores, so no state leaks.
    """
    app = create_app(
        link_document=JsonFileDocument(str(data_dir / "links.json")),
        user_document=JsonFileDocument(str(data_dir / "users.json")),
        assets=AssetStore(str(tmp_path / "uploads"), str(tmp_path / "public")),
    )
    return TestClient(app)


@pytest.fixture
def upload():
    """Factory for the multipart "image" part of a create request."""
    def _upload(name="loading.gif"):
        return {"image": (name, io.BytesIO(PIXEL_GIF), "image/gif")}
    return _upload


@pytest.fixture
def flat_doc():
    return flat_document()
