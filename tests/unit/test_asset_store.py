"""
Unit tests for AssetStore.

Covers:
    - generated filenames (<id>-<ms>-<name with "_" for whitespace>)
    - prefix-based resolution for current, legacy and fallback references
    - traversal rejection
    - best-effort delete
"""

import io
import os

import pytest

from splashlink.assets.asset_store import CURRENT_PREFIX, AssetStore, content_type_for
from splashlink.errors import InvalidInput, NotFound


def test_build_filename_sanitizes_whitespace():
    assert AssetStore.build_filename("promo", "my  cat pic.gif", now_ms=1700) == "promo-1700-my_cat_pic.gif"


def test_build_filename_drops_directories():
    assert AssetStore.build_filename("p", "../../etc/passwd", now_ms=1) == "p-1-passwd"
    assert AssetStore.build_filename("p", "C:\\pics\\x.png", now_ms=1) == "p-1-x.png"


def test_build_filename_requires_name():
    with pytest.raises(InvalidInput):
        AssetStore.build_filename("p", "", now_ms=1)


def test_save_writes_file_and_returns_reference(assets):
    ref = assets.save("promo", "loading.gif", io.BytesIO(b"GIF89a"))
    assert ref.startswith(CURRENT_PREFIX + "promo-")
    path = assets.resolve(ref)
    with open(path, "rb") as f:
        assert f.read() == b"GIF89a"


def test_resolve_conventions(assets):
    assert assets.resolve("/api/uploads/x.gif") == os.path.join(assets.uploads_dir, "x.gif")
    assert assets.resolve("/uploads/x.gif") == os.path.join(assets.public_dir, "uploads", "x.gif")
    # Anything else falls back to the public root
    assert assets.resolve("/img/x.gif") == os.path.join(assets.public_dir, "img/x.gif")
    assert assets.resolve("img/x.gif") == os.path.join(assets.public_dir, "img/x.gif")


def test_resolve_rejects_traversal(assets):
    assert assets.resolve("/api/uploads/../../secret") is None
    assert assets.resolve("/uploads/") is None


def test_delete_is_best_effort(assets):
    assert assets.delete("/api/uploads/missing.gif") is False
    assert assets.delete(None) is False
    assert assets.delete("/api/uploads/../../x") is False


def test_delete_removes_file(assets):
    ref = assets.save("d", "x.png", io.BytesIO(b"png"))
    assert assets.delete(ref) is True
    assert not os.path.exists(assets.resolve(ref))


def test_open_path(assets):
    ref = assets.save("o", "x.webp", io.BytesIO(b"w"))
    filename = ref[len(CURRENT_PREFIX):]
    path, ctype = assets.open_path(filename)
    assert ctype == "image/webp"
    assert os.path.isfile(path)
    with pytest.raises(NotFound):
        assets.open_path("nope.gif")
    with pytest.raises(NotFound):
        assets.open_path("../outside.gif")


@pytest.mark.parametrize(
    "name,ctype",
    [("a.PNG", "image/png"), ("a.jpg", "image/jpeg"), ("a.jpeg", "image/jpeg"), ("a.gif", "image/gif"), ("a.bin", "application/octet-stream")],
)
def test_content_types(name, ctype):
    assert content_type_for(name) == ctype
