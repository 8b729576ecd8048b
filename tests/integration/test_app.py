"""
Integration tests for the HTTP layer.

Covers the full flow through the app factory over real JSON files:
register/login/logout cookies, link creation with upload, listing,
public resolution (HTML page and JSON), asset serving and deletion.
"""

import json

IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"
DESKTOP = "Mozilla/5.0 (X11; Linux x86_64) Firefox/120.0"


def _register(client, username="alice", password="pw1"):
    resp = client.post("/api/register", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp


def _create(client, upload, link_id="promo", mobile="https://m.example.com/p", desktop="https://example.com/p"):
    data = {"id": link_id, "urlMobile": mobile, "urlDesktop": desktop}
    return client.post("/api/create", data=data, files=upload())


def test_health_returns_ok(client):
    resp = client.get("/health_splash")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_register_sets_normalized_cookie(client, data_dir):
    resp = _register(client, "  Alice ")
    assert resp.json() == {"success": True}
    assert resp.cookies.get("username") == "alice"
    users = json.loads((data_dir / "users.json").read_text())
    assert list(users) == ["alice"]
    links = json.loads((data_dir / "links.json").read_text())
    assert links["alice"] == {}


def test_register_duplicate_is_400(client):
    _register(client, "bob")
    resp = client.post("/api/register", json={"username": "BOB ", "password": "x"})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Username already exists"


def test_login_success_and_generic_failures(client):
    _register(client)
    client.cookies.clear()

    ok = client.post("/api/login", json={"username": "ALICE", "password": "pw1"})
    assert ok.status_code == 200
    assert ok.cookies.get("username") == "alice"

    wrong = client.post("/api/login", json={"username": "alice", "password": "nope"})
    unknown = client.post("/api/login", json={"username": "mallory", "password": "pw1"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"detail": "Invalid username or password"}


def test_logout_clears_cookie(client):
    _register(client)
    resp = client.post("/api/logout")
    assert resp.status_code == 200
    assert client.cookies.get("username") is None
    assert client.get("/api/links").status_code == 401


def test_create_and_resolve(client, upload):
    _register(client)
    resp = _create(client, upload)
    assert resp.status_code == 201
    assert resp.json()["link"].endswith("/promo")

    entry = client.get("/api/link/promo").json()
    assert entry["id"] == "promo"
    assert entry["urlDesktop"] == "https://example.com/p"
    assert entry["image"].startswith("/api/uploads/promo-")

    image = client.get(entry["image"])
    assert image.status_code == 200
    assert image.headers["content-type"] == "image/gif"
    assert image.content.startswith(b"GIF89a")


def test_create_uses_origin_header(client, upload):
    _register(client)
    data = {"id": "o1", "urlMobile": "https://m.example.com"}
    resp = client.post("/api/create", data=data, files=upload(), headers={"Origin": "https://sho.rt"})
    assert resp.json() == {"link": "https://sho.rt/o1"}
    assert client.get("/api/link/o1").json()["urlDesktop"] == ""


def test_create_requires_cookie(client, upload):
    resp = _create(client, upload)
    assert resp.status_code == 401


def test_create_duplicate_across_users(client, upload):
    _register(client, "alice")
    assert _create(client, upload).status_code == 201
    _register(client, "bob")
    resp = _create(client, upload)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "ID already exists"


def test_list_is_scoped(client, upload):
    _register(client, "alice")
    _create(client, upload, link_id="a1")
    _register(client, "bob")
    _create(client, upload, link_id="b1")
    assert list(client.get("/api/links").json()) == ["b1"]
    client.post("/api/login", json={"username": "alice", "password": "pw1"})
    assert list(client.get("/api/links").json()) == ["a1"]


def test_redirect_page_for_browsers(client, upload):
    _register(client)
    _create(client, upload)
    page = client.get("/promo", headers={"Accept": "text/html", "User-Agent": DESKTOP})
    assert page.status_code == 200
    assert page.headers["content-type"].startswith("text/html")
    assert "https://example.com/p" in page.text
    assert "/api/uploads/promo-" in page.text


def test_redirect_json_for_api_clients(client, upload):
    _register(client)
    _create(client, upload)
    mobile = client.get("/promo", headers={"Accept": "application/json", "User-Agent": IPHONE}).json()
    desktop = client.get("/promo", headers={"Accept": "application/json", "User-Agent": DESKTOP}).json()
    assert mobile["target"] == "https://m.example.com/p"
    assert desktop["target"] == "https://example.com/p"


def test_unknown_id_is_404(client):
    assert client.get("/nothing").status_code == 404
    assert client.get("/api/link/nothing").status_code == 404


def test_end_to_end_ownership(client, upload):
    _register(client, "alice")
    assert _create(client, upload).status_code == 201
    assert client.get("/api/link/promo").status_code == 200
    image = client.get("/api/link/promo").json()["image"]

    _register(client, "bob")
    assert client.delete("/api/link/promo").status_code == 403
    assert client.get("/api/link/promo").status_code == 200

    client.post("/api/login", json={"username": "alice", "password": "pw1"})
    resp = client.delete("/api/delete/promo")
    assert resp.status_code == 200
    assert resp.json() == {"success": True}
    assert client.get("/api/link/promo").status_code == 404
    assert client.get(image).status_code == 404


def test_anonymous_delete_on_nested_is_401(client, upload):
    _register(client)
    _create(client, upload)
    client.cookies.clear()
    assert client.delete("/api/link/promo").status_code == 401
