"""
Main API module for Splashlink.

Responsibilities:
    - Expose REST endpoints to register, log in, and manage redirect links
    - Store uploaded loading images and serve them back
    - Resolve public short ids to an interstitial page that redirects
      mobile and desktop visitors to their own destination

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - JSON file documents by default; memory/Postgres backends via config.
    - LinkStore owns layout detection, migration and ownership rules;
      CredentialStore owns users; routes only translate errors to HTTP.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, Response, UploadFile
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from auth.config import COOKIE_PATH, cookie_name
from auth.dependencies import get_current_user, get_optional_user
from auth.schemas import AuthResult, UserCredentials
from auth.service import CredentialStore
from splashlink.assets.asset_store import AssetStore
from splashlink.config import settings
from splashlink.errors import SplashlinkError
from splashlink.manager.link_manager import LinkManager
from splashlink.manager.link_store import LinkStore
from splashlink.manager.redirect import pick_target, render_redirect_page
from splashlink.storage.base import BaseDocumentBackend
from splashlink.storage.storage_factory import get_document

log = logging.getLogger("splashlink")


def _http_error(err: SplashlinkError) -> HTTPException:
    """Translate a domain error; internal failures never leak their detail."""
    if err.status_code >= 500:
        log.error("Internal error: %s", err.detail)
        return HTTPException(status_code=500, detail="Internal Server Error")
    return HTTPException(status_code=err.status_code, detail=err.detail)


def create_app(
    link_document: Optional[BaseDocumentBackend] = None,
    user_document: Optional[BaseDocumentBackend] = None,
    assets: Optional[AssetStore] = None,
) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        link_document: Backend for the link document (default from config).
        user_document: Backend for the credential document (default from config).
        assets: Asset store for uploaded images (default from config).

    Returns:
        FastAPI: A fully configured application instance with its own stores.
    """
    settings.reload()
    app = FastAPI(
        title="Splashlink",
        description="Image-interstitial short links with mobile/desktop destinations",
        docs_url="/docs",
    )

    # basic console logging (optional)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    link_document = link_document or get_document("links", path=settings.LINKS_FILE)
    user_document = user_document or get_document("users", path=settings.USERS_FILE)
    assets = assets or AssetStore(settings.UPLOADS_DIR, settings.PUBLIC_DIR)

    link_store = LinkStore(link_document, assets=assets)
    credentials = CredentialStore(user_document, link_store=link_store)
    link_manager = LinkManager(link_store, assets)

    app.state.link_store = link_store
    app.state.credentials = credentials
    app.state.link_manager = link_manager

    log.info("Splashlink document backend: %s", type(link_document).__name__)

    def _login(response: Response, username: str) -> None:
        response.set_cookie(cookie_name(), username, path=COOKIE_PATH)

    # Health check
    @app.get("/health_splash")
    def health_splash():
        return {"status": "ok"}

    # ----------------------------------------------------------------
    # Accounts
    # ----------------------------------------------------------------
    @app.post("/api/register", response_model=AuthResult)
    def register(req: UserCredentials, response: Response) -> Dict[str, Any]:
        """
        Create an account and log the caller in.

        Raises:
            HTTPException: 400 on empty/reserved names or a taken username.
        """
        try:
            username = credentials.register(req.username, req.password)
        except SplashlinkError as err:
            raise _http_error(err)
        _login(response, username)
        return {"success": True}

    @app.post("/api/login", response_model=AuthResult)
    def login(req: UserCredentials, response: Response) -> Dict[str, Any]:
        """Unknown users and wrong passwords get the same 401 message."""
        try:
            username = credentials.authenticate(req.username, req.password)
        except SplashlinkError as err:
            raise _http_error(err)
        _login(response, username)
        return {"success": True}

    @app.post("/api/logout", response_model=AuthResult)
    def logout(response: Response) -> Dict[str, Any]:
        response.delete_cookie(cookie_name(), path=COOKIE_PATH)
        return {"success": True}

    # ----------------------------------------------------------------
    # Links
    # ----------------------------------------------------------------
    @app.post("/api/create", status_code=201)
    def create_link(
        request: Request,
        username: str = Depends(get_current_user),
        id: Optional[str] = Form(None),
        urlMobile: Optional[str] = Form(None),
        urlDesktop: Optional[str] = Form(None),
        image: Optional[UploadFile] = File(None),
        check_reachable: bool = Query(
            False, description="Verify destinations answer a HEAD/GET request."
        ),
    ) -> Dict[str, Any]:
        """
        Create a link from a multipart form: id, urlMobile, urlDesktop (optional), image.

        Returns:
            dict: {"link": "<origin>/<id>"} with status 201.
        """
        if id is None or urlMobile is None or image is None:
            raise HTTPException(status_code=400, detail="Invalid form submission")
        try:
            entry = link_manager.create_link(
                username,
                id,
                urlMobile,
                urlDesktop,
                image.filename or "",
                image.file,
                check_reachable=check_reachable,
            )
        except SplashlinkError as err:
            raise _http_error(err)
        origin = request.headers.get("origin") or str(request.base_url)
        return {"link": link_manager.short_url(origin, entry["id"])}

    @app.get("/api/links")
    def list_links(username: str = Depends(get_current_user)) -> Dict[str, Any]:
        """The caller's entries keyed by id (every entry while the document is still flat)."""
        try:
            return link_store.list_links(username)
        except SplashlinkError as err:
            raise _http_error(err)

    @app.get("/api/link/{link_id}")
    def get_link(link_id: str) -> Dict[str, Any]:
        try:
            entry = link_store.lookup(link_id)
        except SplashlinkError as err:
            raise _http_error(err)
        if entry is None:
            raise HTTPException(status_code=404, detail="Not Found")
        return entry

    def _delete(link_id: str, requester: Optional[str]) -> Dict[str, Any]:
        try:
            link_manager.delete_link(requester, link_id)
        except SplashlinkError as err:
            raise _http_error(err)
        return {"success": True}

    @app.delete("/api/link/{link_id}")
    def delete_link(link_id: str, requester: Optional[str] = Depends(get_optional_user)) -> Dict[str, Any]:
        return _delete(link_id, requester)

    @app.delete("/api/delete/{link_id}")
    def delete_link_legacy(link_id: str, requester: Optional[str] = Depends(get_optional_user)) -> Dict[str, Any]:
        return _delete(link_id, requester)

    # ----------------------------------------------------------------
    # Assets
    # ----------------------------------------------------------------
    def _serve(filename: str, legacy: bool) -> FileResponse:
        try:
            path, content_type = assets.open_path(filename, legacy=legacy)
        except SplashlinkError as err:
            raise _http_error(err)
        return FileResponse(path, media_type=content_type)

    @app.get("/api/uploads/{filename:path}")
    def serve_upload(filename: str) -> FileResponse:
        return _serve(filename, legacy=False)

    @app.get("/uploads/{filename:path}")
    def serve_legacy_upload(filename: str) -> FileResponse:
        return _serve(filename, legacy=True)

    # ----------------------------------------------------------------
    # Public redirect (registered last: it captures every other path)
    # ----------------------------------------------------------------
    @app.get("/{link_id}")
    def redirect_link(link_id: str, request: Request) -> Response:
        """
        Resolve a short id for a visitor.

        Browsers get the interstitial page; API clients (Accept: application/json)
        get the entry plus the destination chosen for their User-Agent.
        """
        try:
            entry = link_store.lookup(link_id)
        except SplashlinkError as err:
            raise _http_error(err)
        if entry is None:
            raise HTTPException(status_code=404, detail="Not Found")

        target = pick_target(entry, request.headers.get("user-agent"))
        accept = request.headers.get("accept", "").lower()
        if "application/json" in accept and "text/html" not in accept:
            return JSONResponse({**entry, "target": target})
        return HTMLResponse(render_redirect_page(entry, target, settings.REDIRECT_DELAY_MS))

    return app


# `uvicorn main:app --reload` and `from main import app` continue to work.
app = create_app()
