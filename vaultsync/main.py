"""Vault Sync Server - FastAPI Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vaultsync.config import Settings, settings as default_settings
from vaultsync.database import init_db, make_engine
from vaultsync.services.collaborators import Collaborators
from vaultsync.services.errors import NotConfigured
from vaultsync.services.library_store import LibraryStore
from vaultsync.services.thumbnail_service import ThumbnailService
from vaultsync.sync_server import SyncServer

API_PREFIX = "/api"


def build_server(settings: Settings) -> SyncServer:
    """Wire the SQLite library store into a new sync server."""
    settings.ensure_dirs()
    engine = make_engine(settings.db_path, echo=settings.debug)
    init_db(engine)

    store = LibraryStore(engine, dedup_window_ms=settings.history_dedup_window_ms)
    thumbnails = ThumbnailService(store, settings.thumbnail_dir, size=settings.thumbnail_size)
    return SyncServer(settings, Collaborators.from_store(store, thumbnails=thumbnails))


def create_app(server: SyncServer) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        server.start()
        yield
        server.stop()

    app = FastAPI(
        title=server.settings.server_name,
        description="Mobile companion sync server for the media vault",
        version=server.settings.version,
        lifespan=lifespan,
    )
    app.state.server = server

    # --- Dispatcher (CORS, auth split, top-level error conversion) ---
    from vaultsync.api.dispatch import DispatchMiddleware

    app.add_middleware(DispatchMiddleware, server=server)

    # --- Error bodies are always {"error": message} ---
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        detail = exc.detail
        if exc.status_code == 404 and detail == "Not Found":
            detail = "Not found"  # unmatched route
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = "Invalid request"
        if errors:
            first = errors[0]
            loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{loc}: {first['msg']}" if loc else first["msg"]
        return JSONResponse(status_code=400, content={"error": message})

    @app.exception_handler(NotConfigured)
    async def not_configured(request: Request, exc: NotConfigured):
        return JSONResponse(status_code=500, content={"error": str(exc)})

    # --- Register API routers ---
    from vaultsync.api.admin import router as admin_router
    from vaultsync.api.devices import router as devices_router
    from vaultsync.api.downloads import router as downloads_router
    from vaultsync.api.library import router as library_router
    from vaultsync.api.media import router as media_router
    from vaultsync.api.pairing import router as pairing_router
    from vaultsync.api.playlists import router as playlists_router
    from vaultsync.api.sync import router as sync_router

    app.include_router(pairing_router, prefix=API_PREFIX)
    app.include_router(admin_router, prefix=API_PREFIX)
    app.include_router(library_router, prefix=API_PREFIX)
    app.include_router(media_router, prefix=API_PREFIX)
    app.include_router(sync_router, prefix=API_PREFIX)
    app.include_router(playlists_router, prefix=API_PREFIX)
    app.include_router(downloads_router, prefix=API_PREFIX)
    app.include_router(devices_router, prefix=API_PREFIX)

    return app


def create_default_app() -> FastAPI:
    """uvicorn factory: server built from environment settings."""
    return create_app(build_server(default_settings))
