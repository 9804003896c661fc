"""
Mobile WiFi Server

Mobile clients register themselves, report status, poll for queued
operator commands and upload captured media. Operators list devices
and queue commands through the admin routes.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from wifi_server import __version__, config
from wifi_server.dependencies import get_server_url
from wifi_server.media import CATEGORIES, MediaStore
from wifi_server.models import PingResponse, ServiceInfo
from wifi_server.routers import admin_router, devices_router, media_router
from wifi_server.store import RegistryCoordinator

logger = logging.getLogger(__name__)

ENDPOINTS = {
    "register_device": "/register_device [POST]",
    "update_status": "/update_status [POST]",
    "get_commands": "/get_commands/:device_id [GET]",
    "upload_photo": "/upload_photo [POST]",
    "upload_screen_recording": "/upload_screen_recording [POST]",
    "screenshot_upload": "/screenshot/upload [POST]",
    "upload_data": "/data [POST]",
    "admin_devices": "/admin/devices [GET]",
    "admin_photos": "/admin/photos [GET]",
    "delete_photo": "/admin/photos/:filename [DELETE]",
    "send_command": "/admin/send_command [POST]",
    "clear_commands": "/admin/clear_commands/:device_id [DELETE]",
}


def create_app(
    coordinator: Optional[RegistryCoordinator] = None,
    media_store: Optional[MediaStore] = None,
) -> FastAPI:
    """
    Build the application with its own registry and media store.

    Each app owns its state, so tests can create isolated instances.
    """
    media_store = media_store or MediaStore(config.UPLOAD_DIR)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        # Startup: create the upload directories
        media_store.ensure_dirs()
        logger.info(f"Mobile WiFi Server started, uploads in {media_store.root}/")
        yield

    app = FastAPI(
        title="Mobile WiFi Server API",
        version=__version__,
        description="""
Device registry, command queue and media ingestion for mobile clients.
        """,
        lifespan=lifespan,
    )
    app.state.coordinator = coordinator or RegistryCoordinator()
    app.state.media_store = media_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(devices_router)
    app.include_router(admin_router)
    app.include_router(media_router)

    for category in CATEGORIES:
        app.mount(
            f"/uploads/{category}",
            StaticFiles(directory=media_store.directory(category), check_dir=False),
            name=f"uploads_{category}",
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/", response_model=ServiceInfo, tags=["Health"])
    async def index(server_url: str = Depends(get_server_url)) -> ServiceInfo:
        """Service banner with the endpoint map."""
        return ServiceInfo(
            message="Mobile WiFi Server",
            server_url=server_url,
            endpoints=ENDPOINTS,
        )

    @app.get("/ping", response_model=PingResponse, tags=["Health"])
    async def ping() -> PingResponse:
        """Liveness probe used by devices."""
        return PingResponse(timestamp=datetime.now(timezone.utc))

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "wifi_server.main:app", host=config.HOST, port=config.PORT, reload=config.DEBUG
    )
