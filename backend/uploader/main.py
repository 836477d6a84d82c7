"""Image Uploader application.

Entry point for the HTTP service: one upload endpoint plus a static landing
page with the upload form.

Routes:
    - POST /upload:  store an image in S3 and record its metadata
    - GET  /health:  liveness and metadata-database state
    - GET  /:        landing page (index.html)
    - GET  /<asset>: files from the static root
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from uploader import __version__
from uploader.config import AppSettings, get_config
from uploader.metadata import MetadataStore
from uploader.storage import ObjectStore, S3ObjectStore
from uploader.upload import UploadPipeline
from uploader.upload import router as upload_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# botocore.auth logs the full SigV4 canonical request, credentials included.
for _noisy in (
    "botocore",
    "boto3",
    "urllib3",
    "urllib3.connectionpool",
):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    object_store: Optional[ObjectStore] = None,
    metadata_store: Optional[MetadataStore] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Collaborators not passed in are built from ``settings`` during startup.

    Args:
        settings: Configuration; defaults to the process-wide settings.
        object_store: Pre-built object store (tests).
        metadata_store: Pre-built metadata store (tests).
    """
    config = settings or get_config()
    static_dir = Path(config.server.static_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Acquire the store clients at startup and release them at shutdown."""
        configured_level = getattr(logging, config.server.log_level.upper(), None)
        if configured_level is not None:
            logging.getLogger().setLevel(configured_level)

        store = object_store or S3ObjectStore.from_settings(config.storage)
        metadata = metadata_store or MetadataStore(config.database.url)

        # A broken database is not fatal: uploads fail at the metadata step.
        if not metadata.connect():
            logger.warning("Metadata database unavailable; uploads will fail until restart")

        app.state.metadata_store = metadata
        app.state.pipeline = UploadPipeline(store, metadata)
        logger.info(
            "Server ready on http://%s:%s (bucket=%r)",
            config.server.host,
            config.server.port,
            store.bucket,
        )

        yield  # Application runs here

        metadata.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title="Image Uploader",
        description="Uploads images to S3 and records their metadata",
        version=__version__,
        lifespan=lifespan,
    )

    app.include_router(upload_router)

    @app.get("/health")
    async def health(request: Request) -> dict:
        """Health check endpoint.

        Returns:
            dict: Server status and whether the metadata database is connected.
        """
        metadata = getattr(request.app.state, "metadata_store", None)
        connected = metadata is not None and metadata.connected
        return {
            "status": "ok",
            "database": "connected" if connected else "disconnected",
        }

    @app.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(static_dir / "index.html")

    # Mounted last so the routes above take precedence.
    app.mount("/", StaticFiles(directory=static_dir), name="static")

    return app


app = create_app()


def run() -> None:
    """Run the server with uvicorn (``image-uploader`` console script)."""
    config = get_config()
    uvicorn.run(
        app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.server.log_level,
    )


if __name__ == "__main__":
    run()
