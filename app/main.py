import logging

from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.routes import router
from app.config import (
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_CLOUD_NAME,
    CORS_ORIGINS,
    HOST,
    PORT,
    STATIC_DIR,
    UPLOAD_FOLDER,
)
from app.core.exceptions import register_exception_handlers
from app.core.registry import FileRegistry
from app.services.cloudinary_storage import CloudinaryStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("media_uploader")


def create_app(registry: Optional[FileRegistry] = None, storage=None) -> FastAPI:
    """Build the API with one registry and one storage client for its lifetime."""
    app = FastAPI(title="Cloud Media Uploader API", version="1.0.0")

    app.state.registry = registry if registry is not None else FileRegistry()
    app.state.storage = storage if storage is not None else CloudinaryStorage(
        cloud_name=CLOUDINARY_CLOUD_NAME,
        api_key=CLOUDINARY_API_KEY,
        api_secret=CLOUDINARY_API_SECRET,
        folder=UPLOAD_FOLDER,
    )
    if not app.state.storage.configured:
        logger.warning("CLOUDINARY_CLOUD_NAME is not set; uploads will fail until it is configured.")

    origins = [origin.strip() for origin in CORS_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    register_exception_handlers(app)

    # Mounted last so the API routes win over same-named static paths.
    static_dir = Path(STATIC_DIR)
    if static_dir.is_dir():
        logger.info("Serving static files from %s", static_dir)
        app.mount("/", StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.info("Static directory not found at %s. Serving API endpoints only.", static_dir)

    return app


app = create_app()


def main():
    import uvicorn

    logger.info("Server running on port %s", PORT)
    logger.info("Visit: http://localhost:%s", PORT)
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
