from __future__ import annotations

from fastapi import Depends, FastAPI

from src.application.dtos.common_dto import HealthResponse, RootResponse
from src.infrastructure.api.dependencies import get_settings
from src.infrastructure.api.errors import add_exception_handlers
from src.infrastructure.api.middlewares import add_default_middlewares
from src.infrastructure.api.routes.maintenance_routes import router as maintenance_router
from src.infrastructure.api.routes.media_routes import router as media_router
from src.infrastructure.config import MediaSettings
from src.infrastructure.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Storefront Media",
        version="0.1.0",
        description="""
        ## Storefront Media API

        Media library of the storefront: every uploaded image is stored as an
        untouched original plus large, medium and thumbnail derivatives, on the
        local filesystem or in a Supabase storage bucket.

        ### Features
        - **Media Library**: Upload, list, inspect and delete images
        - **Derivatives**: large (fits 1920x1920), medium (short side 500), thumb (fits 150x150)
        - **Migration**: Move product, hero slide, news and page images off legacy paths
        - **Maintenance**: Repair missing dimensions, remove broken records, regenerate derivatives

        ### Error Responses
        Errors raised by the media pipeline carry a `check` field naming the failed step:
        - **400 Bad Request**: File could not be decoded (`decode`)
        - **413 Payload Too Large**: File exceeds the upload limit (`size`)
        - **415 Unsupported Media Type**: Not JPEG, PNG or WEBP (`type`)
        - **500 Internal Server Error**: A derivative could not be built (tier name)
        - **502 Bad Gateway**: The storage backend failed (`storage`)
        """,
    )
    add_default_middlewares(app)
    add_exception_handlers(app)

    @app.get(
        "/",
        response_model=RootResponse,
        summary="API Root",
        description="Get basic information about the media API",
    )
    def root():
        """Get API root information."""
        return {"status": "ok", "service": "storefront-media", "version": app.version}

    @app.get(
        "/health",
        response_model=HealthResponse,
        summary="Health Check",
        description="Check if the API service is running and which storage backend is configured",
    )
    def health(settings: MediaSettings = Depends(get_settings)):
        """Check API health status."""
        return {"status": "healthy", "storage": settings.storage_backend}

    app.include_router(media_router)
    app.include_router(maintenance_router)
    return app


app = create_app()
