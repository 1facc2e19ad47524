import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .logging_setup import setup_logging
from .ports import BlobStorage, CollectionFactory
from .repositories import open_task_store
from .routers import tasks as tasks_router
from .settings import Settings, get_settings
from .tracker import Tracker

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Add, edit, complete and time tasks; read the daily board and analytics.",
    },
]


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    collection_factory: Optional[CollectionFactory] = None,
    storage: Optional[BlobStorage] = None,
) -> FastAPI:
    """
    Build the tracker application.

    Args:
        settings: Settings to use; loaded from the environment when omitted.
        collection_factory: Connects to the external document store; without it
            the tracker runs on local storage.
        storage: Local blob storage override (tests, embedding).
    """
    _settings = settings or get_settings()
    setup_logging(_settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store = await open_task_store(_settings, collection_factory, storage)
        app.state.tracker = Tracker(store)
        logger.info("Tracker started backend=%s profile=%s", store.backend, store.profile.name)
        try:
            yield
        finally:
            app.state.tracker.close()

    app = FastAPI(
        title="Time Tracker",
        description="Personal task and time tracker with daily analytics.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.settings = _settings

    # Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (_settings.cors_allow_origins == ["*"]) or (len(_settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else _settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": jsonable_errors(exc),
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check(request: Request):
        """
        Health check endpoint.

        Returns:
            A JSON object with service health, storage backend and profile.
        """
        tracker: Tracker = request.app.state.tracker
        return {
            "message": "Healthy",
            "backend": tracker.store.backend,
            "profile": tracker.profile.name,
        }

    app.include_router(tasks_router.router)
    app.include_router(tasks_router.analytics_router)
    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors with any non-JSON context (exception objects) stringified."""
    return jsonable_encoder(exc.errors(), custom_encoder={Exception: str})


app = create_app()
