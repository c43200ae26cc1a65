from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .errors import ErrorKind, ServiceError
from .logging_config import setup_logging
from .repositories import Clock, InMemoryTaskStore, TaskStore
from .routers import tasks as tasks_router
from .services import TaskService
from .settings import Settings, get_settings
from .validation import FieldError

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {
        "name": "tasks",
        "description": "Create, read and replace tasks owned by the calling user.",
    },
]


_HTTP_ERROR_KINDS = {
    400: ErrorKind.VALIDATION_ERROR,
    401: ErrorKind.UNAUTHENTICATED,
    403: ErrorKind.UNAUTHORIZED,
    404: ErrorKind.NOT_FOUND,
    405: ErrorKind.METHOD_NOT_ALLOWED,
}


def _http_error_kind(status_code: int) -> ErrorKind:
    if status_code >= 500:
        return ErrorKind.INTERNAL_ERROR
    return _HTTP_ERROR_KINDS.get(status_code, ErrorKind.HTTP_ERROR)


def _request_error_details(exc: RequestValidationError) -> list:
    details = []
    for err in exc.errors():
        # drop the leading 'body' / 'path' segment FastAPI adds
        loc = [str(p) for p in err.get("loc", ())][1:]
        details.append(FieldError(field=".".join(loc) or "body", message=err.get("msg", "")))
    return details


# PUBLIC_INTERFACE
def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TaskStore] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Application factory and composition root.

    Builds the task store and service once per app and keeps them on app.state so
    every app instance (and every test) owns an isolated store.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Task Backend",
        description="Backend API service for managing tasks with an in-memory store.",
        version="0.1.0",
        openapi_tags=openapi_tags,
    )

    task_store = store if store is not None else InMemoryTaskStore(settings.task_max_records, clock=clock)
    app.state.settings = settings
    app.state.task_store = task_store
    app.state.task_service = TaskService(task_store, clock=clock)

    # Configure CORS based on settings (.env -> CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        """
        Render ServiceError as:
            {
                "error": "<KIND>",
                "message": "...",
                "status": <http status>,
                "detail": [{"field": ..., "message": ...}]   # validation errors only
            }
        """
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Requests FastAPI itself cannot parse (e.g. malformed JSON) use the same envelope.
        """
        error = ServiceError.validation("Request validation failed", _request_error_details(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """
        Framework-raised errors (unknown route, wrong method, unreadable body) use the same envelope.
        """
        error = ServiceError(_http_error_kind(exc.status_code), str(exc.detail), exc.status_code)
        return JSONResponse(status_code=error.status_code, content=error.to_dict(), headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        error = ServiceError(ErrorKind.INTERNAL_ERROR, "Internal server error", 500)
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    # PUBLIC_INTERFACE
    @app.get("/", summary="Health Check", tags=["health"])
    def health_check():
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health and current store usage.
        """
        return {
            "message": "Healthy",
            "tasks": app.state.task_store.count(),
            "max_records": settings.task_max_records,
        }

    app.include_router(tasks_router.router, prefix=settings.api_prefix)
    return app


app = create_app()
