"""FastAPI application factory for the Nodebucket task board."""

from __future__ import annotations

import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import Settings, load_settings
from ..constants import API_PREFIX
from ..errors import InvalidArgument, StoreUnavailable, TaskBoardError
from ..service import EmployeeDirectory, TaskService
from ..storage import DocumentStore, TaskStore, YamlDocumentStore
from ..validation import build_task_schemas
from .employee_api import create_employee_router
from .models import HealthResponse
from .task_api import create_task_router


def _error_body(status: int, message: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"type": "error", "status": status, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def _stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(TaskBoardError)
    async def _task_board_error(request: Request, exc: TaskBoardError) -> JSONResponse:
        if isinstance(exc, StoreUnavailable):
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
            body = _error_body(
                exc.status,
                "Error connecting to the database",
                detail=exc.message if settings.debug else None,
                stack=_stack(exc) if settings.debug else None,
            )
            return JSONResponse(body, status_code=exc.status)
        logger.warning(f"{request.method} {request.url.path}: {exc.status} {exc.message}")
        return JSONResponse(exc.to_dict(), status_code=exc.status)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed JSON bodies; payload shapes are checked by the service.
        err = InvalidArgument("Request body is not valid JSON")
        logger.warning(f"{request.method} {request.url.path}: {err.message}")
        return JSONResponse(err.to_dict(), status_code=err.status)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            _error_body(exc.status_code, str(exc.detail)),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        body = _error_body(
            500,
            "Internal Server Error",
            detail=str(exc) if settings.debug else None,
            stack=_stack(exc) if settings.debug else None,
        )
        return JSONResponse(body, status_code=500)


def create_app(
    settings: Optional[Settings] = None,
    documents: Optional[DocumentStore] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Server settings; loaded from the environment when omitted.
        documents: Document store; defaults to a YAML store under
            ``settings.data_dir``.

    Returns:
        Configured FastAPI app. The task service, employee directory and
        compiled schemas are built once here and shared by all requests.
    """
    settings = settings or load_settings()
    documents = documents or YamlDocumentStore(settings.data_dir)

    app = FastAPI(
        title="Nodebucket",
        description="Employee task board API",
        version=__version__,
    )

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    store = TaskStore(documents)
    app.state.settings = settings
    app.state.task_service = TaskService(store, build_task_schemas())
    app.state.employee_directory = EmployeeDirectory(store)

    def _get_service() -> TaskService:
        return app.state.task_service

    def _get_directory() -> EmployeeDirectory:
        return app.state.employee_directory

    _install_error_handlers(app, settings)

    @app.get(f"{API_PREFIX}/health", response_model=HealthResponse, tags=["meta"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__, environment=settings.environment)

    app.include_router(create_employee_router(_get_directory), prefix=API_PREFIX)
    app.include_router(create_task_router(_get_service), prefix=API_PREFIX)

    logger.info(f"Nodebucket API ready (data_dir={settings.data_dir}, env={settings.environment})")
    return app
