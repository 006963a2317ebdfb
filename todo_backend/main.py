"""FastAPI application entry point."""

import logging
from datetime import UTC, datetime
from http import HTTPStatus
from uuid import uuid4

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from google.auth import exceptions as auth_exceptions
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from todo_backend import __version__
from todo_backend.config import load_settings
from todo_backend.errors import ConfigError, ErrorKind, StorageError
from todo_backend.logging_setup import setup_logging
from todo_backend.models import (
    ApiResponse,
    BucketInfo,
    ErrorResponse,
    HealthData,
    Task,
    TaskCreate,
    TaskUpdate,
)
from todo_backend.storage import StorageBackend, build_storage
from todo_backend.storage.gcs import console_url

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

_STORAGE_ERROR_STATUS = {
    ErrorKind.NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Task not found"),
    ErrorKind.PERMISSION_DENIED: (
        status.HTTP_403_FORBIDDEN,
        "Forbidden: Insufficient permissions to access storage",
    ),
    ErrorKind.INTERNAL: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
}

router = APIRouter()


def get_storage(request: Request) -> StorageBackend:
    """Return the storage backend the app was built with."""
    return request.app.state.storage


def _error_response(code: int, message: str) -> JSONResponse:
    body = ErrorResponse(error=HTTPStatus(code).phrase, code=code, message=message)
    return JSONResponse(status_code=code, content=body.model_dump())


@router.get(
    "/health",
    response_model=ApiResponse[HealthData],
    response_model_exclude_none=True,
    tags=["System"],
)
async def health_check(storage: StorageBackend = Depends(get_storage)) -> ApiResponse[HealthData]:
    """Health check endpoint."""
    data = HealthData(
        timestamp=datetime.now(UTC),
        storage=storage.mode,
        bucket=storage.bucket_name,
    )
    return ApiResponse(message="Backend is healthy", data=data)


@router.get("/api/bucket-info", response_model=ApiResponse[BucketInfo], tags=["System"])
async def bucket_info(storage: StorageBackend = Depends(get_storage)) -> ApiResponse[BucketInfo]:
    """Describe where tasks are stored."""
    if storage.bucket_name is None:
        data = BucketInfo(storage=storage.mode, is_local=True)
    else:
        data = BucketInfo(
            storage=storage.mode,
            bucket=storage.bucket_name,
            gcs_console_url=console_url(storage.bucket_name),
            is_local=False,
        )
    return ApiResponse(message="Bucket information retrieved successfully", data=data)


@router.get("/api/tasks", response_model=ApiResponse[list[Task]], tags=["Tasks"])
async def list_tasks(storage: StorageBackend = Depends(get_storage)) -> ApiResponse[list[Task]]:
    """List all tasks."""
    tasks = await run_in_threadpool(storage.list_tasks)
    return ApiResponse(message="Tasks retrieved successfully", data=tasks)


@router.post(
    "/api/tasks",
    response_model=ApiResponse[Task],
    status_code=status.HTTP_201_CREATED,
    tags=["Tasks"],
)
async def create_task(
    data: TaskCreate,
    storage: StorageBackend = Depends(get_storage),
) -> ApiResponse[Task]:
    """Create a new task."""
    task = Task(
        id=str(uuid4()),
        text=data.text,
        completed=data.completed,
        created_at=datetime.now(UTC),
    )
    await run_in_threadpool(storage.create_task, task)
    return ApiResponse(message="Task created successfully", data=task)


@router.get("/api/tasks/{task_id}", response_model=ApiResponse[Task], tags=["Tasks"])
async def get_task(task_id: str, storage: StorageBackend = Depends(get_storage)) -> ApiResponse[Task]:
    """Get a specific task by ID."""
    task = await run_in_threadpool(storage.get_task, task_id)
    return ApiResponse(message="Task retrieved successfully", data=task)


@router.put("/api/tasks/{task_id}", response_model=ApiResponse[Task], tags=["Tasks"])
async def update_task(
    task_id: str,
    data: TaskUpdate,
    storage: StorageBackend = Depends(get_storage),
) -> ApiResponse[Task]:
    """Update an existing task.

    Only the supplied fields change; the merged task is written back whole.
    """
    existing = await run_in_threadpool(storage.get_task, task_id)
    task = existing.model_copy(update=data.changes())
    await run_in_threadpool(storage.update_task, task)
    return ApiResponse(message="Task updated successfully", data=task)


@router.delete(
    "/api/tasks/{task_id}",
    response_model=ApiResponse[None],
    response_model_exclude_none=True,
    tags=["Tasks"],
)
async def delete_task(task_id: str, storage: StorageBackend = Depends(get_storage)) -> ApiResponse[None]:
    """Delete a task."""
    await run_in_threadpool(storage.delete_task, task_id)
    return ApiResponse(message="Task deleted successfully")


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    code, message = _STORAGE_ERROR_STATUS.get(exc.kind, _STORAGE_ERROR_STATUS[ErrorKind.INTERNAL])
    route = request.scope.get("route")
    operation = getattr(route, "name", request.url.path)
    if exc.kind is ErrorKind.NOT_FOUND:
        logger.info("%s: %s", operation, exc)
    else:
        logger.error("Error in %s: %s", operation, exc)
    return _error_response(code, message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = "Invalid request body"
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            break
        if err.get("loc", ())[-1:] == ("text",):
            message = "Task text is required"
            break
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return _error_response(status.HTTP_400_BAD_REQUEST, message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Runs in ServerErrorMiddleware, outside the CORS hook, so the headers
    # are set here.
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    response = _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    response.headers.update(CORS_HEADERS)
    return response


def create_app(storage: StorageBackend) -> FastAPI:
    """Build the API around an already constructed storage backend."""
    app = FastAPI(
        title="To-Do API",
        description="Task CRUD backed by in-memory or Cloud Storage persistence.",
        version=__version__,
    )
    app.state.storage = storage

    @app.middleware("http")
    async def cors(request: Request, call_next):
        # Pre-flight requests never reach the router.
        if request.method == "OPTIONS":
            response = Response(status_code=status.HTTP_200_OK)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)

    try:
        settings.validate()
        storage = build_storage(settings)
    except ConfigError as exc:
        logger.critical("%s", exc)
        raise SystemExit(1) from exc
    except auth_exceptions.DefaultCredentialsError as exc:
        logger.critical("Failed to create storage client: %s", exc)
        raise SystemExit(1) from exc

    logger.info("Starting To-Do App backend on port %d", settings.port)
    logger.info("Using storage backend: %s", settings.storage_label)
    if storage.bucket_name:
        logger.info("Using bucket: %s", storage.bucket_name)

    uvicorn.run(create_app(storage), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
