"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from task_service import __version__
from task_service.config import Settings
from task_service.errors import StorageError
from task_service.models import ErrorResponse, HealthResponse, Task, TaskRequest
from task_service.store import TaskRepository, create_repository

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}
NOT_FOUND_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
    **ERROR_RESPONSES,
}
INVALID_BODY_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
}


def get_repository(request: Request) -> TaskRepository:
    return request.app.state.repository


Repository = Annotated[TaskRepository, Depends(get_repository)]


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


def _backend_failure(message: str) -> HTTPException:
    logger.exception(message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first validation problem as a 400."""
    logger.warning("Invalid request body on %s %s: %s", request.method, request.url.path, exc.errors())
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(part for part in first.get("loc", ()) if isinstance(part, str) and part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request body"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=message).model_dump(),
    )


def create_app(
    repository: TaskRepository | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the API.

    If no repository is given, one is created from ``settings`` when the app
    starts and closed when it stops.
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = app.state.repository is None
        if owned:
            app.state.repository = create_repository(settings)
        try:
            yield
        finally:
            if owned:
                app.state.repository.close()
                app.state.repository = None

    app = FastAPI(
        title="Task Service API",
        description="CRUD over tasks with in-memory or Redis storage.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.repository = repository

    # Configure CORS for frontend access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse()

    # Task endpoints are sync: FastAPI runs them in its thread pool, so
    # blocking Redis calls do not stall the event loop.

    @app.get("/tasks", response_model=list[Task], tags=["Tasks"], responses=ERROR_RESPONSES)
    def list_tasks(repo: Repository) -> list[Task]:
        """List all tasks."""
        try:
            return repo.list_all()
        except StorageError:
            raise _backend_failure("Failed to get tasks") from None

    @app.post(
        "/tasks",
        response_model=Task,
        status_code=status.HTTP_201_CREATED,
        tags=["Tasks"],
        responses={**INVALID_BODY_RESPONSES, **ERROR_RESPONSES},
    )
    def create_task(data: TaskRequest, repo: Repository) -> Task:
        """Create a new task."""
        try:
            return repo.create(data)
        except StorageError:
            raise _backend_failure("Failed to create task") from None

    @app.get("/tasks/{task_id}", response_model=Task, tags=["Tasks"], responses=NOT_FOUND_RESPONSES)
    def get_task(task_id: str, repo: Repository) -> Task:
        """Get a specific task by ID."""
        try:
            task = repo.get(task_id)
        except StorageError:
            raise _backend_failure("Failed to get task") from None
        if task is None:
            raise _not_found()
        return task

    @app.put(
        "/tasks/{task_id}",
        response_model=Task,
        tags=["Tasks"],
        responses={**INVALID_BODY_RESPONSES, **NOT_FOUND_RESPONSES},
    )
    def update_task(task_id: str, data: TaskRequest, repo: Repository) -> Task:
        """Replace the title, description and status of an existing task."""
        try:
            task = repo.update(task_id, data)
        except StorageError:
            raise _backend_failure("Failed to update task") from None
        if task is None:
            raise _not_found()
        return task

    @app.delete(
        "/tasks/{task_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        tags=["Tasks"],
        responses=ERROR_RESPONSES,
    )
    def delete_task(task_id: str, repo: Repository) -> None:
        """Delete a task. Deleting a missing task also succeeds."""
        try:
            repo.delete(task_id)
        except StorageError:
            raise _backend_failure("Failed to delete task") from None

    return app


app = create_app(settings=Settings.from_env())
