"""Pydantic models for the Task Service API.

``Task`` doubles as the storage record: the Redis backend persists it with
``model_dump_json`` and reads it back with ``model_validate_json``.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from task_service import __version__


class TaskRequest(BaseModel):
    """Request body for creating or updating a task.

    Any ``id`` or timestamp sent by the client is ignored.
    """

    title: str = Field(
        ...,
        min_length=1,
        description="The task title (required, non-empty)",
    )
    description: str = Field(default="", description="Optional longer description")
    status: str = Field(default="", description="Free-form status label, e.g. 'pending'")

    @field_validator("description", "status", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class Task(BaseModel):
    """A stored task.

    Frozen: values handed out by a repository are snapshots and cannot be
    mutated behind the repository's lock.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier for the task")
    title: str = Field(..., description="The task title")
    description: str = Field(default="", description="The task description")
    status: str = Field(default="", description="Free-form status label")
    created_at: datetime = Field(..., description="When the task was created")
    updated_at: datetime = Field(..., description="When the task was last updated")


class ErrorResponse(BaseModel):
    """Body returned for every 4xx/5xx response."""

    error: str


class HealthResponse(BaseModel):
    """Response from the health check endpoint."""

    status: str = "ok"
    version: str = __version__
