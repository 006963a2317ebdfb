"""Pydantic models for the To-Do API.

Field names on the wire are camelCase (``createdAt``, ``gcsConsoleUrl``);
Python code uses the snake_case attribute names.
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictBool

T = TypeVar("T")


class TaskCreate(BaseModel):
    """Request body for creating a new task."""

    text: str = Field(
        ...,
        min_length=1,
        description="The task text (required, non-empty)",
    )
    completed: StrictBool = Field(
        default=False,
        description="Initial completion status",
    )


class TaskUpdate(BaseModel):
    """Request body for updating an existing task.

    Omitted or null fields are left unchanged.
    """

    text: str | None = Field(
        default=None,
        min_length=1,
        description="New text for the task",
    )
    completed: StrictBool | None = Field(
        default=None,
        description="New completion status",
    )

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class Task(BaseModel):
    """A to-do item."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Unique identifier for the task")
    text: str = Field(..., description="The task text")
    completed: bool = Field(default=False, description="Whether the task has been completed")
    created_at: datetime = Field(
        ...,
        alias="createdAt",
        description="When the task was created",
    )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope wrapping every 2xx payload."""

    message: str
    data: T | None = None


class ErrorResponse(BaseModel):
    """Body returned for every failed request."""

    error: str
    code: int
    message: str


class HealthData(BaseModel):
    timestamp: datetime
    storage: str
    bucket: str | None = None


class BucketInfo(BaseModel):
    """Where tasks are kept, with a console link for remote buckets."""

    model_config = ConfigDict(populate_by_name=True)

    storage: str
    bucket: str | None = None
    gcs_console_url: str | None = Field(default=None, alias="gcsConsoleUrl")
    is_local: bool = Field(..., alias="isLocal")
