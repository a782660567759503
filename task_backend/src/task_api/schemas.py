from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool, field_validator
from pydantic.alias_generators import to_camel


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new Task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Deploy to production",
                "description": "Finalize deployment steps for the task API.",
            }
        }
    )

    title: str = Field(..., description="Title of the task", min_length=1)
    description: Optional[str] = Field(default=None, description="Optional detailed description")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and reject titles that are left empty.
        """
        s = v.strip()
        if not s:
            raise ValueError("title cannot be empty")
        return s

    @field_validator("description")
    @classmethod
    def blank_description_to_none(cls, v: Optional[str]) -> Optional[str]:
        """
        Store an empty description as null.
        """
        return v or None


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating a Task. Only the completion flag can be changed.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"completed": True}})

    completed: StrictBool = Field(..., description="The new completion status of the task")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a Task. Timestamps are serialized as
    camelCase ISO8601 strings in UTC.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Learn HONC",
                "description": "Build a complete task API",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-25T10:15:30.123456Z",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Title of the task")
    description: Optional[str] = Field(default=None, description="Optional detailed description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """
        Backends without timezone support (SQLite) hand back naive values that
        were written as UTC.
        """
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


# PUBLIC_INTERFACE
class TaskDeleted(BaseModel):
    """
    Confirmation returned after a Task is deleted.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"message": "Task deleted successfully", "id": 1}}
    )

    message: str = Field(..., description="Human readable confirmation")
    id: int = Field(..., description="Identifier of the deleted task")


class ErrorResponse(BaseModel):
    """Body of 404 and 500 responses."""

    error: str = Field(..., description="Short error description")
    message: Optional[str] = Field(default=None, description="Additional details, when available")


class ValidationErrorResponse(BaseModel):
    """Body of 400 responses produced by request validation."""

    error: str = Field(default="ValidationError")
    message: str = Field(default="Request validation failed")
    detail: List[Dict[str, Any]] = Field(..., description="pydantic/FastAPI error details")
