from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

# Ids are non-negative and must fit a 64-bit SQLite INTEGER.
MAX_ID = 2**63 - 1


# PUBLIC_INTERFACE
class TaskIn(BaseModel):
    """
    Request body for creating a task (POST) or replacing one (PUT).

    On PUT the item list replaces the stored items wholesale.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Prepare release",
                "description": "Cut the 1.2 release branch",
                "completed": False,
                "items": ["Freeze main", "Tag build", "Publish notes"],
            }
        }
    )

    title: str = Field(default="", description="Short title of the task")
    description: str = Field(default="", description="Free-form description")
    completed: bool = Field(default=False, description="Completion status flag")
    items: List[str] = Field(default_factory=list, description="Checklist entries in order")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Prepare release",
                "description": "Cut the 1.2 release branch",
                "completed": False,
                "created_at": "2025-01-25T10:15:30.123456",
                "updated_at": "2025-01-26T09:00:00.000001",
                "assigned_user_id": 42,
                "items": ["Freeze main", "Tag build", "Publish notes"],
                "comments": ["Waiting on QA sign-off"],
            }
        }
    )

    id: int = Field(..., description="Unique identifier of the task")
    title: str = Field(..., description="Short title of the task")
    description: str = Field(..., description="Free-form description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    assigned_user_id: int = Field(default=0, description="Assignee id, 0 when unassigned")
    items: List[str] = Field(default_factory=list, description="Checklist entries in order")
    comments: List[str] = Field(default_factory=list, description="Comment texts attached to the task")


# PUBLIC_INTERFACE
class CommentIn(BaseModel):
    """Request body for attaching a comment to a task."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"task_id": 1, "comment": "Waiting on QA sign-off"}}
    )

    task_id: int = Field(..., ge=0, le=MAX_ID, description="Id of the task the comment belongs to")
    comment: str = Field(..., description="Comment text")


# PUBLIC_INTERFACE
class CommentOut(BaseModel):
    """Schema returned by the API for a task comment."""

    id: int = Field(..., description="Unique identifier of the comment")
    task_id: int = Field(..., description="Id of the task the comment belongs to")
    comment: str = Field(..., description="Comment text")
    created_at: datetime = Field(..., description="Creation timestamp")


class HealthOut(BaseModel):
    status: str = Field(..., description="'available' when the service is up")
    environment: str = Field(..., description="Deployment environment name")
    version: str = Field(..., description="Service version")
