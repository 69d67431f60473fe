from __future__ import annotations

from datetime import datetime
from typing import List, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    A lightweight domain model representing a task as read from the store.

    Fields:
    - id: Unique integer identifier assigned by the store
    - title: Short title
    - description: Free-form description ('' when not supplied)
    - completed: Boolean completion flag
    - created_at: Creation timestamp (datetime)
    - updated_at: Last update timestamp (datetime)
    - assigned_user_id: Id of the assignee, 0 when unassigned
    - items: Checklist entries in insertion order
    - comments: Comment texts; filled in by the HTTP layer, never by the repository
    """

    id: int
    title: str
    description: str
    completed: bool
    created_at: datetime
    updated_at: datetime
    assigned_user_id: int
    items: List[str]
    comments: List[str]


# PUBLIC_INTERFACE
class TaskCommentEntity(TypedDict):
    """A comment attached to a task."""

    id: int
    task_id: int
    comment: str
    created_at: datetime
