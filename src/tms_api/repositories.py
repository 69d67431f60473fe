from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Sequence

from fastapi import Request

from .models import TaskCommentEntity, TaskEntity


# PUBLIC_INTERFACE
class TaskRepository(ABC):
    """Abstract repository contract for task storage backends."""

    @abstractmethod
    def get_all(self) -> List[TaskEntity]:
        """Return every task with its items."""

    @abstractmethod
    def get_by_id(self, task_id: int) -> TaskEntity:
        """Return one task with its items. Raise NotFoundError if it does not exist."""

    @abstractmethod
    def get_by_assigned_user(self, user_id: int) -> List[TaskEntity]:
        """Return the tasks assigned to user_id, each with its items."""

    @abstractmethod
    def insert(
        self,
        title: str,
        description: str,
        completed: bool,
        created_at: datetime,
        updated_at: datetime,
    ) -> int:
        """Insert a task row without items and return its new id."""

    @abstractmethod
    def insert_item(self, task_id: int, item: str) -> None:
        """Append one item to a task."""

    @abstractmethod
    def update(
        self,
        task_id: int,
        title: str,
        description: str,
        completed: bool,
        items: Sequence[str],
    ) -> None:
        """
        Overwrite the task's scalar fields, stamp updated_at with the current
        time and replace all of its items with `items`, in order.
        """

    @abstractmethod
    def assign_user(self, task_id: int, user_id: int, updated_at: datetime) -> None:
        """Set the assignee and the caller-supplied updated_at."""

    @abstractmethod
    def delete(self, task_id: int) -> None:
        """Delete the task row. Child rows are left to the store's cascade rules."""


# PUBLIC_INTERFACE
class CommentRepository(ABC):
    """Abstract repository contract for task comments."""

    @abstractmethod
    def insert_comment(self, task_id: int, comment: str, created_at: datetime) -> int:
        """Insert a comment and return its new id. The task id is not checked here."""

    @abstractmethod
    def get_all_by_task(self, task_id: int) -> List[TaskCommentEntity]:
        """Return all comments of a task."""


# PUBLIC_INTERFACE
def get_task_repository(request: Request) -> TaskRepository:
    """
    FastAPI dependency returning a task repository bound to the store handle
    opened by the application lifespan.
    """
    from .db import SQLiteTaskRepository

    return SQLiteTaskRepository(request.app.state.database)


# PUBLIC_INTERFACE
def get_comment_repository(request: Request) -> CommentRepository:
    """FastAPI dependency returning a comment repository bound to the shared store handle."""
    from .db import SQLiteCommentRepository

    return SQLiteCommentRepository(request.app.state.database)
