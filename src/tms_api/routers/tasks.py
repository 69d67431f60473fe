from __future__ import annotations

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Response, status

from ..repositories import (
    CommentRepository,
    TaskRepository,
    get_comment_repository,
    get_task_repository,
)
from ..schemas import MAX_ID, TaskIn, TaskOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tasks"])


# PUBLIC_INTERFACE
@router.post(
    "/tasks",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Insert a new task, then each of its items, and return the stored task.",
    responses={
        201: {"description": "Task created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_task(payload: TaskIn, repo: TaskRepository = Depends(get_task_repository)) -> TaskOut:
    """
    Create a task. Timestamps are set server-side and the task starts unassigned.
    """
    now = datetime.now()
    task_id = repo.insert(
        title=payload.title,
        description=payload.description,
        completed=payload.completed,
        created_at=now,
        updated_at=now,
    )
    for item in payload.items:
        repo.insert_item(task_id, item)
    logger.info("Created task id=%s items=%d", task_id, len(payload.items))
    return TaskOut(**repo.get_by_id(task_id))


# PUBLIC_INTERFACE
@router.get(
    "/tasks",
    response_model=List[TaskOut],
    summary="List Tasks",
    description="Return every task with its items.",
    responses={200: {"description": "List retrieved successfully"}},
)
def list_tasks(repo: TaskRepository = Depends(get_task_repository)) -> List[TaskOut]:
    return [TaskOut(**task) for task in repo.get_all()]


# PUBLIC_INTERFACE
@router.get(
    "/tasks/{task_id}",
    response_model=TaskOut,
    summary="Get Task",
    description="Get a single task by ID, including its items and comment texts.",
    responses={
        200: {"description": "Task found"},
        404: {"description": "Task not found"},
    },
)
def get_task(
    task_id: int = Path(..., ge=0, le=MAX_ID),
    repo: TaskRepository = Depends(get_task_repository),
    comments: CommentRepository = Depends(get_comment_repository),
) -> TaskOut:
    """
    Retrieve a task. The comments field is filled from the comment repository.
    """
    task = repo.get_by_id(task_id)
    task["comments"] = [c["comment"] for c in comments.get_all_by_task(task_id)]
    return TaskOut(**task)


# PUBLIC_INTERFACE
@router.put(
    "/tasks/{task_id}",
    response_model=TaskOut,
    summary="Replace Task",
    description=(
        "Replace title, description, completion flag and the whole item list of an "
        "existing task. Items not present in the body are removed."
    ),
    responses={
        200: {"description": "Task updated"},
        404: {"description": "Task not found"},
    },
)
def update_task(
    task_id: int = Path(..., ge=0, le=MAX_ID),
    payload: TaskIn = Body(...),
    repo: TaskRepository = Depends(get_task_repository),
) -> TaskOut:
    repo.get_by_id(task_id)
    repo.update(
        task_id,
        title=payload.title,
        description=payload.description,
        completed=payload.completed,
        items=payload.items,
    )
    logger.info("Updated task id=%s", task_id)
    return TaskOut(**repo.get_by_id(task_id))


# PUBLIC_INTERFACE
@router.delete(
    "/tasks/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    description="Delete a task by ID. Its items and comments are removed with it.",
    responses={
        204: {"description": "Task deleted"},
        404: {"description": "Task not found"},
    },
)
def delete_task(
    task_id: int = Path(..., ge=0, le=MAX_ID), repo: TaskRepository = Depends(get_task_repository)
) -> Response:
    """
    Delete a task. Returns 204 on success, 404 if not found.
    """
    repo.get_by_id(task_id)
    repo.delete(task_id)
    logger.info("Deleted task id=%s", task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.patch(
    "/tasks/{task_id}/assign/{user_id}",
    response_model=TaskOut,
    summary="Assign Task",
    description="Assign a user to a task, or unassign it with user 0.",
    responses={
        200: {"description": "Task assigned"},
        404: {"description": "Task not found"},
    },
)
def assign_task(
    task_id: int = Path(..., ge=0, le=MAX_ID),
    user_id: int = Path(..., ge=0, le=MAX_ID),
    repo: TaskRepository = Depends(get_task_repository),
) -> TaskOut:
    """
    Set the assignee of a task; user 0 unassigns it. The update timestamp is
    computed here and handed to the repository.
    """
    repo.get_by_id(task_id)
    repo.assign_user(task_id, user_id, datetime.now())
    logger.info("Assigned task id=%s to user id=%s", task_id, user_id)
    return TaskOut(**repo.get_by_id(task_id))


# PUBLIC_INTERFACE
@router.get(
    "/users/{user_id}/tasks/assigned",
    response_model=List[TaskOut],
    summary="List Assigned Tasks",
    description="Return the tasks assigned to a user.",
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"description": "Invalid user ID"},
    },
)
def list_assigned_tasks(
    user_id: int = Path(..., ge=0, le=MAX_ID), repo: TaskRepository = Depends(get_task_repository)
) -> List[TaskOut]:
    if user_id <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid user ID")
    return [TaskOut(**task) for task in repo.get_by_assigned_user(user_id)]
