from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ..repositories import CommentRepository, get_comment_repository
from ..schemas import MAX_ID, CommentIn, CommentOut

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


# PUBLIC_INTERFACE
@router.post(
    "/comments",
    response_model=CommentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Comment",
    description="Attach a comment to an existing task.",
    responses={
        201: {"description": "Comment created successfully"},
        404: {"description": "Task not found"},
    },
)
def create_comment(
    payload: CommentIn, repo: CommentRepository = Depends(get_comment_repository)
) -> CommentOut:
    """
    Create a comment. The repository does not look the task up; an unknown
    task id is rejected by the store's foreign key and reported as 404.
    """
    created_at = datetime.now()
    try:
        comment_id = repo.insert_comment(payload.task_id, payload.comment, created_at)
    except sqlite3.IntegrityError:
        logger.info("Rejected comment for unknown task id=%s", payload.task_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return CommentOut(
        id=comment_id,
        task_id=payload.task_id,
        comment=payload.comment,
        created_at=created_at,
    )


# PUBLIC_INTERFACE
@router.get(
    "/comments/{task_id}",
    response_model=List[CommentOut],
    summary="List Task Comments",
    description="Return all comments of a task.",
    responses={
        200: {"description": "List retrieved successfully"},
        400: {"description": "Invalid task ID"},
    },
)
def list_comments(
    task_id: int = Path(..., ge=0, le=MAX_ID), repo: CommentRepository = Depends(get_comment_repository)
) -> List[CommentOut]:
    if task_id <= 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid task ID")
    return [CommentOut(**c) for c in repo.get_all_by_task(task_id)]
