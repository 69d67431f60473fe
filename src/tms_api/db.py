from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional, Sequence

from .errors import DecodeError, NotFoundError
from .grouping import group_rows, unique_by_key
from .models import TaskCommentEntity, TaskEntity
from .repositories import CommentRepository, TaskRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TaskCols:
    table: str = "task"
    id: str = "id"
    title: str = "title"
    description: str = "description"
    completed: str = "completed"
    created_at: str = "created_at"
    updated_at: str = "updated_at"
    assigned_user_id: str = "assigned_user_id"


@dataclass(frozen=True)
class _ItemCols:
    table: str = "task_item"
    id: str = "id"
    task_id: str = "task_id"
    item: str = "item"


@dataclass(frozen=True)
class _CommentCols:
    table: str = "task_comment"
    id: str = "id"
    task_id: str = "task_id"
    comment: str = "comment"
    created_at: str = "created_at"


_T = _TaskCols()
_I = _ItemCols()
_C = _CommentCols()

# Parent columns repeat on every joined row; the item column is NULL for tasks without items.
_TASK_WITH_ITEMS_SELECT = f"""
    SELECT t.{_T.id}, t.{_T.title}, t.{_T.description}, t.{_T.completed},
        t.{_T.created_at}, t.{_T.updated_at}, t.{_T.assigned_user_id}, ti.{_I.item}
    FROM {_T.table} t
    LEFT JOIN {_I.table} ti ON t.{_T.id} = ti.{_I.task_id}
"""
_TASK_WITH_ITEMS_ORDER = f"ORDER BY t.{_T.id}, ti.{_I.id}"


def _parse_dt(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _task_from_row(row: sqlite3.Row) -> TaskEntity:
    description = row[_T.description]
    return {
        "id": int(row[_T.id]),
        "title": str(row[_T.title]),
        "description": str(description) if description is not None else "",
        "completed": bool(row[_T.completed]),
        "created_at": _parse_dt(row[_T.created_at]),
        "updated_at": _parse_dt(row[_T.updated_at]),
        "assigned_user_id": int(row[_T.assigned_user_id]),
        "items": [],
        "comments": [],
    }


def _item_from_row(row: sqlite3.Row) -> Optional[str]:
    item = row[_I.item]
    return None if item is None else str(item)


def _comment_from_row(row: sqlite3.Row) -> TaskCommentEntity:
    try:
        return {
            "id": int(row[_C.id]),
            "task_id": int(row[_C.task_id]),
            "comment": str(row[_C.comment]),
            "created_at": _parse_dt(row[_C.created_at]),
        }
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise DecodeError(f"cannot decode comment row: {exc}") from exc


class Database:
    """
    Store handle shared by the repositories.

    Owns the SQLite file path and the schema. Each call to `connect` opens a
    short-lived connection with foreign keys enabled; the block commits on
    success and is rolled back when it raises. The owning application calls
    `open` at startup and `close` at shutdown.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._is_open = False

    @property
    def path(self) -> str:
        return self._db_path

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        os.makedirs(os.path.dirname(self._db_path) or ".", exist_ok=True)
        self._is_open = True
        try:
            self._init_db()
        except sqlite3.Error:
            self._is_open = False
            raise
        logger.info("Database ready path=%s", self._db_path)

    def close(self) -> None:
        self._is_open = False
        logger.info("Database closed path=%s", self._db_path)

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        if not self._is_open:
            raise RuntimeError("database is not open")
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self.connect() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_T.table} (
                    {_T.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_T.title} TEXT NOT NULL,
                    {_T.description} TEXT NOT NULL DEFAULT '',
                    {_T.completed} INTEGER NOT NULL DEFAULT 0,
                    {_T.created_at} TEXT NOT NULL,
                    {_T.updated_at} TEXT NOT NULL,
                    {_T.assigned_user_id} INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_I.table} (
                    {_I.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_I.task_id} INTEGER NOT NULL REFERENCES {_T.table}({_T.id}) ON DELETE CASCADE,
                    {_I.item} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_C.table} (
                    {_C.id} INTEGER PRIMARY KEY AUTOINCREMENT,
                    {_C.task_id} INTEGER NOT NULL REFERENCES {_T.table}({_T.id}) ON DELETE CASCADE,
                    {_C.comment} TEXT NOT NULL,
                    {_C.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_T.table}_{_T.assigned_user_id} "
                f"ON {_T.table}({_T.assigned_user_id})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_I.table}_{_I.task_id} ON {_I.table}({_I.task_id})"
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_C.table}_{_C.task_id} ON {_C.table}({_C.task_id})"
            )


class SQLiteTaskRepository(TaskRepository):
    """
    SQLite repository for tasks and their items.

    Multi-row reads go through `group_rows`, so each task comes back once
    with its items in insertion order.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    def _select_grouped(self, where_sql: str = "", params: Sequence[object] = ()) -> List[TaskEntity]:
        with self._db.connect() as conn:
            cur = conn.execute(
                f"{_TASK_WITH_ITEMS_SELECT} {where_sql} {_TASK_WITH_ITEMS_ORDER}", tuple(params)
            )
            return group_rows(cur, parent=_task_from_row, child=_item_from_row, field="items")

    def get_all(self) -> List[TaskEntity]:
        return self._select_grouped()

    def get_by_id(self, task_id: int) -> TaskEntity:
        tasks = self._select_grouped(f"WHERE t.{_T.id} = ?", (task_id,))
        if not tasks:
            raise NotFoundError("Task", task_id)
        return tasks[0]

    def get_by_assigned_user(self, user_id: int) -> List[TaskEntity]:
        return self._select_grouped(f"WHERE t.{_T.assigned_user_id} = ?", (user_id,))

    def insert(
        self,
        title: str,
        description: str,
        completed: bool,
        created_at: datetime,
        updated_at: datetime,
    ) -> int:
        with self._db.connect() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_T.table} ({_T.title}, {_T.description}, {_T.completed},
                    {_T.created_at}, {_T.updated_at})
                VALUES (?, ?, ?, ?, ?)
                """,
                (title, description, 1 if completed else 0, created_at.isoformat(), updated_at.isoformat()),
            )
            new_id = cur.lastrowid
        assert new_id is not None
        logger.debug("Inserted task id=%s", new_id)
        return int(new_id)

    def insert_item(self, task_id: int, item: str) -> None:
        with self._db.connect() as conn:
            conn.execute(
                f"INSERT INTO {_I.table} ({_I.task_id}, {_I.item}) VALUES (?, ?)",
                (task_id, item),
            )

    def update(
        self,
        task_id: int,
        title: str,
        description: str,
        completed: bool,
        items: Sequence[str],
    ) -> None:
        updated_at = datetime.now().isoformat()
        # One connection means one transaction: the item rewrite is never observed half-done.
        with self._db.connect() as conn:
            conn.execute(
                f"""
                UPDATE {_T.table}
                SET {_T.title} = ?, {_T.description} = ?, {_T.completed} = ?, {_T.updated_at} = ?
                WHERE {_T.id} = ?
                """,
                (title, description, 1 if completed else 0, updated_at, task_id),
            )
            conn.execute(f"DELETE FROM {_I.table} WHERE {_I.task_id} = ?", (task_id,))
            conn.executemany(
                f"INSERT INTO {_I.table} ({_I.task_id}, {_I.item}) VALUES (?, ?)",
                [(task_id, item) for item in items],
            )
        logger.debug("Updated task id=%s items=%d", task_id, len(items))

    def assign_user(self, task_id: int, user_id: int, updated_at: datetime) -> None:
        with self._db.connect() as conn:
            conn.execute(
                f"""
                UPDATE {_T.table}
                SET {_T.assigned_user_id} = ?, {_T.updated_at} = ?
                WHERE {_T.id} = ?
                """,
                (user_id, updated_at.isoformat(), task_id),
            )
        logger.debug("Assigned task id=%s to user id=%s", task_id, user_id)

    def delete(self, task_id: int) -> None:
        with self._db.connect() as conn:
            conn.execute(f"DELETE FROM {_T.table} WHERE {_T.id} = ?", (task_id,))
        logger.debug("Deleted task id=%s", task_id)


class SQLiteCommentRepository(CommentRepository):
    """SQLite repository for task comments."""

    def __init__(self, database: Database) -> None:
        self._db = database

    def insert_comment(self, task_id: int, comment: str, created_at: datetime) -> int:
        with self._db.connect() as conn:
            cur = conn.execute(
                f"""
                INSERT INTO {_C.table} ({_C.task_id}, {_C.comment}, {_C.created_at})
                VALUES (?, ?, ?)
                """,
                (task_id, comment, created_at.isoformat()),
            )
            new_id = cur.lastrowid
        assert new_id is not None
        logger.debug("Inserted comment id=%s task id=%s", new_id, task_id)
        return int(new_id)

    def get_all_by_task(self, task_id: int) -> List[TaskCommentEntity]:
        with self._db.connect() as conn:
            rows = conn.execute(
                f"""
                SELECT tc.{_C.id}, tc.{_C.task_id}, tc.{_C.comment}, tc.{_C.created_at}
                FROM {_C.table} tc
                WHERE tc.{_C.task_id} = ?
                ORDER BY tc.{_C.id}
                """,
                (task_id,),
            ).fetchall()

        return unique_by_key(_comment_from_row(row) for row in rows)
