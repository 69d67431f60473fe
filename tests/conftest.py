from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from tms_api.db import Database, SQLiteCommentRepository, SQLiteTaskRepository
from tms_api.main import create_app
from tms_api.settings import Settings


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh database file per test."""
    return Settings(
        env="development",
        port=4000,
        db_path=str(tmp_path / "tms.db"),
        cors_allow_origins=["*"],
        log_level="INFO",
    )


@pytest.fixture()
def database(settings: Settings) -> Iterator[Database]:
    db = Database(settings.db_path)
    db.open()
    yield db
    db.close()


@pytest.fixture()
def task_repo(database: Database) -> SQLiteTaskRepository:
    return SQLiteTaskRepository(database)


@pytest.fixture()
def comment_repo(database: Database) -> SQLiteCommentRepository:
    return SQLiteCommentRepository(database)


@pytest.fixture()
def client(settings: Settings) -> Iterator[TestClient]:
    # Entering the client runs the app lifespan, which opens the database.
    with TestClient(create_app(settings)) as c:
        yield c
