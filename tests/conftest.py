from __future__ import annotations

import uuid

import pytest

from todo_sync.config import Settings
from todo_sync.db.engine import create_engine_from_settings, create_session_factory, init_db
from todo_sync.todo.service import TodoSyncService
from todo_sync.todo.store import InMemoryTodoStore, SqlAlchemyTodoStore

MEMORY_DB_URL = "sqlite+aiosqlite://"


@pytest.fixture
async def sql_engine():
    engine = create_engine_from_settings(Settings(DATABASE_URL=MEMORY_DB_URL))
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(sql_engine):
    return create_session_factory(sql_engine)


@pytest.fixture
def sql_store(session_factory) -> SqlAlchemyTodoStore:
    return SqlAlchemyTodoStore(session_factory)


@pytest.fixture(params=["memory", "sql"])
async def store(request):
    if request.param == "memory":
        yield InMemoryTodoStore()
        return

    engine = create_engine_from_settings(Settings(DATABASE_URL=MEMORY_DB_URL))
    await init_db(engine)
    yield SqlAlchemyTodoStore(create_session_factory(engine))
    await engine.dispose()


@pytest.fixture
def service(store) -> TodoSyncService:
    return TodoSyncService(store)


@pytest.fixture
def context_id() -> uuid.UUID:
    return uuid.uuid4()
