from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from todo_sync.config import Settings
from todo_sync.db.engine import create_engine_from_settings, create_session_factory, init_db
from todo_sync.db.models import TodoItemRecord, TodoListRecord
from todo_sync.todo.errors import ConstraintViolationError, StorageUnavailableError
from todo_sync.todo.schemas import TodoItem
from todo_sync.todo.store import InMemoryTodoStore, SqlAlchemyTodoStore


def _todo(item_id: str, list_id: uuid.UUID, status: str = "pending") -> TodoItem:
    return TodoItem(id=item_id, content=f"task {item_id}", status=status, todo_list_id=list_id)


async def test_create_list_enforces_context_uniqueness(sql_store: SqlAlchemyTodoStore) -> None:
    ctx = uuid.uuid4()
    await sql_store.create_list(ctx)

    with pytest.raises(ConstraintViolationError):
        await sql_store.create_list(ctx)


async def test_default_context_is_unique_too(sql_store: SqlAlchemyTodoStore) -> None:
    await sql_store.create_list(None)

    with pytest.raises(ConstraintViolationError):
        await sql_store.create_list(None)


async def test_find_returns_none_for_unknown_context(sql_store: SqlAlchemyTodoStore) -> None:
    assert await sql_store.find_list_by_context(uuid.uuid4()) is None
    assert await sql_store.find_list_by_context(None) is None


async def test_save_items_upserts_and_removes_in_one_call(sql_store: SqlAlchemyTodoStore) -> None:
    todo_list = await sql_store.create_list(None)
    await sql_store.save_items(todo_list.id, [_todo("a", todo_list.id), _todo("b", todo_list.id)], [])

    await sql_store.save_items(todo_list.id, [_todo("c", todo_list.id)], ["a"])

    found = await sql_store.find_list_by_context(None)
    assert [t.id for t in found.items] == ["b", "c"]
    assert all(t.todo_list_id == todo_list.id for t in found.items)


async def test_item_ids_are_scoped_per_list(sql_store: SqlAlchemyTodoStore) -> None:
    first = await sql_store.create_list(uuid.uuid4())
    second = await sql_store.create_list(uuid.uuid4())

    await sql_store.save_items(first.id, [_todo("same", first.id)], [])
    await sql_store.save_items(second.id, [_todo("same", second.id, status="completed")], [])

    assert (await sql_store.find_list_by_context(first.context_id)).items[0].status == "pending"
    assert (await sql_store.find_list_by_context(second.context_id)).items[0].status == "completed"


async def test_save_items_for_unknown_list_violates_foreign_key(sql_store: SqlAlchemyTodoStore) -> None:
    missing = uuid.uuid4()

    with pytest.raises(ConstraintViolationError):
        await sql_store.save_items(missing, [_todo("a", missing)], [])


async def test_deleting_list_cascades_to_items(sql_store: SqlAlchemyTodoStore, session_factory) -> None:
    todo_list = await sql_store.create_list(None)
    await sql_store.save_items(todo_list.id, [_todo("a", todo_list.id), _todo("b", todo_list.id)], [])

    async with session_factory() as db:
        record = await db.get(TodoListRecord, todo_list.id)
        await db.delete(record)
        await db.commit()

    async with session_factory() as db:
        remaining = await db.scalar(select(func.count()).select_from(TodoItemRecord))
    assert remaining == 0


async def test_created_at_is_timezone_aware_after_reload(sql_store: SqlAlchemyTodoStore) -> None:
    created = await sql_store.create_list(None)
    found = await sql_store.find_list_by_context(None)

    assert found.created_at.tzinfo is not None
    assert found.created_at == created.created_at


async def test_unreachable_database_raises_storage_unavailable(tmp_path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")
    engine = create_engine_from_settings(
        Settings(DATABASE_URL=f"sqlite+aiosqlite:///{blocker / 'todos.db'}")
    )
    store = SqlAlchemyTodoStore(create_session_factory(engine))
    try:
        with pytest.raises(StorageUnavailableError):
            await store.find_list_by_context(None)
    finally:
        await engine.dispose()


async def test_init_db_creates_data_dir_and_is_idempotent(tmp_path) -> None:
    data_dir = tmp_path / "nested" / "data"
    engine = create_engine_from_settings(Settings(DATA_DIR=data_dir))
    try:
        await init_db(engine)
        await init_db(engine)
        assert (data_dir / "todos.db").exists()
    finally:
        await engine.dispose()


async def test_memory_store_rejects_unknown_list() -> None:
    store = InMemoryTodoStore()
    missing = uuid.uuid4()

    with pytest.raises(ConstraintViolationError):
        await store.save_items(missing, [_todo("a", missing)], [])


async def test_memory_store_rejects_duplicate_context() -> None:
    store = InMemoryTodoStore()
    await store.create_list(None)

    with pytest.raises(ConstraintViolationError):
        await store.create_list(None)
