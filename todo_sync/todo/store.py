"""
Todo 存储层

TodoStore 是同步服务依赖的窄接口：
- find_list_by_context：按上下文查列表，无副作用
- create_list：持久化一个空列表，必须保证同一上下文只建一次（冲突抛 ConstraintViolationError）
- save_items：在单个事务内原子地落库一次对账结果（upsert + remove）

两种实现：
- SqlAlchemyTodoStore：AsyncSession 持久化，每次调用独立会话，退出时必定释放
- InMemoryTodoStore：进程内存储，用于测试与 memory 模式，生命周期与实例相同

驱动异常统一在此翻译为 todo.errors 中的分类，记录日志后向上抛出，不做重试。
"""

import asyncio
import uuid
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Protocol

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from uuid6 import uuid7

from todo_sync.db.models.todo import TodoItemRecord, TodoListRecord, context_key
from todo_sync.todo.errors import ConstraintViolationError, StorageUnavailableError
from todo_sync.todo.schemas import DEFAULT_LIST_NAME, TodoItem, TodoList

log = structlog.get_logger()


class TodoStore(Protocol):
    """Todo 存储协作方接口"""

    async def find_list_by_context(self, context_id: uuid.UUID | None) -> TodoList | None:
        ...

    async def create_list(self, context_id: uuid.UUID | None) -> TodoList:
        ...

    async def save_items(
        self,
        list_id: uuid.UUID,
        to_upsert: Sequence[TodoItem],
        to_remove: Sequence[str],
    ) -> None:
        ...


def _new_list(context_id: uuid.UUID | None) -> TodoList:
    return TodoList(
        id=uuid7(),
        name=DEFAULT_LIST_NAME,
        context_id=context_id,
        created_at=datetime.now(timezone.utc),
    )


@contextmanager
def _translate_errors(op: str, **fields) -> Iterator[None]:
    """SQLAlchemy / IO 异常 → Todo 错误分类"""
    try:
        yield
    except IntegrityError as e:
        log.error("Todo 存储约束冲突", op=op, error=str(e.orig), **fields)
        raise ConstraintViolationError(f"{op} 违反约束: {e.orig}") from e
    except (SQLAlchemyError, OSError) as e:
        log.error("Todo 存储不可用", op=op, error=str(e), **fields)
        raise StorageUnavailableError(f"{op} 失败: {e}") from e


class SqlAlchemyTodoStore:
    """基于 AsyncSession 的 Todo 存储"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_list_by_context(self, context_id: uuid.UUID | None) -> TodoList | None:
        with _translate_errors("find_list_by_context", context_id=str(context_id)):
            async with self._session_factory() as db:
                result = await db.execute(
                    select(TodoListRecord).where(
                        TodoListRecord.context_key == context_key(context_id)
                    )
                )
                record = result.scalar_one_or_none()
                return self._to_schema(record) if record else None

    async def create_list(self, context_id: uuid.UUID | None) -> TodoList:
        todo_list = _new_list(context_id)
        with _translate_errors("create_list", context_id=str(context_id)):
            async with self._session_factory() as db:
                db.add(TodoListRecord(
                    id=todo_list.id,
                    name=todo_list.name,
                    context_id=context_id,
                    context_key=context_key(context_id),
                    created_at=todo_list.created_at,
                ))
                await db.commit()
        return todo_list

    async def save_items(
        self,
        list_id: uuid.UUID,
        to_upsert: Sequence[TodoItem],
        to_remove: Sequence[str],
    ) -> None:
        with _translate_errors("save_items", list_id=str(list_id)):
            async with self._session_factory() as db:
                if to_remove:
                    await db.execute(
                        delete(TodoItemRecord).where(
                            TodoItemRecord.todo_list_id == list_id,
                            TodoItemRecord.id.in_(list(to_remove)),
                        )
                    )

                if to_upsert:
                    result = await db.execute(
                        select(TodoItemRecord).where(TodoItemRecord.todo_list_id == list_id)
                    )
                    existing = {r.id: r for r in result.scalars().all()}
                    next_position = max((r.position for r in existing.values()), default=-1) + 1

                    for item in to_upsert:
                        record = existing.get(item.id)
                        if record is not None:
                            record.content = item.content
                            record.status = item.status
                            record.priority = item.priority
                            continue
                        record = TodoItemRecord(
                            todo_list_id=list_id,
                            id=item.id,
                            content=item.content,
                            status=item.status,
                            priority=item.priority,
                            position=next_position,
                        )
                        db.add(record)
                        existing[item.id] = record
                        next_position += 1

                await db.commit()

    @staticmethod
    def _to_schema(record: TodoListRecord) -> TodoList:
        created_at = record.created_at
        if created_at.tzinfo is None:
            # SQLite 不保存时区，写入时统一为 UTC
            created_at = created_at.replace(tzinfo=timezone.utc)
        return TodoList(
            id=record.id,
            name=record.name,
            context_id=record.context_id,
            created_at=created_at,
            items=[
                TodoItem(
                    id=r.id,
                    content=r.content,
                    status=r.status,
                    priority=r.priority,
                    todo_list_id=r.todo_list_id,
                )
                for r in record.items
            ],
        )


class InMemoryTodoStore:
    """
    进程内 Todo 存储

    所有操作持同一把 asyncio.Lock，首访建表天然串行；
    对外只返回深拷贝，调用方修改快照不会污染存储状态。
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._lists: dict[str, TodoList] = {}

    async def find_list_by_context(self, context_id: uuid.UUID | None) -> TodoList | None:
        async with self._lock:
            todo_list = self._lists.get(context_key(context_id))
            return todo_list.model_copy(deep=True) if todo_list else None

    async def create_list(self, context_id: uuid.UUID | None) -> TodoList:
        key = context_key(context_id)
        async with self._lock:
            if key in self._lists:
                raise ConstraintViolationError(f"上下文 {context_id} 的列表已存在")
            todo_list = _new_list(context_id)
            self._lists[key] = todo_list
            return todo_list.model_copy(deep=True)

    async def save_items(
        self,
        list_id: uuid.UUID,
        to_upsert: Sequence[TodoItem],
        to_remove: Sequence[str],
    ) -> None:
        async with self._lock:
            todo_list = next((t for t in self._lists.values() if t.id == list_id), None)
            if todo_list is None:
                raise ConstraintViolationError(f"列表 {list_id} 不存在")

            removed = set(to_remove)
            merged = {t.id: t for t in todo_list.items if t.id not in removed}
            for item in to_upsert:
                merged[item.id] = item.model_copy(update={"todo_list_id": list_id})
            todo_list.items = list(merged.values())
