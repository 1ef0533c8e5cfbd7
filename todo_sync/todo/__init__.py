"""
Todo 模块：上下文级任务列表同步

提供 TodoSyncService（懒建列表 + upsert/清空对账）、TodoStore 接口及其 SQLAlchemy / 内存实现，
供 todo_read / todo_write 工具和 /todos 接口使用。
"""

from todo_sync.todo.errors import (
    ConstraintViolationError,
    InvalidInputError,
    StorageUnavailableError,
    TodoError,
)
from todo_sync.todo.schemas import TodoItem, TodoItemInput, TodoList
from todo_sync.todo.service import TodoSyncService
from todo_sync.todo.store import InMemoryTodoStore, SqlAlchemyTodoStore, TodoStore

__all__ = [
    "TodoItem",
    "TodoItemInput",
    "TodoList",
    "TodoSyncService",
    "TodoStore",
    "SqlAlchemyTodoStore",
    "InMemoryTodoStore",
    "TodoError",
    "StorageUnavailableError",
    "ConstraintViolationError",
    "InvalidInputError",
]
