"""
Todo 接口：按上下文读取 / 写入 Todo 列表

PUT 的写入语义与 TodoSyncService.write 一致：
非空 todos 按 id upsert 且不删除未列出的条目，空 todos 清空列表。
"""

import uuid

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from todo_sync.api.deps import get_todo_service
from todo_sync.todo.errors import (
    ConstraintViolationError,
    InvalidInputError,
    StorageUnavailableError,
    TodoError,
)
from todo_sync.todo.schemas import TodoItemInput, TodoList
from todo_sync.todo.service import TodoSyncService

router = APIRouter(prefix="/todos", tags=["Todo"])
log = structlog.get_logger()


class TodoWriteRequest(BaseModel):
    todos: list[TodoItemInput] = Field(description="候选条目；空数组表示清空列表")


def _to_http_error(e: TodoError) -> HTTPException:
    if isinstance(e, InvalidInputError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, ConstraintViolationError):
        return HTTPException(status_code=409, detail="Todo 列表写入冲突，请重试")
    if isinstance(e, StorageUnavailableError):
        return HTTPException(status_code=503, detail="Todo 存储暂不可用，请稍后重试")
    return HTTPException(status_code=500, detail=str(e))


@router.get("", response_model=TodoList)
async def read_todos(
    context_id: uuid.UUID | None = None,
    service: TodoSyncService = Depends(get_todo_service),
):
    """读取上下文对应的列表（不存在时自动创建）"""
    try:
        return await service.read(context_id)
    except TodoError as e:
        log.warning("Todo 读取失败", context_id=str(context_id), kind=e.kind)
        raise _to_http_error(e) from e


@router.put("", response_model=TodoList)
async def write_todos(
    body: TodoWriteRequest,
    context_id: uuid.UUID | None = None,
    service: TodoSyncService = Depends(get_todo_service),
):
    """写入上下文对应的列表并返回对账结果"""
    try:
        return await service.write(context_id, body.todos)
    except TodoError as e:
        log.warning("Todo 写入失败", context_id=str(context_id), kind=e.kind)
        raise _to_http_error(e) from e
