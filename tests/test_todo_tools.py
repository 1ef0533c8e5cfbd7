from __future__ import annotations

import asyncio
import json
import uuid

import pytest
from pydantic import BaseModel

from todo_sync.execution.context import get_context_id, reset_context_id, set_context_id
from todo_sync.todo.errors import StorageUnavailableError
from todo_sync.todo.service import TodoSyncService
from todo_sync.todo.store import InMemoryTodoStore
from todo_sync.tools.base import BaseTool, ToolResult
from todo_sync.tools.builtin_tools import create_todo_registry
from todo_sync.tools.builtin_tools.todo_read import TodoReadTool
from todo_sync.tools.registry import ToolRegistry


@pytest.fixture
def registry() -> ToolRegistry:
    return create_todo_registry(TodoSyncService(InMemoryTodoStore()))


async def _call(registry: ToolRegistry, ctx: uuid.UUID | None, name: str, args: dict) -> dict:
    token = set_context_id(ctx)
    try:
        return json.loads(await registry.execute(name, args))
    finally:
        reset_context_id(token)


def test_registry_exposes_todo_schemas(registry: ToolRegistry) -> None:
    assert registry.tool_names == ["todo_write", "todo_read"]
    assert registry.has_tool("todo_read") and not registry.has_tool("todo_delete")

    schemas = {s["function"]["name"]: s["function"] for s in registry.get_all_schemas()}
    assert list(schemas) == ["todo_write", "todo_read"]

    write_schema = schemas["todo_write"]
    assert write_schema["parameters"]["required"] == ["todos"]
    assert "TodoItemInput" in write_schema["parameters"]["$defs"]
    assert "不会被删除" in write_schema["description"]
    assert schemas["todo_read"]["parameters"]["properties"] == {}


def test_registry_rejects_duplicate_names(registry: ToolRegistry) -> None:
    with pytest.raises(ValueError, match="todo_read"):
        registry.register(TodoReadTool(TodoSyncService(InMemoryTodoStore())))


async def test_write_then_read_through_registry(registry: ToolRegistry) -> None:
    ctx = uuid.uuid4()
    written = await _call(registry, ctx, "todo_write", {"todos": [
        {"id": 1, "content": "plan", "status": "in_progress", "priority": "high"},
        {"id": "2", "content": "ship", "status": "pending"},
    ]})
    assert written["status"] == "success"
    assert written["title"] == "2 个进行中"
    assert [t["id"] for t in written["todos"]] == ["1", "2"]
    assert "todo_list_id" not in written["todos"][0]

    read = await _call(registry, ctx, "todo_read", {})
    assert read["title"] == "进行中 1，待处理 1，已完成 0（共 2 项）"
    assert read["list_id"] == written["list_id"]
    assert json.loads(read["snapshot"]) == written["todos"]


async def test_partial_write_keeps_other_items(registry: ToolRegistry) -> None:
    ctx = uuid.uuid4()
    await _call(registry, ctx, "todo_write", {"todos": [
        {"id": "a", "content": "first", "status": "pending"},
        {"id": "b", "content": "second", "status": "pending"},
    ]})

    result = await _call(registry, ctx, "todo_write", {"todos": [
        {"id": "a", "content": "first", "status": "completed"},
    ]})

    assert [(t["id"], t["status"]) for t in result["todos"]] == [("a", "completed"), ("b", "pending")]
    assert result["title"] == "1 个进行中"


async def test_empty_todos_clears_list(registry: ToolRegistry) -> None:
    ctx = uuid.uuid4()
    await _call(registry, ctx, "todo_write", {"todos": [{"id": "a", "content": "x", "status": "pending"}]})

    result = await _call(registry, ctx, "todo_write", {"todos": []})

    assert result["status"] == "success"
    assert result["todos"] == []
    assert (await _call(registry, ctx, "todo_read", {}))["todos"] == []


async def test_tools_follow_context_var(registry: ToolRegistry) -> None:
    ctx_a, ctx_b = uuid.uuid4(), uuid.uuid4()

    async def write_in(ctx: uuid.UUID, item_id: str) -> None:
        await _call(registry, ctx, "todo_write", {"todos": [{"id": item_id, "content": item_id, "status": "pending"}]})

    await asyncio.gather(write_in(ctx_a, "in-a"), write_in(ctx_b, "in-b"))

    read_a = await _call(registry, ctx_a, "todo_read", {})
    read_default = await _call(registry, None, "todo_read", {})

    assert [t["id"] for t in read_a["todos"]] == ["in-a"]
    assert read_default["todos"] == []
    assert get_context_id() is None


@pytest.mark.parametrize(
    "args, message",
    [
        ({}, "参数校验失败: todos"),
        ({"todos": "nope"}, "参数校验失败: todos"),
        ({"todos": [{"id": "", "content": "x", "status": "pending"}]}, "参数校验失败: todos.0.id"),
        ({"todos": [{"id": "x" * 129, "content": "x", "status": "pending"}]}, "参数校验失败: todos.0.id"),
        ({"todos": [
            {"id": "a", "content": "x", "status": "pending"},
            {"id": "a", "content": "y", "status": "pending"},
        ]}, "重复"),
    ],
)
async def test_write_rejects_bad_arguments(registry: ToolRegistry, args: dict, message: str) -> None:
    result = json.loads(await registry.execute("todo_write", args))

    assert result["status"] == "error"
    assert message in result["error"]


async def test_unknown_tool_returns_error(registry: ToolRegistry) -> None:
    result = json.loads(await registry.execute("todo_delete", {}))
    assert result == {"status": "error", "error": "未知工具: todo_delete"}


class _NoParams(BaseModel):
    pass


class _SlowTool(BaseTool):
    name = "slow"
    description = "sleeps"
    params_model = _NoParams
    timeout_ms = 10

    async def run(self, params, context_id) -> ToolResult:
        await asyncio.sleep(1)
        return ToolResult.success()


class _BrokenTool(_SlowTool):
    name = "broken"
    timeout_ms = 1000

    async def run(self, params, context_id) -> ToolResult:
        raise RuntimeError("boom")


async def test_registry_converts_timeouts_and_exceptions() -> None:
    registry = ToolRegistry()
    registry.register(_SlowTool())
    registry.register(_BrokenTool())

    slow = json.loads(await registry.execute("slow", {}))
    broken = json.loads(await registry.execute("broken", {}))

    assert slow["status"] == "error" and "超时" in slow["error"]
    assert broken == {"status": "error", "error": "工具执行异常: boom"}


class _DownService(TodoSyncService):
    async def read(self, context_id=None):
        raise StorageUnavailableError("down")


async def test_storage_failure_becomes_retry_hint() -> None:
    registry = create_todo_registry(_DownService(InMemoryTodoStore()))

    result = json.loads(await registry.execute("todo_read", {}))

    assert result["status"] == "error"
    assert result["error"].startswith("Todo 存储暂不可用")
