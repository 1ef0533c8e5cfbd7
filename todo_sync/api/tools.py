"""
工具接口：供 Agent 宿主列出并调用 Todo 工具

调用时 context_id 取自查询参数，执行期间写入 ContextVar，工具据此定位列表；
执行结束（含异常）后还原。工具自身的失败以 {"status": "error"} 结果返回，HTTP 状态仍为 200。
"""

import uuid
from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import Response

from todo_sync.api.deps import get_tool_registry
from todo_sync.execution.context import reset_context_id, set_context_id
from todo_sync.tools.registry import ToolRegistry

router = APIRouter(prefix="/tools", tags=["工具"])
log = structlog.get_logger()


@router.get("")
async def list_tools(registry: ToolRegistry = Depends(get_tool_registry)):
    """全部工具的 function calling schema"""
    return {"tools": registry.get_all_schemas()}


@router.post("/{name}")
async def call_tool(
    name: str,
    arguments: dict[str, Any] | None = Body(default=None),
    context_id: uuid.UUID | None = None,
    registry: ToolRegistry = Depends(get_tool_registry),
):
    """在 context_id 对应的上下文中执行工具，请求体即工具参数"""
    if not registry.has_tool(name):
        raise HTTPException(status_code=404, detail=f"未知工具: {name}")

    token = set_context_id(context_id)
    try:
        result = await registry.execute(name, arguments or {})
    finally:
        reset_context_id(token)

    log.info("工具调用完成", tool=name, context_id=str(context_id))
    return Response(content=result, media_type="application/json")
