"""
FastAPI 依赖：从 app.state 取出生命周期内构建的服务实例
"""

from fastapi import Request

from todo_sync.todo.service import TodoSyncService
from todo_sync.tools.registry import ToolRegistry


def get_todo_service(request: Request) -> TodoSyncService:
    return request.app.state.todo_service


def get_tool_registry(request: Request) -> ToolRegistry:
    return request.app.state.tool_registry
