"""
内置工具集：把 Todo 工具注册到 ToolRegistry

使用方式：
    from todo_sync.tools.builtin_tools import create_todo_registry
    registry = create_todo_registry(service)
"""

from todo_sync.todo.service import TodoSyncService
from todo_sync.tools.builtin_tools.todo_read import TodoReadTool
from todo_sync.tools.builtin_tools.todo_write import TodoWriteTool
from todo_sync.tools.registry import ToolRegistry


def create_todo_registry(service: TodoSyncService) -> ToolRegistry:
    """创建并注册 Todo 工具的 Registry 实例"""
    registry = ToolRegistry()
    registry.register(TodoWriteTool(service))
    registry.register(TodoReadTool(service))
    return registry
