"""
工具系统：BaseTool 抽象基类 + ToolRegistry 注册中心 + 内置 Todo 工具
"""

from todo_sync.tools.base import BaseTool, ToolResult
from todo_sync.tools.registry import ToolRegistry

__all__ = ["BaseTool", "ToolResult", "ToolRegistry"]
