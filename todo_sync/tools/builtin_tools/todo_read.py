"""
TodoReadTool — 读取当前上下文的 Todo 列表

执行逻辑：TodoSyncService.read（首次访问时自动建空列表）→ 返回完整快照
"""

import uuid

from pydantic import BaseModel

from todo_sync.todo.service import TodoSyncService
from todo_sync.tools.base import BaseTool, ToolResult


class _EmptyParams(BaseModel):
    """无参数"""


class TodoReadTool(BaseTool):
    """读取当前上下文的 Todo 列表"""

    def __init__(self, service: TodoSyncService):
        self._service = service

    @property
    def name(self) -> str:
        return "todo_read"

    @property
    def description(self) -> str:
        return (
            "读取当前会话的 Todo 任务列表。应主动频繁调用，尤其是：\n"
            "- 对话开始时，查看是否有未完成的待办\n"
            "- 开始新任务前，确认当前优先级\n"
            "- 不确定下一步时，通过列表决策\n"
            "此工具无需任何参数，留空即可。"
        )

    @property
    def params_model(self) -> type[BaseModel]:
        return _EmptyParams

    async def run(self, params: BaseModel, context_id: uuid.UUID | None) -> ToolResult:
        todo_list = await self._service.read(context_id)

        counts = {"in_progress": 0, "pending": 0, "completed": 0}
        for item in todo_list.items:
            if item.status in counts:
                counts[item.status] += 1
        title = (
            f"进行中 {counts['in_progress']}，待处理 {counts['pending']}，"
            f"已完成 {counts['completed']}（共 {len(todo_list.items)} 项）"
        )
        return ToolResult.from_todo_list(todo_list, title=title)
