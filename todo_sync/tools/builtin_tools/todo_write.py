"""
TodoWriteTool — 写入当前上下文的 Todo 列表

执行逻辑：接收 todos 列表 → TodoSyncService.write 对账落库 → 返回状态快照
注意写入是 upsert 而非全量替换：未出现在 todos 中的已有条目会保留；传空列表才会清空。
"""

import uuid

from pydantic import BaseModel, Field

from todo_sync.todo.schemas import TodoItemInput
from todo_sync.todo.service import TodoSyncService
from todo_sync.tools.base import BaseTool, ToolResult


class _Params(BaseModel):
    todos: list[TodoItemInput] = Field(
        description="要写入的条目。按 id upsert，不删除未列出的条目；传空列表清空整个列表"
    )


class TodoWriteTool(BaseTool):
    """创建/更新当前上下文的 Todo 列表"""

    def __init__(self, service: TodoSyncService):
        self._service = service

    @property
    def name(self) -> str:
        return "todo_write"

    @property
    def description(self) -> str:
        return (
            "创建或更新当前会话的 Todo 任务列表。\n"
            "写入规则：\n"
            "1. 按 id 合并：已存在的 id 覆盖 content/status/priority，新 id 追加\n"
            "2. 未出现在 todos 中的已有条目**不会被删除**\n"
            "3. 传空数组 todos=[] 会清空整个列表；如需整体替换，先清空再写入\n"
            "参数：todos — 任务条目（id, content, status, priority）"
        )

    @property
    def params_model(self) -> type[BaseModel]:
        return _Params

    async def run(self, params: _Params, context_id: uuid.UUID | None) -> ToolResult:
        todo_list = await self._service.write(context_id, params.todos)
        return ToolResult.from_todo_list(todo_list, title=f"{todo_list.active_count} 个进行中")
