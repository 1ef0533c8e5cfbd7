"""
Todo 数据模型

TodoItemInput 是调用方提交的候选条目（工具参数 / API 请求体），
TodoItem 在其基础上多出所属列表引用 todo_list_id —— 只由同步服务在挂载时写入，
调用方传入的值一律被覆盖。
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from todo_sync.db.models.todo import ITEM_ID_MAX_LENGTH

TodoStatus = Literal["pending", "in_progress", "completed", "cancelled"]
TodoPriority = Literal["high", "medium", "low"]

DEFAULT_LIST_NAME = "Default"


class TodoItemInput(BaseModel):
    """单个 Todo 条目（调用方视角）"""

    id: str = Field(
        max_length=ITEM_ID_MAX_LENGTH, description="条目标识，调用方生成，同一列表内唯一"
    )
    content: str = Field(description="条目内容")
    status: TodoStatus
    priority: TodoPriority = "medium"

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id_to_str(cls, v: object) -> str:
        """LLM 有时传整数 id（1, 2, 3），统一转为字符串；空白 id 视为非法"""
        if v is None:
            raise ValueError("id 不能为空")
        v = str(v).strip()
        if not v:
            raise ValueError("id 不能为空")
        return v


class TodoItem(TodoItemInput):
    """已挂载到列表的 Todo 条目"""

    todo_list_id: uuid.UUID | None = None


class TodoList(BaseModel):
    """某个上下文下的 Todo 列表快照"""

    id: uuid.UUID
    name: str = DEFAULT_LIST_NAME
    context_id: uuid.UUID | None = None
    created_at: datetime
    items: list[TodoItem] = Field(default_factory=list)

    def find(self, item_id: str) -> TodoItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def active_count(self) -> int:
        """未完成（非 completed / cancelled）条目数"""
        return sum(1 for t in self.items if t.status not in ("completed", "cancelled"))
