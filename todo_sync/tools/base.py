"""
Todo 工具基类 + 标准化结果

调用链：ToolRegistry.execute → BaseTool.execute → 子类 run
- execute 负责按 params_model 校验参数、取当前上下文 context_id、
  把 TodoError 翻译为错误结果（参数问题与存储问题分开提示，便于调用方决定是否重试）
- run 只处理已校验的参数，返回 ToolResult

结果 JSON：
- 成功: {"status": "success", "title": ..., "list_id": ..., "todos": [...], "snapshot": "..."}
- 失败: {"status": "error", "error": "..."}
"""

import json
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ValidationError

from todo_sync.config import get_settings
from todo_sync.execution.context import get_context_id
from todo_sync.todo.errors import InvalidInputError, TodoError
from todo_sync.todo.schemas import TodoList


@dataclass
class ToolResult:
    """工具执行标准化结果"""

    status: str  # "success" | "error"
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    def to_json(self) -> str:
        if self.status == "error":
            payload = {"status": "error", "error": self.error}
        else:
            payload = {"status": "success", **self.data}
        return json.dumps(payload, ensure_ascii=False)

    @classmethod
    def success(cls, **data: Any) -> "ToolResult":
        return cls(status="success", data=data)

    @classmethod
    def fail(cls, error: str) -> "ToolResult":
        return cls(status="error", error=error)

    @classmethod
    def from_todo_list(cls, todo_list: TodoList, title: str) -> "ToolResult":
        """列表快照 → 成功结果。条目不带 todo_list_id，所属列表只在顶层给出一次"""
        todos = [t.model_dump(mode="json", exclude={"todo_list_id"}) for t in todo_list.items]
        return cls.success(
            title=title,
            list_id=str(todo_list.id),
            todos=todos,
            snapshot=json.dumps(todos, ensure_ascii=False, indent=2),
        )


class BaseTool(ABC):
    """Todo 工具抽象基类"""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """工具描述（给 LLM 看），写清楚读写语义"""
        ...

    @property
    @abstractmethod
    def params_model(self) -> type[BaseModel]:
        ...

    @abstractmethod
    async def run(self, params: BaseModel, context_id: uuid.UUID | None) -> ToolResult:
        """在指定上下文上执行，params 已通过 params_model 校验"""
        ...

    @property
    def timeout_ms(self) -> int:
        return get_settings().DEFAULT_TOOL_TIMEOUT_MS

    async def execute(self, args: dict | None) -> ToolResult:
        try:
            params = self.params_model.model_validate(args or {})
        except ValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(p) for p in first["loc"]) or "参数"
            return ToolResult.fail(f"参数校验失败: {loc} {first['msg']}")

        try:
            return await self.run(params, get_context_id())
        except InvalidInputError as e:
            return ToolResult.fail(f"参数校验失败: {e}")
        except TodoError as e:
            return ToolResult.fail(f"Todo 存储暂不可用，请稍后重试: {e}")

    def schema(self) -> dict:
        """OpenAI function calling 格式的 schema；条目模型以 $defs 引用出现，需一并带上"""
        json_schema = self.params_model.model_json_schema()
        parameters = {
            "type": "object",
            "properties": {
                key: {k: v for k, v in prop.items() if k != "title"}
                for key, prop in json_schema.get("properties", {}).items()
            },
            "required": json_schema.get("required", []),
        }
        if "$defs" in json_schema:
            parameters["$defs"] = json_schema["$defs"]

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }
