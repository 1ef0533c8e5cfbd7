"""
工具注册中心：Todo 工具的注册、Schema 导出与执行分发

execute 始终返回 ToolResult JSON 字符串：
- 超时（asyncio.wait_for）与未预期异常都转为 {"status": "error"}，并计入 TOOL_CALL_TOTAL
- CancelledError 照常向上传播
"""

import asyncio

import structlog

from todo_sync.execution.context import get_context_id
from todo_sync.observability.metrics import TOOL_CALL_TOTAL
from todo_sync.tools.base import BaseTool, ToolResult

log = structlog.get_logger()


class ToolRegistry:
    """按名称索引的工具表，注册顺序即 schema 导出顺序"""

    def __init__(self):
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> None:
        if tool.name in self._tools:
            raise ValueError(f"工具重复注册: {tool.name}")
        self._tools[tool.name] = tool
        log.debug("工具已注册", tool=tool.name, timeout_ms=tool.timeout_ms)

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def get_all_schemas(self) -> list[dict]:
        return [tool.schema() for tool in self._tools.values()]

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    async def execute(self, name: str, arguments: dict | None) -> str:
        tool = self._tools.get(name)
        if tool is None:
            return ToolResult.fail(f"未知工具: {name}").to_json()

        context_id = get_context_id()
        try:
            result = await asyncio.wait_for(tool.execute(arguments), timeout=tool.timeout_ms / 1000)
        except asyncio.TimeoutError:
            log.warning("工具执行超时", tool=name, context_id=str(context_id), timeout_ms=tool.timeout_ms)
            result = ToolResult.fail(f"工具 {name} 执行超时（{tool.timeout_ms}ms）")
        except asyncio.CancelledError:
            log.warning("工具执行被取消", tool=name, context_id=str(context_id))
            raise
        except Exception as e:
            log.error("工具执行异常", tool=name, context_id=str(context_id), error=str(e), exc_info=True)
            result = ToolResult.fail(f"工具执行异常: {e}")
        else:
            if result.status == "error":
                log.info("工具返回错误", tool=name, context_id=str(context_id), error=result.error)

        TOOL_CALL_TOTAL.labels(tool_name=name, status=result.status).inc()
        return result.to_json()
