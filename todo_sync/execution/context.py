"""
Todo 上下文 ContextVar

- ContextVar 保证 asyncio 并发隔离
- set_context_id 返回 Token，finally 块用 reset_context_id 精确还原
- 未设置时为 None，工具读写的是默认列表
"""

import uuid
from contextvars import ContextVar, Token

_context_var: ContextVar[uuid.UUID | None] = ContextVar("todo_context_id", default=None)


def get_context_id() -> uuid.UUID | None:
    """读取当前 async 上下文的 context_id"""
    return _context_var.get()


def set_context_id(context_id: uuid.UUID | None) -> Token:
    """设置 context_id，返回还原用的 Token"""
    return _context_var.set(context_id)


def reset_context_id(token: Token) -> None:
    """精确还原到设置前的值（与 Token 配套使用）"""
    _context_var.reset(token)
