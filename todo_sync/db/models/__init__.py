"""
模型统一导出：create_all 需要导入所有模型
"""

from todo_sync.db.models.base import Base
from todo_sync.db.models.todo import TodoItemRecord, TodoListRecord

__all__ = ["Base", "TodoListRecord", "TodoItemRecord"]
