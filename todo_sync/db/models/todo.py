"""
Todo 持久化模型：TodoListRecord + TodoItemRecord

设计说明：
- 每个上下文一行列表记录。context_id 可为空（默认列表），
  唯一性落在非空的 context_key 上（默认列表用空串），保证并发首访时只有一方建表成功
- 条目主键为 (todo_list_id, id)：id 由调用方生成，只要求在所属列表内唯一
- 条目外键 ON DELETE CASCADE，删除列表时级联删除全部条目
- position 记录插入顺序，读取时按其排序
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from todo_sync.db.models.base import Base

DEFAULT_CONTEXT_KEY = ""
ITEM_ID_MAX_LENGTH = 128


def context_key(context_id: uuid.UUID | None) -> str:
    """上下文标识 → 唯一键（默认列表为空串）"""
    return str(context_id) if context_id is not None else DEFAULT_CONTEXT_KEY


class TodoListRecord(Base):
    """Todo 列表"""

    __tablename__ = "todo_lists"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), default="Default", comment="列表名称")
    context_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, nullable=True, index=True, comment="所属上下文（会话 / 工作区），为空即默认列表"
    )
    context_key: Mapped[str] = mapped_column(
        String(36), unique=True, nullable=False, comment="上下文唯一键"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, comment="创建时间"
    )

    items: Mapped[list["TodoItemRecord"]] = relationship(
        back_populates="todo_list",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TodoItemRecord.position",
        lazy="selectin",
    )


class TodoItemRecord(Base):
    """Todo 条目"""

    __tablename__ = "todo_items"

    todo_list_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("todo_lists.id", ondelete="CASCADE"),
        primary_key=True,
        comment="所属列表",
    )
    id: Mapped[str] = mapped_column(
        String(ITEM_ID_MAX_LENGTH), primary_key=True, comment="条目ID（调用方生成）"
    )
    content: Mapped[str] = mapped_column(Text, default="", comment="条目内容")
    status: Mapped[str] = mapped_column(
        String(20), comment="状态: pending / in_progress / completed / cancelled"
    )
    priority: Mapped[str] = mapped_column(String(10), comment="优先级: high / medium / low")
    position: Mapped[int] = mapped_column(Integer, default=0, comment="插入顺序")

    todo_list: Mapped["TodoListRecord"] = relationship(back_populates="items")
