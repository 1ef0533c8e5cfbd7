"""
Todo 同步服务：按上下文懒建列表 + 候选条目对账

read(context_id)          → 取得（必要时创建）上下文对应的列表
write(context_id, items)  → 对账后落库，返回结果列表

写入语义是非对称的（刻意保留，不要"修正"成全量替换）：
- 空候选集：清空列表全部条目，列表本身保留
- 非空候选集：按 id upsert —— 已有 id 原地覆盖 content / status / priority，新 id 追加；
  候选集中未出现的已有条目 **不会** 被删除
调用方若要全量替换，必须先写一次空列表再写新列表。

并发：服务本身无共享可变状态，每次存储调用独立事务。
并发首访同一上下文时，建表冲突（ConstraintViolationError）会重新查询一次并复用胜出方的列表。
"""

import uuid
from collections.abc import Iterable, Mapping

import structlog
from pydantic import ValidationError

from todo_sync.observability.metrics import TODO_OP_TOTAL
from todo_sync.todo.errors import ConstraintViolationError, InvalidInputError, TodoError
from todo_sync.todo.schemas import TodoItem, TodoItemInput, TodoList
from todo_sync.todo.store import TodoStore

log = structlog.get_logger()


class TodoSyncService:
    """上下文级 Todo 列表同步服务"""

    def __init__(self, store: TodoStore):
        self._store = store

    async def read(self, context_id: uuid.UUID | None = None) -> TodoList:
        """读取上下文对应的列表，不存在时创建空列表"""
        try:
            todo_list = await self._get_or_create(context_id)
        except TodoError as e:
            TODO_OP_TOTAL.labels(op="read", status=e.kind).inc()
            raise
        TODO_OP_TOTAL.labels(op="read", status="success").inc()
        return todo_list

    async def write(
        self,
        context_id: uuid.UUID | None,
        items: Iterable[TodoItemInput | Mapping],
    ) -> TodoList:
        """
        将候选条目对账进上下文对应的列表并落库。

        Args:
            context_id: 上下文标识，None 为默认列表
            items: 候选条目。空集合 = 清空列表；非空 = 按 id upsert，不删除未出现的条目

        Returns:
            对账后的列表快照

        Raises:
            InvalidInputError: 候选条目缺 id / id 为空 / 同批次 id 重复，整批拒绝，不触达存储
            StorageUnavailableError / ConstraintViolationError: 存储失败，整批未提交
        """
        try:
            todo_list = await self._write(context_id, items)
        except TodoError as e:
            TODO_OP_TOTAL.labels(op="write", status=e.kind).inc()
            raise
        TODO_OP_TOTAL.labels(op="write", status="success").inc()
        return todo_list

    async def _write(
        self,
        context_id: uuid.UUID | None,
        items: Iterable[TodoItemInput | Mapping],
    ) -> TodoList:
        candidates = self._validate(items)
        todo_list = await self._get_or_create(context_id)

        # ── 清空规则 ──
        if not candidates:
            removed = [t.id for t in todo_list.items]
            await self._store.save_items(todo_list.id, [], removed)
            log.info(
                "Todo 列表已清空",
                context_id=str(context_id),
                list_id=str(todo_list.id),
                removed=len(removed),
            )
            return todo_list.model_copy(update={"items": []})

        # ── upsert 规则：dict 覆盖保留原插入位置，新 id 追加到末尾 ──
        merged = {t.id: t for t in todo_list.items}
        updated = 0
        upserts: list[TodoItem] = []
        for candidate in candidates:
            attached = TodoItem(
                **candidate.model_dump(),
                todo_list_id=todo_list.id,
            )
            if attached.id in merged:
                updated += 1
            merged[attached.id] = attached
            upserts.append(attached)

        await self._store.save_items(todo_list.id, upserts, [])
        log.info(
            "Todo 列表已更新",
            context_id=str(context_id),
            list_id=str(todo_list.id),
            updated=updated,
            added=len(upserts) - updated,
            total=len(merged),
        )
        return todo_list.model_copy(update={"items": list(merged.values())})

    async def _get_or_create(self, context_id: uuid.UUID | None) -> TodoList:
        todo_list = await self._store.find_list_by_context(context_id)
        if todo_list is not None:
            return todo_list

        try:
            todo_list = await self._store.create_list(context_id)
        except ConstraintViolationError:
            # 并发首访：另一方已建表，重新查一次；仍查不到则原样抛出
            todo_list = await self._store.find_list_by_context(context_id)
            if todo_list is None:
                raise
            log.info("并发建表冲突，复用已有列表", context_id=str(context_id), list_id=str(todo_list.id))
            return todo_list

        log.info("Todo 列表已创建", context_id=str(context_id), list_id=str(todo_list.id))
        return todo_list

    @staticmethod
    def _validate(items: Iterable[TodoItemInput | Mapping]) -> list[TodoItemInput]:
        """校验整批候选条目：任一条不合法即整批拒绝"""
        if items is None:
            raise InvalidInputError("items 不能为 None，清空列表请传空集合")

        candidates: list[TodoItemInput] = []
        seen: set[str] = set()
        for index, raw in enumerate(items):
            try:
                if isinstance(raw, TodoItemInput):
                    candidate = TodoItemInput.model_validate(raw.model_dump())
                else:
                    candidate = TodoItemInput.model_validate(raw)
            except ValidationError as e:
                raise InvalidInputError(f"第 {index} 个条目不合法: {e.errors()[0]['msg']}") from e
            if candidate.id in seen:
                raise InvalidInputError(f"同批次条目 id 重复: {candidate.id}")
            seen.add(candidate.id)
            candidates.append(candidate)
        return candidates
