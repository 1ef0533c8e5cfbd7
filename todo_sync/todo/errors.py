"""
Todo 错误分类

- StorageUnavailableError：存储不可达 / 事务失败（可重试）
- ConstraintViolationError：唯一性或外键约束冲突，如并发创建同一上下文的列表（可重试）
- InvalidInputError：候选条目不合法，如缺少 id、同批次 id 重复（调用方 bug，不可重试）

核心层不做任何内部重试，统一向上抛出。
"""


class TodoError(Exception):
    """Todo 模块异常基类"""

    kind = "todo_error"
    retryable = False


class StorageUnavailableError(TodoError):
    kind = "storage_unavailable"
    retryable = True


class ConstraintViolationError(TodoError):
    kind = "constraint_violation"
    retryable = True


class InvalidInputError(TodoError, ValueError):
    kind = "invalid_input"
