"""
Prometheus 指标定义

所有指标统一在此文件定义，中间件和业务代码按需引用。
"""

from prometheus_client import Counter, Histogram

# ── 请求级指标 ──

REQUEST_TOTAL = Counter(
    "todo_request_total",
    "HTTP 请求总数",
    ["method", "endpoint", "status_code"],  # endpoint 为路由模板，未匹配记为 unmatched
)

REQUEST_DURATION = Histogram(
    "todo_request_duration_ms",
    "HTTP 请求耗时（毫秒）",
    ["method", "endpoint"],
    buckets=[5, 10, 25, 50, 100, 200, 500, 1000, 2000],
)

# ── Todo 同步指标 ──

TODO_OP_TOTAL = Counter(
    "todo_sync_op_total",
    "Todo 读写操作总数",
    ["op", "status"],  # op: read/write；status: success/storage_unavailable/constraint_violation/invalid_input
)

# ── 工具指标 ──

TOOL_CALL_TOTAL = Counter(
    "todo_tool_call_total",
    "工具调用总数",
    ["tool_name", "status"],  # status: success/error
)
