"""
健康检查接口：探活 + 存储状态
"""

import structlog
from fastapi import APIRouter, Request
from sqlalchemy import text

router = APIRouter(tags=["健康检查"])
log = structlog.get_logger()


@router.get("/health")
async def health_check(request: Request):
    """健康检查：校验数据库连接（memory 模式下无数据库）"""
    status = {"status": "ok", "store": request.app.state.settings.TODO_STORE, "database": "ok"}

    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        status["database"] = "n/a"
        return status

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        status["database"] = f"error: {e}"
        status["status"] = "degraded"
        log.error("数据库健康检查失败", error=str(e))

    return status
