"""
FastAPI 应用主入口

应用由 create_app 工厂构建，import 本模块不会读取配置或创建应用：
    uvicorn todo_sync.main:create_app --factory
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from prometheus_client import make_asgi_app

from todo_sync.api.health import router as health_router
from todo_sync.api.todos import router as todos_router
from todo_sync.api.tools import router as tools_router
from todo_sync.config import Settings, get_settings
from todo_sync.db.engine import create_engine_from_settings, create_session_factory, init_db
from todo_sync.observability.logging_config import setup_logging
from todo_sync.observability.middleware import ObservabilityMiddleware
from todo_sync.todo.service import TodoSyncService
from todo_sync.todo.store import InMemoryTodoStore, SqlAlchemyTodoStore, TodoStore
from todo_sync.tools.builtin_tools import create_todo_registry

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(application: FastAPI):
    """应用生命周期：启动时建库建表并装配服务，关闭时释放连接池"""
    settings: Settings = application.state.settings
    log.info("应用启动", env=settings.ENV, app=settings.APP_NAME, store=settings.TODO_STORE)

    engine = None
    store: TodoStore
    if settings.TODO_STORE == "memory":
        store = InMemoryTodoStore()
    else:
        # Fail Fast：库文件目录不可写或数据库不可达时拒绝启动
        engine = create_engine_from_settings(settings)
        await init_db(engine)
        store = SqlAlchemyTodoStore(create_session_factory(engine))

    service = TodoSyncService(store)
    registry = create_todo_registry(service)
    application.state.engine = engine
    application.state.todo_service = service
    application.state.tool_registry = registry
    log.info("Todo 工具已装配", tools=registry.tool_names)

    yield

    if engine is not None:
        await engine.dispose()
    log.info("应用关闭，资源已释放")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    application = FastAPI(
        title=settings.APP_NAME,
        version="0.1.0",
        lifespan=lifespan,
    )
    application.state.settings = settings

    application.add_middleware(ObservabilityMiddleware)

    # ── Prometheus 指标端点 ──
    application.mount("/metrics", make_asgi_app())

    application.include_router(health_router)
    application.include_router(todos_router)
    application.include_router(tools_router)
    return application


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "todo_sync.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=get_settings().APP_PORT,
        reload=True,
    )
