"""
数据库引擎：AsyncEngine 创建 + AsyncSession 工厂

引擎由调用方按 Settings 显式构建并注入存储层，不在 import 时创建全局单例。
SQLite 连接默认不检查外键，这里在 connect 事件里打开 foreign_keys，保证级联删除生效。
"""

from pathlib import Path

import structlog
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from todo_sync.config import Settings, get_settings
from todo_sync.db.models import Base

log = structlog.get_logger()


def _is_memory_sqlite(database: str | None) -> bool:
    return not database or database == ":memory:"


def create_engine_from_settings(settings: Settings | None = None) -> AsyncEngine:
    """按配置创建 AsyncEngine；SQLite 不设连接池参数，内存库使用 StaticPool 共享单连接"""
    settings = settings or get_settings()
    url = make_url(settings.DATABASE_URL)

    if url.get_backend_name() == "sqlite":
        kwargs: dict = {"echo": settings.DB_ECHO}
        if _is_memory_sqlite(url.database):
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        engine = create_async_engine(url, **kwargs)
        _enable_sqlite_foreign_keys(engine)
    else:
        engine = create_async_engine(
            url,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            echo=settings.DB_ECHO,
        )
    return engine


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """确保库文件目录与表结构存在（幂等）"""
    url = engine.url
    if url.get_backend_name() == "sqlite" and not _is_memory_sqlite(url.database):
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("Todo 表结构已就绪", url=url.render_as_string(hide_password=True))
