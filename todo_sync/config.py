"""
全局配置模块：通过 pydantic-settings 读取 .env 环境变量

存储位置是显式配置项：DATA_DIR 默认落在用户目录下（~/.devchat），
未配置 DATABASE_URL 时由 DATA_DIR 推导出 SQLite 库路径。
"""

from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DATA_DIR = Path.home() / ".devchat"
TODO_DB_FILENAME = "todos.db"


class Settings(BaseSettings):
    """应用全局配置，从 .env 文件加载"""

    model_config = SettingsConfigDict(
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── 存储位置 ──
    DATA_DIR: Path = DEFAULT_DATA_DIR
    DATABASE_URL: str = ""  # 为空时按 DATA_DIR 推导 sqlite+aiosqlite 地址

    DB_ECHO: bool = False  # 打印 SQL 日志，调试时可在 .env 设为 true

    # ── 连接池（SQLite 不使用） ──
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # ── Todo 存储 ──
    TODO_STORE: str = "sql"  # sql | memory

    # ── 工具 ──
    DEFAULT_TOOL_TIMEOUT_MS: int = 10000

    # ── 应用 ──
    ENV: str = "development"  # development | production
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "context-todo"
    APP_PORT: int = 8000

    @model_validator(mode="after")
    def _resolve_database_url(self) -> "Settings":
        """未显式配置 DATABASE_URL 时，落到 DATA_DIR 下的 todos.db"""
        if not self.DATABASE_URL:
            db_path = self.DATA_DIR.expanduser() / TODO_DB_FILENAME
            self.DATABASE_URL = f"sqlite+aiosqlite:///{db_path}"
        return self

    @model_validator(mode="after")
    def _check_production_store(self) -> "Settings":
        """生产环境禁止使用进程内存储"""
        if self.TODO_STORE not in ("sql", "memory"):
            raise ValueError(f"TODO_STORE 只能是 sql 或 memory，当前为 {self.TODO_STORE!r}")
        if self.ENV == "production" and self.TODO_STORE == "memory":
            raise ValueError("生产环境不能使用 memory 存储，数据会随进程退出丢失。")
        return self

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """单例获取配置（带缓存）"""
    return Settings()
