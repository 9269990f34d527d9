"""
数据库配置和连接管理
SQLAlchemy 异步引擎和会话管理
"""

from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from magpress.core.config import Settings, settings as default_settings

# 主键为 PostgreSQL INTEGER，超出范围的ID在边界处拒绝
MAX_ID = 2**31 - 1


class Base(DeclarativeBase):
    """SQLAlchemy 基类"""
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite 默认不校验外键
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_from_settings(cfg: Settings, url: Optional[str] = None) -> AsyncEngine:
    """根据配置创建异步引擎"""
    database_url = url or cfg.DATABASE_URL
    if not database_url:
        raise ValueError("DATABASE_URL 未配置。请检查 .env 文件中的数据库配置。")

    database_url = str(database_url)
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=cfg.SQLALCHEMY_ECHO, poolclass=NullPool)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    kwargs: Dict[str, Any] = {
        "echo": cfg.SQLALCHEMY_ECHO,
        "pool_size": cfg.POSTGRES_MAX_CONNECTIONS,
        "max_overflow": cfg.DB_MAX_OVERFLOW,
        "pool_timeout": cfg.DB_POOL_TIMEOUT_SECONDS,
        "pool_pre_ping": True,
        "pool_recycle": 3600,
    }
    if "+asyncpg" in database_url:
        kwargs["connect_args"] = {
            "server_settings": {
                "client_encoding": "utf8",
                "statement_timeout": str(cfg.POSTGRES_STATEMENT_TIMEOUT),
            }
        }
    return create_async_engine(database_url, **kwargs)


class Database:
    """
    数据库句柄：引擎 + 会话工厂
    生命周期与进程一致，由应用 lifespan 创建并挂载到 app.state.db
    """

    def __init__(self, cfg: Optional[Settings] = None, url: Optional[str] = None):
        self.settings = cfg or default_settings
        self.engine = create_engine_from_settings(self.settings, url)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autocommit=False,
            autoflush=False,
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def create_all(self) -> None:
        """创建全部表（仅开发环境/测试使用，生产请使用 Alembic 迁移）"""
        import magpress.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """关闭数据库连接"""
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    获取数据库会话的依赖函数
    在 FastAPI 依赖注入中使用
    """
    database: Database = request.app.state.db
    async with database.session() as session:
        try:
            yield session
        finally:
            await session.close()
