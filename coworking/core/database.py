"""
@description 异步数据库连接管理
@responsibility 提供 SQLAlchemy 异步引擎、会话管理和数据库初始化
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

DATABASE_URL = "sqlite+aiosqlite:///./db/coworking.db"

engine: Optional[AsyncEngine] = None
async_session_local: Optional[sessionmaker] = None

Base = declarative_base()


def create_engine_for(database_url: str, echo: bool = False) -> AsyncEngine:
    """根据连接串创建异步引擎（SQLite 文件库会自动创建所在目录）"""
    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    return create_async_engine(database_url, echo=echo, connect_args=connect_args)


def create_session_factory(bind: AsyncEngine) -> sessionmaker:
    """创建会话工厂（提交后不过期，便于提交后继续读取实体字段）"""
    return sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


def init_engine(database_url: str = DATABASE_URL, echo: bool = False) -> sessionmaker:
    """初始化全局引擎和会话工厂"""
    global engine, async_session_local
    engine = create_engine_for(database_url, echo=echo)
    async_session_local = create_session_factory(engine)
    return async_session_local


async def init_db(bind: Optional[AsyncEngine] = None):
    """
    初始化数据库，创建所有表
    """
    # 导入所有模型，确保在 Base.metadata 中注册
    from coworking.models.coworking import Coworking
    from coworking.models.user import User
    from coworking.models.workspace import Workspace
    from coworking.models.reservation import Reservation

    target = bind or engine
    if target is None:
        raise RuntimeError("数据库引擎尚未初始化，请先调用 init_engine()")

    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """关闭全局引擎连接池"""
    global engine, async_session_local
    if engine is not None:
        await engine.dispose()
    engine = None
    async_session_local = None


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """
    异步会话上下文管理器（使用全局会话工厂）
    """
    if async_session_local is None:
        raise RuntimeError("数据库引擎尚未初始化，请先调用 init_engine()")
    async with async_session_local() as session:
        try:
            yield session
        finally:
            await session.close()
