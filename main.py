"""
@description FastAPI 应用入口
@responsibility 加载配置、初始化数据库与日志、创建各实体缓存和服务并注册路由
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from sqlalchemy import text

from coworking.api import coworkings, reservations, system, users, workspaces
from coworking.api.coworkings import init_coworkings_router
from coworking.api.errors import register_exception_handlers
from coworking.api.reservations import init_reservations_router
from coworking.api.system import init_system_router
from coworking.api.users import init_users_router
from coworking.api.workspaces import init_workspaces_router
from coworking.core.config import load_config
from coworking.core.database import dispose_engine, get_session, init_db, init_engine
from coworking.core.logging import setup_logging
from coworking.schemas.api import success_response
from coworking.services.coworking_service import CoworkingService
from coworking.services.lfu_cache import LfuCache
from coworking.services.reservation_service import ReservationService
from coworking.services.user_service import UserService
from coworking.services.workspace_service import WorkspaceService


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = load_config()
    setup_logging(config.logging)
    logger.info("应用启动中...")

    session_factory = init_engine(config.database.url, echo=config.database.echo)
    await init_db()
    logger.info("数据库初始化完成")

    # 每类实体一个独立缓存，互不共享
    capacity = config.cache.capacity
    coworking_cache = LfuCache(capacity, name="coworking")
    user_cache = LfuCache(capacity, name="user")
    workspace_cache = LfuCache(capacity, name="workspace")
    reservation_cache = LfuCache(capacity, name="reservation")

    init_coworkings_router(CoworkingService(session_factory, coworking_cache))
    init_users_router(UserService(session_factory, user_cache))
    init_workspaces_router(WorkspaceService(session_factory, workspace_cache))
    init_reservations_router(
        ReservationService(
            session_factory,
            reservation_cache,
            office_min_days=config.booking.office_min_days,
        )
    )
    init_system_router([coworking_cache, user_cache, workspace_cache, reservation_cache])
    logger.info(f"服务初始化完成，缓存容量: {capacity}")

    yield

    await dispose_engine()
    logger.info("应用已关闭")


app = FastAPI(
    title="联合办公预订服务",
    description="管理联合办公空间、工作区、用户和预订",
    version="1.0.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.include_router(coworkings.router, prefix="/api", tags=["coworkings"])
app.include_router(users.router, prefix="/api", tags=["users"])
app.include_router(workspaces.router, prefix="/api", tags=["workspaces"])
app.include_router(reservations.router, prefix="/api", tags=["reservations"])
app.include_router(system.router, prefix="/api", tags=["system"])


@app.get("/")
async def root():
    return success_response(
        data={"message": "联合办公预订服务 API", "version": "1.0.0"},
        message="服务运行中",
    )


@app.get("/health")
async def health_check():
    # 确认数据库连接可用
    async with get_session() as session:
        await session.execute(text("SELECT 1"))
    return success_response(data={"status": "healthy"}, message="健康检查通过")
