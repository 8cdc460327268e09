"""
@description 测试公共夹具
@responsibility 提供临时 SQLite 数据库、会话工厂以及各服务实例
"""

import pytest
import pytest_asyncio

from coworking.core.database import create_engine_for, create_session_factory, init_db
from coworking.models.enums import WorkspaceType
from coworking.schemas.api import (
    CoworkingRequest,
    UserRequest,
    WorkspaceRequest,
)
from coworking.services.coworking_service import CoworkingService
from coworking.services.lfu_cache import LfuCache
from coworking.services.reservation_service import ReservationService
from coworking.services.user_service import UserService
from coworking.services.workspace_service import WorkspaceService


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """每个测试使用独立的 SQLite 文件库（并发测试需要多连接共享同一个库）"""
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return create_session_factory(async_engine)


@pytest.fixture
def coworking_service(session_factory):
    return CoworkingService(session_factory, LfuCache(100, name="coworking"))


@pytest.fixture
def user_service(session_factory):
    return UserService(session_factory, LfuCache(100, name="user"))


@pytest.fixture
def workspace_service(session_factory):
    return WorkspaceService(session_factory, LfuCache(100, name="workspace"))


@pytest.fixture
def reservation_service(session_factory):
    return ReservationService(session_factory, LfuCache(100, name="reservation"))


@pytest_asyncio.fixture
async def coworking(coworking_service):
    return await coworking_service.create(
        CoworkingRequest(
            name="Hub Central",
            address="12 Main Street, Springfield",
            email="hello@hub.example",
            phone_number="+15550001111",
        )
    )


@pytest_asyncio.fixture
async def user(user_service):
    return await user_service.create(
        UserRequest(first_name="Alex", last_name="Smith", email="alex@example.com")
    )


@pytest_asyncio.fixture
async def make_workspace(workspace_service, coworking):
    """按类型和容量创建工作区"""
    counter = {"n": 0}

    async def _make(workspace_type: WorkspaceType, capacity: int = 1):
        counter["n"] += 1
        return await workspace_service.create(
            coworking.id,
            WorkspaceRequest(
                name=f"{workspace_type.value}-{counter['n']}",
                type=workspace_type,
                capacity=capacity,
            ),
        )

    return _make
