"""
@description 联合办公空间服务
@responsibility 空间的增删改查，名称/地址唯一性校验，旁路缓存
"""

from loguru import logger

from coworking.core.exceptions import AlreadyExistsError, InvalidArgumentError
from coworking.models.coworking import Coworking
from coworking.repositories.coworking import CoworkingRepository
from coworking.schemas.api import CoworkingItem, CoworkingRequest
from coworking.services.base import CacheAsideService


class CoworkingService(CacheAsideService[CoworkingItem]):
    entity_label = "联合办公空间"
    repository_class = CoworkingRepository
    item_schema = CoworkingItem

    async def create(self, data: CoworkingRequest) -> CoworkingItem:
        async with self._session_factory() as session:
            async with session.begin():
                repo = CoworkingRepository(session)
                if await repo.exists_by_name(data.name):
                    raise AlreadyExistsError(f"空间名称 '{data.name}' 已存在")
                if await repo.exists_by_address(data.address):
                    raise AlreadyExistsError(f"空间地址 '{data.address}' 已存在")

                coworking = await repo.save(Coworking(**data.model_dump()))

        logger.info(f"联合办公空间已创建: id={coworking.id}, name={coworking.name}")
        return self._remember(coworking)

    async def update(self, coworking_id: int, data: CoworkingRequest) -> CoworkingItem:
        async with self._session_factory() as session:
            async with session.begin():
                repo = CoworkingRepository(session)
                existing = await self._load_for_write(session, coworking_id)

                # 只有值发生变化时才检查唯一性（排除自身）
                if existing.name != data.name and await repo.exists_by_name(data.name):
                    raise AlreadyExistsError(f"空间名称 '{data.name}' 已存在")
                if existing.address != data.address and await repo.exists_by_address(
                    data.address
                ):
                    raise AlreadyExistsError(f"空间地址 '{data.address}' 已存在")

                for field, value in data.model_dump().items():
                    setattr(existing, field, value)
                coworking = await repo.save(existing)

        logger.info(f"联合办公空间已更新: id={coworking_id}")
        return self._remember(coworking)

    async def delete(self, coworking_id: int) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                repo = CoworkingRepository(session)
                existing = await self._load_for_write(session, coworking_id)
                if await repo.has_workspaces(coworking_id):
                    raise InvalidArgumentError("空间下仍有工作区，请先删除工作区")
                await repo.delete(existing)

        self._forget(coworking_id)
        logger.info(f"联合办公空间已删除: id={coworking_id}")
