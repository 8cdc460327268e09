"""
@description 工作区服务
@responsibility 工作区的增删改查及批量创建，同一空间内名称唯一，旁路缓存
"""

from loguru import logger

from coworking.core.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
)
from coworking.models.workspace import Workspace
from coworking.repositories.coworking import CoworkingRepository
from coworking.repositories.workspace import WorkspaceRepository
from coworking.schemas.api import WorkspaceItem, WorkspaceRequest
from coworking.services.base import CacheAsideService


def _check_capacity(data: WorkspaceRequest) -> None:
    if data.capacity < 1:
        raise InvalidArgumentError("工作区容量必须大于等于 1")


class WorkspaceService(CacheAsideService[WorkspaceItem]):
    entity_label = "工作区"
    repository_class = WorkspaceRepository
    item_schema = WorkspaceItem

    async def create(self, coworking_id: int, data: WorkspaceRequest) -> WorkspaceItem:
        items = await self.create_bulk(coworking_id, [data])
        return items[0]

    async def create_bulk(
        self, coworking_id: int, requests: list[WorkspaceRequest]
    ) -> list[WorkspaceItem]:
        """在同一事务中创建多个工作区，任一失败则全部回滚"""
        async with self._session_factory() as session:
            async with session.begin():
                if not await CoworkingRepository(session).exists_by_id(coworking_id):
                    raise NotFoundError(f"联合办公空间不存在: id={coworking_id}")

                repo = WorkspaceRepository(session)
                created = []
                for data in requests:
                    _check_capacity(data)
                    # 本批次内先写入的记录已 flush，重名同样能查到
                    if await repo.exists_by_name_and_coworking_id(data.name, coworking_id):
                        raise AlreadyExistsError(
                            f"空间内已存在同名工作区: '{data.name}'"
                        )
                    workspace = Workspace(coworking_id=coworking_id, **data.model_dump())
                    created.append(await repo.save(workspace))

        logger.info(f"工作区已创建: coworking_id={coworking_id}, 数量={len(created)}")
        return [self._remember(workspace) for workspace in created]

    async def update(self, workspace_id: int, data: WorkspaceRequest) -> WorkspaceItem:
        _check_capacity(data)
        async with self._session_factory() as session:
            async with session.begin():
                repo = WorkspaceRepository(session)
                existing = await self._load_for_write(session, workspace_id)
                if existing.name != data.name and await repo.exists_by_name_and_coworking_id(
                    data.name, existing.coworking_id
                ):
                    raise AlreadyExistsError(f"空间内已存在同名工作区: '{data.name}'")

                for field, value in data.model_dump().items():
                    setattr(existing, field, value)
                workspace = await repo.save(existing)

        logger.info(f"工作区已更新: id={workspace_id}")
        return self._remember(workspace)

    async def delete(self, workspace_id: int) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                repo = WorkspaceRepository(session)
                existing = await self._load_for_write(session, workspace_id)
                if await repo.has_reservations(workspace_id):
                    raise InvalidArgumentError("工作区仍有预订记录，请先删除预订")
                await repo.delete(existing)

        self._forget(workspace_id)
        logger.info(f"工作区已删除: id={workspace_id}")
