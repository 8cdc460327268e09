"""
@description 联合办公空间仓储
@responsibility 名称、地址唯一性判断及下属工作区检查
"""

from coworking.models.coworking import Coworking
from coworking.models.workspace import Workspace
from coworking.repositories.base import SqlRepository


class CoworkingRepository(SqlRepository[Coworking]):
    model = Coworking

    async def exists_by_name(self, name: str) -> bool:
        return await self._exists(Coworking.name == name)

    async def exists_by_address(self, address: str) -> bool:
        return await self._exists(Coworking.address == address)

    async def has_workspaces(self, coworking_id: int) -> bool:
        return await self._exists(
            Workspace.coworking_id == coworking_id, model=Workspace
        )
