"""
@description 工作区仓储
@responsibility 同一空间内名称唯一性判断及预订存在性检查
"""

from coworking.models.reservation import Reservation
from coworking.models.workspace import Workspace
from coworking.repositories.base import SqlRepository


class WorkspaceRepository(SqlRepository[Workspace]):
    model = Workspace

    async def exists_by_name_and_coworking_id(self, name: str, coworking_id: int) -> bool:
        return await self._exists(
            Workspace.name == name, Workspace.coworking_id == coworking_id
        )

    async def has_reservations(self, workspace_id: int) -> bool:
        return await self._exists(
            Reservation.workspace_id == workspace_id, model=Reservation
        )
