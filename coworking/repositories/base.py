"""
@description 通用持久化仓储
@responsibility 基于 AsyncSession 提供按 ID 查询、保存、删除、存在性判断
"""

from typing import Any, Generic, Optional, Sequence, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

M = TypeVar("M")


class SqlRepository(Generic[M]):
    """单实体仓储，调用方负责事务边界（commit / rollback）"""

    model: type

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_id(self, entity_id: int, for_update: bool = False) -> Optional[M]:
        """
        按 ID 查询实体

        Args:
            entity_id: 实体 ID
            for_update: 为 True 时加行锁（SELECT ... FOR UPDATE，SQLite 下忽略）
        """
        stmt = select(self.model).where(self.model.id == entity_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_all(self) -> Sequence[M]:
        result = await self._session.execute(select(self.model).order_by(self.model.id))
        return result.scalars().all()

    async def exists_by_id(self, entity_id: int) -> bool:
        return await self._exists(self.model.id == entity_id)

    async def save(self, entity: M) -> M:
        """写入会话并 flush，使自增 ID 可用"""
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def delete(self, entity: M) -> None:
        await self._session.delete(entity)
        await self._session.flush()

    async def _exists(self, *conditions: Any, model: Optional[type] = None) -> bool:
        """判断满足条件的记录是否存在，model 默认为当前仓储的实体"""
        stmt = select(func.count()).select_from(model or self.model).where(*conditions)
        result = await self._session.execute(stmt)
        return (result.scalar() or 0) > 0
