"""
@description 旁路缓存实体服务基类
@responsibility 按 ID 读取时先查缓存，未命中再查数据库并回填；写入成功后同步缓存
"""

from typing import Generic, Optional, TypeVar

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.orm import sessionmaker

from coworking.core.exceptions import NotFoundError
from coworking.repositories.base import SqlRepository
from coworking.services.lfu_cache import LfuCache

R = TypeVar("R", bound=BaseModel)


class CacheAsideService(Generic[R]):
    """
    实体服务基类，每个子类持有一个独立的 LfuCache 实例

    未命中回填与并发写入之间用按 key 的写入代数隔离：
    读取前记下代数，读完后代数已变化（期间有写入提交）则不回填，
    避免旧快照覆盖写入方的 put / remove。只为正在回填的 key 保留代数。
    """

    entity_label: str = "实体"
    repository_class: type[SqlRepository]
    item_schema: type[BaseModel]

    def __init__(self, session_factory: sessionmaker, cache: LfuCache[int, R]):
        self._session_factory = session_factory
        self._cache = cache
        self._generations: dict[int, int] = {}
        self._pending_fills: dict[int, int] = {}

    @property
    def cache(self) -> LfuCache[int, R]:
        return self._cache

    async def get_by_id(self, entity_id: int) -> R:
        cached = self._cache.get(entity_id)
        if cached is not None:
            return cached

        generation = self._begin_fill(entity_id)
        try:
            async with self._session_factory() as session:
                entity = await self.repository_class(session).find_by_id(entity_id)

            if entity is None:
                raise NotFoundError(f"{self.entity_label}不存在: id={entity_id}")

            item = self._to_item(entity)
            if self._generations[entity_id] == generation:
                self._cache.put(entity_id, item)
            else:
                logger.debug(f"{self.entity_label}读取期间已被修改，跳过回填: id={entity_id}")
            return item
        finally:
            self._end_fill(entity_id)

    async def list_all(self) -> list[R]:
        async with self._session_factory() as session:
            entities = await self.repository_class(session).find_all()
        return [self._to_item(entity) for entity in entities]

    def _to_item(self, entity) -> R:
        return self.item_schema.model_validate(entity)

    def _remember(self, entity) -> R:
        """写入提交后调用：转换为读模型并写入缓存"""
        item = self._to_item(entity)
        self._bump_generation(item.id)
        self._cache.put(item.id, item)
        return item

    def _forget(self, entity_id: int) -> None:
        """删除提交后调用"""
        self._bump_generation(entity_id)
        self._cache.remove(entity_id)
        logger.debug(f"{self.entity_label}缓存已移除: id={entity_id}")

    def _begin_fill(self, entity_id: int) -> int:
        self._pending_fills[entity_id] = self._pending_fills.get(entity_id, 0) + 1
        return self._generations.setdefault(entity_id, 0)

    def _end_fill(self, entity_id: int) -> None:
        remaining = self._pending_fills[entity_id] - 1
        if remaining:
            self._pending_fills[entity_id] = remaining
        else:
            del self._pending_fills[entity_id]
            del self._generations[entity_id]

    def _bump_generation(self, entity_id: int) -> None:
        # 没有进行中的回填时无需记录
        if entity_id in self._generations:
            self._generations[entity_id] += 1

    async def _load_for_write(self, session, entity_id: int, for_update: bool = False):
        """写操作前从数据库读取实体（不走缓存），不存在时抛 NotFoundError"""
        entity: Optional[object] = await self.repository_class(session).find_by_id(
            entity_id, for_update=for_update
        )
        if entity is None:
            raise NotFoundError(f"{self.entity_label}不存在: id={entity_id}")
        return entity
