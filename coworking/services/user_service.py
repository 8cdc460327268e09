"""
@description 用户服务
@responsibility 用户的增删改查，邮箱唯一性校验，旁路缓存
"""

from loguru import logger

from coworking.core.exceptions import AlreadyExistsError, InvalidArgumentError
from coworking.models.user import User
from coworking.repositories.user import UserRepository
from coworking.schemas.api import UserItem, UserRequest
from coworking.services.base import CacheAsideService


class UserService(CacheAsideService[UserItem]):
    entity_label = "用户"
    repository_class = UserRepository
    item_schema = UserItem

    async def create(self, data: UserRequest) -> UserItem:
        async with self._session_factory() as session:
            async with session.begin():
                repo = UserRepository(session)
                if await repo.exists_by_email(data.email):
                    raise AlreadyExistsError(f"邮箱 '{data.email}' 已被使用")
                user = await repo.save(User(**data.model_dump()))

        logger.info(f"用户已创建: id={user.id}")
        return self._remember(user)

    async def update(self, user_id: int, data: UserRequest) -> UserItem:
        async with self._session_factory() as session:
            async with session.begin():
                repo = UserRepository(session)
                existing = await self._load_for_write(session, user_id)
                if existing.email != data.email and await repo.exists_by_email(data.email):
                    raise AlreadyExistsError(f"邮箱 '{data.email}' 已被使用")

                for field, value in data.model_dump().items():
                    setattr(existing, field, value)
                user = await repo.save(existing)

        logger.info(f"用户已更新: id={user_id}")
        return self._remember(user)

    async def delete(self, user_id: int) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                repo = UserRepository(session)
                existing = await self._load_for_write(session, user_id)
                if await repo.has_reservations(user_id):
                    raise InvalidArgumentError("用户仍有预订记录，请先删除预订")
                await repo.delete(existing)

        self._forget(user_id)
        logger.info(f"用户已删除: id={user_id}")
