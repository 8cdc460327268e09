"""
@description 用户仓储
@responsibility 邮箱唯一性判断及名下预订检查
"""

from coworking.models.reservation import Reservation
from coworking.models.user import User
from coworking.repositories.base import SqlRepository


class UserRepository(SqlRepository[User]):
    model = User

    async def exists_by_email(self, email: str) -> bool:
        return await self._exists(User.email == email)

    async def has_reservations(self, user_id: int) -> bool:
        return await self._exists(Reservation.user_id == user_id, model=Reservation)
