"""
@description 预订仓储
@responsibility 预订的时间段重叠查询、按用户邮箱和按空间时间段查询
"""

from datetime import date
from typing import Sequence

from sqlalchemy import select

from coworking.models.reservation import Reservation
from coworking.models.user import User
from coworking.models.workspace import Workspace
from coworking.repositories.base import SqlRepository


class ReservationRepository(SqlRepository[Reservation]):
    model = Reservation

    async def find_overlapping(
        self, workspace_id: int, start: date, end: date
    ) -> Sequence[Reservation]:
        """
        查询工作区内与 [start, end] 重叠的预订

        闭区间重叠判定：已有预订 [s, e] 与候选区间重叠当且仅当 s <= end 且 e >= start
        """
        stmt = (
            select(Reservation)
            .where(
                Reservation.workspace_id == workspace_id,
                Reservation.start_date <= end,
                Reservation.end_date >= start,
            )
            .order_by(Reservation.id)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def find_by_user_email(self, email: str) -> Sequence[Reservation]:
        stmt = (
            select(Reservation)
            .join(User, User.id == Reservation.user_id)
            .where(User.email == email)
            .order_by(Reservation.start_date, Reservation.id)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()

    async def find_by_period_and_coworking(
        self, start: date, end: date, coworking_id: int
    ) -> Sequence[Reservation]:
        """查询某个空间下所有工作区在 [start, end] 内有重叠的预订（与 find_overlapping 同一判定）"""
        stmt = (
            select(Reservation)
            .join(Workspace, Workspace.id == Reservation.workspace_id)
            .where(
                Workspace.coworking_id == coworking_id,
                Reservation.start_date <= end,
                Reservation.end_date >= start,
            )
            .order_by(Reservation.start_date, Reservation.id)
        )
        result = await self._session.execute(stmt)
        return result.scalars().all()
