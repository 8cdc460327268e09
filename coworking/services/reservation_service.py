"""
@description 预订生命周期服务
@responsibility 预订的创建、修改、删除与查询；可用性判定与写入在同一工作区锁和同一事务内完成
"""

import asyncio
import weakref
from datetime import date

from loguru import logger
from sqlalchemy.orm import sessionmaker

from coworking.core.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
)
from coworking.models.reservation import Reservation
from coworking.repositories.reservation import ReservationRepository
from coworking.repositories.user import UserRepository
from coworking.repositories.workspace import WorkspaceRepository
from coworking.schemas.api import ReservationItem, ReservationRequest
from coworking.services.availability import (
    OFFICE_MIN_DAYS,
    AvailabilityDecision,
    RejectReason,
    check_availability,
)
from coworking.services.base import CacheAsideService
from coworking.services.lfu_cache import LfuCache

_INVALID_ARGUMENT_REASONS = {RejectReason.INVALID_RANGE, RejectReason.MINIMUM_STAY}


def _raise_for_rejection(decision: AvailabilityDecision) -> None:
    """把拒绝原因转换为对应的业务异常"""
    if decision.accepted:
        return
    if decision.reason in _INVALID_ARGUMENT_REASONS:
        raise InvalidArgumentError(decision.message)
    raise AlreadyExistsError(decision.message)


class ReservationService(CacheAsideService[ReservationItem]):
    """
    预订服务

    同一工作区上的创建 / 修改 / 删除由进程内的工作区锁串行化，
    事务内再以 SELECT ... FOR UPDATE 锁住工作区行，多进程部署时由数据库保证互斥。
    被拒绝的请求不会写数据库，也不会改动缓存。
    """

    entity_label = "预订"
    repository_class = ReservationRepository
    item_schema = ReservationItem

    def __init__(
        self,
        session_factory: sessionmaker,
        cache: LfuCache[int, ReservationItem],
        office_min_days: int = OFFICE_MIN_DAYS,
    ):
        super().__init__(session_factory, cache)
        self._office_min_days = office_min_days
        # 没有协程持有时锁会被自动回收
        self._workspace_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = (
            weakref.WeakValueDictionary()
        )

    def _workspace_lock(self, workspace_id: int) -> asyncio.Lock:
        lock = self._workspace_locks.get(workspace_id)
        if lock is None:
            lock = asyncio.Lock()
            self._workspace_locks[workspace_id] = lock
        return lock

    async def create(
        self, workspace_id: int, user_id: int, data: ReservationRequest
    ) -> ReservationItem:
        async with self._workspace_lock(workspace_id):
            async with self._session_factory() as session:
                async with session.begin():
                    workspace = await WorkspaceRepository(session).find_by_id(
                        workspace_id, for_update=True
                    )
                    if workspace is None:
                        raise NotFoundError(f"工作区不存在: id={workspace_id}")
                    if await UserRepository(session).find_by_id(user_id) is None:
                        raise NotFoundError(f"用户不存在: id={user_id}")

                    repo = ReservationRepository(session)
                    decision = await check_availability(
                        repo,
                        workspace,
                        data.start_date,
                        data.end_date,
                        office_min_days=self._office_min_days,
                    )
                    if not decision.accepted:
                        logger.warning(
                            f"预订被拒绝: workspace_id={workspace_id}, "
                            f"{data.start_date} ~ {data.end_date}, reason={decision.reason.value}"
                        )
                    _raise_for_rejection(decision)

                    reservation = await repo.save(
                        Reservation(
                            workspace_id=workspace_id,
                            user_id=user_id,
                            start_date=data.start_date,
                            end_date=data.end_date,
                            comment=data.comment,
                        )
                    )

            item = self._remember(reservation)

        logger.info(
            f"预订已创建: id={item.id}, workspace_id={workspace_id}, "
            f"{item.start_date} ~ {item.end_date}"
        )
        return item

    async def update(self, reservation_id: int, data: ReservationRequest) -> ReservationItem:
        workspace_id = await self._workspace_id_of(reservation_id)

        async with self._workspace_lock(workspace_id):
            async with self._session_factory() as session:
                async with session.begin():
                    # 加锁后重新读取，期间可能已被删除
                    existing = await self._load_for_write(session, reservation_id)
                    workspace = await WorkspaceRepository(session).find_by_id(
                        existing.workspace_id, for_update=True
                    )

                    repo = ReservationRepository(session)
                    decision = await check_availability(
                        repo,
                        workspace,
                        data.start_date,
                        data.end_date,
                        exclude_reservation_id=reservation_id,
                        office_min_days=self._office_min_days,
                    )
                    if not decision.accepted:
                        logger.warning(
                            f"预订修改被拒绝: id={reservation_id}, "
                            f"{data.start_date} ~ {data.end_date}, reason={decision.reason.value}"
                        )
                    _raise_for_rejection(decision)

                    existing.start_date = data.start_date
                    existing.end_date = data.end_date
                    existing.comment = data.comment
                    reservation = await repo.save(existing)

            item = self._remember(reservation)

        logger.info(
            f"预订已更新: id={reservation_id}, {item.start_date} ~ {item.end_date}"
        )
        return item

    async def delete(self, reservation_id: int) -> None:
        workspace_id = await self._workspace_id_of(reservation_id)

        async with self._workspace_lock(workspace_id):
            async with self._session_factory() as session:
                async with session.begin():
                    existing = await self._load_for_write(session, reservation_id)
                    await ReservationRepository(session).delete(existing)

            self._forget(reservation_id)

        logger.info(f"预订已删除: id={reservation_id}")

    async def list_by_user_email(self, email: str) -> list[ReservationItem]:
        async with self._session_factory() as session:
            if not await UserRepository(session).exists_by_email(email):
                raise NotFoundError(f"邮箱为 {email} 的用户不存在")
            reservations = await ReservationRepository(session).find_by_user_email(email)
        return [self._to_item(r) for r in reservations]

    async def list_by_period(
        self, start: date, end: date, coworking_id: int
    ) -> list[ReservationItem]:
        """查询空间内与 [start, end] 有重叠的全部预订"""
        if end < start:
            raise InvalidArgumentError("结束日期不能早于开始日期")
        async with self._session_factory() as session:
            reservations = await ReservationRepository(
                session
            ).find_by_period_and_coworking(start, end, coworking_id)
        return [self._to_item(r) for r in reservations]

    async def _workspace_id_of(self, reservation_id: int) -> int:
        """读取预订所属工作区（创建后不可变），用于在加锁前确定锁对象"""
        async with self._session_factory() as session:
            existing = await self._load_for_write(session, reservation_id)
            return existing.workspace_id
