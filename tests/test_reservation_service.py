"""
@description 预订服务测试用例
@responsibility 验证预订的创建、修改、删除流程、错误类型、旁路缓存及并发互斥
"""

import asyncio
from datetime import date, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from coworking.core.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
)
from coworking.models.enums import WorkspaceType
from coworking.repositories.reservation import ReservationRepository
from coworking.schemas.api import ReservationRequest, UserRequest

DAY1 = date(2030, 6, 1)


def day(n: int) -> date:
    return DAY1 + timedelta(days=n - 1)


def booking(start: int, end: int, comment: str | None = None) -> ReservationRequest:
    return ReservationRequest(start_date=day(start), end_date=day(end), comment=comment)


class TestCreate:
    """创建预订测试"""

    @pytest.mark.asyncio
    async def test_create_success(self, reservation_service, make_workspace, user):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)

        item = await reservation_service.create(workspace.id, user.id, booking(1, 2, "团队会议"))

        assert item.id is not None
        assert item.workspace_id == workspace.id
        assert item.user_id == user.id
        assert item.start_date == day(1)
        assert item.end_date == day(2)
        assert item.comment == "团队会议"

    @pytest.mark.asyncio
    async def test_missing_workspace(self, reservation_service, user):
        with pytest.raises(NotFoundError):
            await reservation_service.create(999, user.id, booking(1, 2))

    @pytest.mark.asyncio
    async def test_missing_user(self, reservation_service, make_workspace):
        workspace = await make_workspace(WorkspaceType.FIXED_DESK)
        with pytest.raises(NotFoundError):
            await reservation_service.create(workspace.id, 999, booking(1, 2))

    @pytest.mark.asyncio
    async def test_end_before_start(self, reservation_service, make_workspace, user):
        workspace = await make_workspace(WorkspaceType.OPEN_SPACE, capacity=3)
        with pytest.raises(InvalidArgumentError):
            await reservation_service.create(workspace.id, user.id, booking(5, 4))

    @pytest.mark.asyncio
    async def test_office_minimum_stay(self, reservation_service, make_workspace, user):
        office = await make_workspace(WorkspaceType.OFFICE)

        with pytest.raises(InvalidArgumentError):
            await reservation_service.create(office.id, user.id, booking(1, 6))

        item = await reservation_service.create(office.id, user.id, booking(1, 7))
        assert item.end_date == day(7)

    @pytest.mark.asyncio
    async def test_open_space_capacity_boundary(
        self, reservation_service, make_workspace, user
    ):
        open_space = await make_workspace(WorkspaceType.OPEN_SPACE, capacity=2)

        await reservation_service.create(open_space.id, user.id, booking(1, 3))
        # 1 条已有重叠，第 2 条可以
        await reservation_service.create(open_space.id, user.id, booking(2, 4))

        with pytest.raises(AlreadyExistsError):
            await reservation_service.create(open_space.id, user.id, booking(3, 3))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "workspace_type", [WorkspaceType.MEETING_ROOM, WorkspaceType.FIXED_DESK]
    )
    async def test_single_occupancy(
        self, reservation_service, make_workspace, user, workspace_type
    ):
        workspace = await make_workspace(workspace_type, capacity=5)
        await reservation_service.create(workspace.id, user.id, booking(1, 3))

        with pytest.raises(AlreadyExistsError):
            await reservation_service.create(workspace.id, user.id, booking(3, 5))

        # 相邻不重叠的日期可以预订
        await reservation_service.create(workspace.id, user.id, booking(4, 5))

    @pytest.mark.asyncio
    async def test_rejection_has_no_side_effects(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        await reservation_service.create(workspace.id, user.id, booking(1, 3))
        cache_size = len(reservation_service.cache)

        with pytest.raises(AlreadyExistsError):
            await reservation_service.create(workspace.id, user.id, booking(2, 2))

        assert len(await reservation_service.list_all()) == 1
        assert len(reservation_service.cache) == cache_size


class TestUpdate:
    """修改预订测试"""

    @pytest.mark.asyncio
    async def test_self_overlap_is_not_conflict(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 3))

        updated = await reservation_service.update(item.id, booking(2, 4, "延长一天"))

        assert updated.id == item.id
        assert updated.start_date == day(2)
        assert updated.end_date == day(4)
        assert updated.comment == "延长一天"

    @pytest.mark.asyncio
    async def test_conflict_with_other(self, reservation_service, make_workspace, user):
        workspace = await make_workspace(WorkspaceType.FIXED_DESK)
        first = await reservation_service.create(workspace.id, user.id, booking(1, 3))
        await reservation_service.create(workspace.id, user.id, booking(5, 6))

        with pytest.raises(AlreadyExistsError):
            await reservation_service.update(first.id, booking(1, 5))

        # 拒绝后原值不变
        unchanged = await reservation_service.get_by_id(first.id)
        assert unchanged.end_date == day(3)

    @pytest.mark.asyncio
    async def test_office_minimum_on_update(
        self, reservation_service, make_workspace, user
    ):
        office = await make_workspace(WorkspaceType.OFFICE)
        item = await reservation_service.create(office.id, user.id, booking(1, 7))

        with pytest.raises(InvalidArgumentError):
            await reservation_service.update(item.id, booking(1, 6))

    @pytest.mark.asyncio
    async def test_missing_reservation(self, reservation_service):
        with pytest.raises(NotFoundError):
            await reservation_service.update(12345, booking(1, 2))


class TestDelete:
    """删除预订测试"""

    @pytest.mark.asyncio
    async def test_delete_removes_from_store_and_cache(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 2))
        assert item.id in reservation_service.cache

        await reservation_service.delete(item.id)

        assert item.id not in reservation_service.cache
        with pytest.raises(NotFoundError):
            await reservation_service.get_by_id(item.id)

        # 删除后同一时间段可以重新预订
        await reservation_service.create(workspace.id, user.id, booking(1, 2))

    @pytest.mark.asyncio
    async def test_delete_missing(self, reservation_service):
        with pytest.raises(NotFoundError):
            await reservation_service.delete(404)


class TestCacheAside:
    """旁路缓存一致性测试"""

    @pytest.mark.asyncio
    async def test_get_after_create_hits_cache(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 2))

        with patch.object(ReservationRepository, "find_by_id", new=AsyncMock()) as spy:
            cached = await reservation_service.get_by_id(item.id)

        spy.assert_not_called()
        assert cached == item

    @pytest.mark.asyncio
    async def test_get_after_update_returns_fresh_value(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.OPEN_SPACE, capacity=2)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 2))
        await reservation_service.update(item.id, booking(3, 4, "改期"))

        with patch.object(ReservationRepository, "find_by_id", new=AsyncMock()) as spy:
            cached = await reservation_service.get_by_id(item.id)

        spy.assert_not_called()
        assert cached.start_date == day(3)
        assert cached.comment == "改期"

    @pytest.mark.asyncio
    async def test_miss_loads_from_store_once(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 2))
        reservation_service.cache.clear()

        original = ReservationRepository.find_by_id
        calls = []

        async def counting_find(repo, entity_id, for_update=False):
            calls.append(entity_id)
            return await original(repo, entity_id, for_update)

        with patch.object(ReservationRepository, "find_by_id", new=counting_find):
            first = await reservation_service.get_by_id(item.id)
            second = await reservation_service.get_by_id(item.id)

        assert calls == [item.id]
        assert first == second == item


def pause_first_find():
    """
    替换 ReservationRepository.find_by_id：第一次调用读到数据后挂起，
    直到 release 被设置；之后的调用直接透传
    """
    original = ReservationRepository.find_by_id
    loaded = asyncio.Event()
    release = asyncio.Event()
    calls = []

    async def paused_find(repo, entity_id, for_update=False):
        result = await original(repo, entity_id, for_update)
        calls.append(entity_id)
        if len(calls) == 1:
            loaded.set()
            await release.wait()
        return result

    return paused_find, loaded, release


class TestCacheFillRace:
    """未命中回填与并发写入的竞争测试"""

    @pytest.mark.asyncio
    async def test_delete_during_fill_is_not_undone(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 2))
        reservation_service.cache.clear()

        paused_find, loaded, release = pause_first_find()
        with patch.object(ReservationRepository, "find_by_id", new=paused_find):
            reader = asyncio.create_task(reservation_service.get_by_id(item.id))
            await loaded.wait()

            await reservation_service.delete(item.id)
            release.set()
            # 读取开始于删除之前，可以返回旧值，但不能回填缓存
            assert (await reader).id == item.id

        assert item.id not in reservation_service.cache
        with pytest.raises(NotFoundError):
            await reservation_service.get_by_id(item.id)

    @pytest.mark.asyncio
    async def test_update_during_fill_keeps_new_value(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 2))
        reservation_service.cache.clear()

        paused_find, loaded, release = pause_first_find()
        with patch.object(ReservationRepository, "find_by_id", new=paused_find):
            reader = asyncio.create_task(reservation_service.get_by_id(item.id))
            await loaded.wait()

            updated = await reservation_service.update(item.id, booking(5, 6, "改期"))
            release.set()
            assert (await reader).start_date == day(1)

        assert reservation_service.cache.get(item.id) == updated
        assert (await reservation_service.get_by_id(item.id)).start_date == day(5)

    @pytest.mark.asyncio
    async def test_fill_without_concurrent_write_is_cached(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        item = await reservation_service.create(workspace.id, user.id, booking(1, 2))
        reservation_service.cache.clear()

        paused_find, loaded, release = pause_first_find()
        with patch.object(ReservationRepository, "find_by_id", new=paused_find):
            reader = asyncio.create_task(reservation_service.get_by_id(item.id))
            await loaded.wait()
            release.set()
            await reader

        assert reservation_service.cache.get(item.id) == item


class TestQueries:
    """预订查询测试"""

    @pytest.mark.asyncio
    async def test_list_by_user_email(
        self, reservation_service, user_service, make_workspace, user
    ):
        other = await user_service.create(
            UserRequest(first_name="Sam", last_name="Lee", email="sam@example.com")
        )
        workspace = await make_workspace(WorkspaceType.OPEN_SPACE, capacity=5)
        await reservation_service.create(workspace.id, user.id, booking(1, 2))
        await reservation_service.create(workspace.id, other.id, booking(1, 2))

        items = await reservation_service.list_by_user_email("alex@example.com")

        assert [i.user_id for i in items] == [user.id]

    @pytest.mark.asyncio
    async def test_list_by_unknown_email(self, reservation_service):
        with pytest.raises(NotFoundError):
            await reservation_service.list_by_user_email("nobody@example.com")

    @pytest.mark.asyncio
    async def test_list_by_period_uses_inclusive_overlap(
        self, reservation_service, make_workspace, coworking, user
    ):
        workspace = await make_workspace(WorkspaceType.OPEN_SPACE, capacity=5)
        inside = await reservation_service.create(workspace.id, user.id, booking(3, 4))
        touching = await reservation_service.create(workspace.id, user.id, booking(5, 8))
        await reservation_service.create(workspace.id, user.id, booking(9, 10))

        items = await reservation_service.list_by_period(day(1), day(5), coworking.id)

        assert {i.id for i in items} == {inside.id, touching.id}

    @pytest.mark.asyncio
    async def test_list_by_period_invalid_range(self, reservation_service, coworking):
        with pytest.raises(InvalidArgumentError):
            await reservation_service.list_by_period(day(5), day(1), coworking.id)


class TestConcurrency:
    """并发预订互斥测试"""

    @pytest.mark.asyncio
    async def test_concurrent_creates_single_winner(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)

        results = await asyncio.gather(
            *[
                reservation_service.create(workspace.id, user.id, booking(1, 3))
                for _ in range(5)
            ],
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, AlreadyExistsError)]
        assert len(successes) == 1
        assert len(conflicts) == 4

    @pytest.mark.asyncio
    async def test_concurrent_creates_respect_open_space_capacity(
        self, reservation_service, make_workspace, user
    ):
        workspace = await make_workspace(WorkspaceType.OPEN_SPACE, capacity=3)

        results = await asyncio.gather(
            *[
                reservation_service.create(workspace.id, user.id, booking(1, 1))
                for _ in range(6)
            ],
            return_exceptions=True,
        )

        assert sum(not isinstance(r, Exception) for r in results) == 3
        assert len(await reservation_service.list_all()) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("update_first", [True, False])
    async def test_concurrent_update_and_create_single_winner(
        self, reservation_service, make_workspace, user, update_first
    ):
        workspace = await make_workspace(WorkspaceType.MEETING_ROOM)
        existing = await reservation_service.create(workspace.id, user.id, booking(1, 2))

        move = reservation_service.update(existing.id, booking(5, 6))
        take = reservation_service.create(workspace.id, user.id, booking(5, 6))
        calls = [move, take] if update_first else [take, move]

        results = await asyncio.gather(*calls, return_exceptions=True)

        successes = [r for r in results if not isinstance(r, Exception)]
        conflicts = [r for r in results if isinstance(r, AlreadyExistsError)]
        assert len(successes) == 1
        assert len(conflicts) == 1

        stored = await reservation_service.list_all()
        assert sum(r.start_date == day(5) for r in stored) == 1
        # 输掉的一方不留下任何变更
        if isinstance(results[calls.index(move)], AlreadyExistsError):
            assert (await reservation_service.get_by_id(existing.id)).start_date == day(1)
        else:
            assert len(stored) == 1
