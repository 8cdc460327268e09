"""
@description 工作区可用性判定
@responsibility 判断候选日期区间能否预订某个工作区（日期合法性、办公室最少天数、容量冲突）
"""

import enum
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol, Sequence

from coworking.models.enums import WorkspaceType

OFFICE_MIN_DAYS = 7


class RejectReason(str, enum.Enum):
    INVALID_RANGE = "invalid_range"
    MINIMUM_STAY = "minimum_stay_violation"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    ALREADY_RESERVED = "already_reserved"


@dataclass(frozen=True)
class AvailabilityDecision:
    accepted: bool
    reason: Optional[RejectReason] = None
    message: str = ""

    @classmethod
    def accept(cls) -> "AvailabilityDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: RejectReason, message: str) -> "AvailabilityDecision":
        return cls(accepted=False, reason=reason, message=message)


class OverlapSource(Protocol):
    async def find_overlapping(self, workspace_id: int, start: date, end: date) -> Sequence:
        ...


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """两个闭区间是否相交"""
    return a_start <= b_end and a_end >= b_start


def days_inclusive(start: date, end: date) -> int:
    """闭区间天数，start == end 时为 1"""
    return (end - start).days + 1


def effective_capacity(workspace) -> int:
    """OPEN_SPACE 使用存储的 capacity，其余类型固定为 1"""
    if workspace.type == WorkspaceType.OPEN_SPACE:
        return workspace.capacity
    return 1


async def check_availability(
    reservations: OverlapSource,
    workspace,
    start: date,
    end: date,
    exclude_reservation_id: Optional[int] = None,
    office_min_days: int = OFFICE_MIN_DAYS,
) -> AvailabilityDecision:
    """
    判断工作区在 [start, end] 内是否可预订，按顺序检查，第一条不满足的规则决定结果

    1. end 早于 start -> INVALID_RANGE
    2. OFFICE 且天数少于 office_min_days -> MINIMUM_STAY
    3. 查询重叠预订，排除 exclude_reservation_id（更新时的自身记录）
    4. OPEN_SPACE：重叠数 >= capacity -> CAPACITY_EXCEEDED
       其他类型：存在任何重叠 -> ALREADY_RESERVED

    Args:
        reservations: 提供 find_overlapping 的预订仓储
        workspace: 目标工作区（需要 id / type / capacity）
        start: 开始日期（含）
        end: 结束日期（含）
        exclude_reservation_id: 不参与冲突判断的预订 ID
        office_min_days: 办公室最少预订天数

    Returns:
        AvailabilityDecision，只读，不修改任何状态
    """
    if end < start:
        return AvailabilityDecision.reject(
            RejectReason.INVALID_RANGE, "结束日期不能早于开始日期"
        )

    if workspace.type == WorkspaceType.OFFICE and days_inclusive(start, end) < office_min_days:
        return AvailabilityDecision.reject(
            RejectReason.MINIMUM_STAY,
            f"办公室至少需要预订 {office_min_days} 天",
        )

    overlapping = await reservations.find_overlapping(workspace.id, start, end)
    if exclude_reservation_id is not None:
        overlapping = [r for r in overlapping if r.id != exclude_reservation_id]

    if len(overlapping) < effective_capacity(workspace):
        return AvailabilityDecision.accept()

    if workspace.type == WorkspaceType.OPEN_SPACE:
        return AvailabilityDecision.reject(
            RejectReason.CAPACITY_EXCEEDED, "所选日期内开放工位区容量已满"
        )
    return AvailabilityDecision.reject(
        RejectReason.ALREADY_RESERVED, "该工作区在所选日期内已被预订"
    )
