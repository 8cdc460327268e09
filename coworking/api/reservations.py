"""
@description 预订接口
@responsibility 处理预订的创建、修改、删除及按用户、按时间段查询
"""

from datetime import date
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query

from coworking.schemas.api import ReservationRequest, success_response

if TYPE_CHECKING:
    from coworking.services.reservation_service import ReservationService

router = APIRouter()

_service: "ReservationService" = None


def init_reservations_router(service: "ReservationService"):
    global _service
    _service = service


@router.get("/reservations")
async def get_reservations():
    items = await _service.list_all()
    return success_response(data=items, message="获取预订列表成功")


# 固定路径需注册在 /reservations/{reservation_id} 之前
@router.get("/reservations/user")
async def get_reservations_by_user(email: str = Query(..., description="用户邮箱")):
    items = await _service.list_by_user_email(email)
    return success_response(data=items, message="获取用户预订成功")


@router.get("/reservations/period")
async def get_reservations_by_period(
    start_date: date = Query(..., description="开始日期（含）"),
    end_date: date = Query(..., description="结束日期（含）"),
    coworking_id: int = Query(..., description="空间 ID"),
):
    items = await _service.list_by_period(start_date, end_date, coworking_id)
    return success_response(data=items, message="获取时间段预订成功")


@router.get("/reservations/{reservation_id}")
async def get_reservation(reservation_id: int):
    item = await _service.get_by_id(reservation_id)
    return success_response(data=item, message="获取预订成功")


@router.post("/reservations/workspace/{workspace_id}/user/{user_id}", status_code=201)
async def create_reservation(workspace_id: int, user_id: int, request: ReservationRequest):
    item = await _service.create(workspace_id, user_id, request)
    return success_response(data=item, message="预订创建成功")


@router.put("/reservations/{reservation_id}")
async def update_reservation(reservation_id: int, request: ReservationRequest):
    item = await _service.update(reservation_id, request)
    return success_response(data=item, message="预订更新成功")


@router.delete("/reservations/{reservation_id}")
async def delete_reservation(reservation_id: int):
    await _service.delete(reservation_id)
    return success_response(data=None, message="预订删除成功")
