"""
@description 联合办公空间接口
@responsibility 处理空间的增删改查
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter

from coworking.schemas.api import CoworkingRequest, success_response

if TYPE_CHECKING:
    from coworking.services.coworking_service import CoworkingService

router = APIRouter()

_service: "CoworkingService" = None


def init_coworkings_router(service: "CoworkingService"):
    global _service
    _service = service


@router.get("/coworkings")
async def get_coworkings():
    items = await _service.list_all()
    return success_response(data=items, message="获取空间列表成功")


@router.get("/coworkings/{coworking_id}")
async def get_coworking(coworking_id: int):
    item = await _service.get_by_id(coworking_id)
    return success_response(data=item, message="获取空间成功")


@router.post("/coworkings", status_code=201)
async def create_coworking(request: CoworkingRequest):
    item = await _service.create(request)
    return success_response(data=item, message="空间创建成功")


@router.put("/coworkings/{coworking_id}")
async def update_coworking(coworking_id: int, request: CoworkingRequest):
    item = await _service.update(coworking_id, request)
    return success_response(data=item, message="空间更新成功")


@router.delete("/coworkings/{coworking_id}")
async def delete_coworking(coworking_id: int):
    await _service.delete(coworking_id)
    return success_response(data=None, message="空间删除成功")
