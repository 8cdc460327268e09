"""
@description 用户接口
@responsibility 处理用户的增删改查
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter

from coworking.schemas.api import UserRequest, success_response

if TYPE_CHECKING:
    from coworking.services.user_service import UserService

router = APIRouter()

_service: "UserService" = None


def init_users_router(service: "UserService"):
    global _service
    _service = service


@router.get("/users")
async def get_users():
    items = await _service.list_all()
    return success_response(data=items, message="获取用户列表成功")


@router.get("/users/{user_id}")
async def get_user(user_id: int):
    item = await _service.get_by_id(user_id)
    return success_response(data=item, message="获取用户成功")


@router.post("/users", status_code=201)
async def create_user(request: UserRequest):
    item = await _service.create(request)
    return success_response(data=item, message="用户创建成功")


@router.put("/users/{user_id}")
async def update_user(user_id: int, request: UserRequest):
    item = await _service.update(user_id, request)
    return success_response(data=item, message="用户更新成功")


@router.delete("/users/{user_id}")
async def delete_user(user_id: int):
    await _service.delete(user_id)
    return success_response(data=None, message="用户删除成功")
