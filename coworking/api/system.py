"""
@description 系统状态接口
@responsibility 查询各实体缓存的占用情况
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter

from coworking.schemas.api import (
    ApiResponse,
    CacheStatusItem,
    StatusResponse,
    success_response,
)

if TYPE_CHECKING:
    from coworking.services.lfu_cache import LfuCache

router = APIRouter()

_caches: list["LfuCache"] = []


def init_system_router(caches: list["LfuCache"]):
    global _caches
    _caches = list(caches)


@router.get("/status", response_model=ApiResponse[StatusResponse])
async def get_status():
    return success_response(
        data=StatusResponse(
            caches=[
                CacheStatusItem(name=cache.name, size=len(cache), capacity=cache.capacity)
                for cache in _caches
            ]
        ),
        message="获取系统状态成功",
    )
