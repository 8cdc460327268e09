"""
@description 工作区接口
@responsibility 处理工作区的增删改查及批量创建
"""

from typing import TYPE_CHECKING

from fastapi import APIRouter

from coworking.schemas.api import WorkspaceRequest, success_response

if TYPE_CHECKING:
    from coworking.services.workspace_service import WorkspaceService

router = APIRouter()

_service: "WorkspaceService" = None


def init_workspaces_router(service: "WorkspaceService"):
    global _service
    _service = service


@router.get("/workspaces")
async def get_workspaces():
    items = await _service.list_all()
    return success_response(data=items, message="获取工作区列表成功")


@router.get("/workspaces/{workspace_id}")
async def get_workspace(workspace_id: int):
    item = await _service.get_by_id(workspace_id)
    return success_response(data=item, message="获取工作区成功")


@router.post("/workspaces/coworking/{coworking_id}", status_code=201)
async def create_workspace(coworking_id: int, request: WorkspaceRequest):
    item = await _service.create(coworking_id, request)
    return success_response(data=item, message="工作区创建成功")


@router.post("/workspaces/coworking/{coworking_id}/bulk", status_code=201)
async def create_workspaces_bulk(coworking_id: int, requests: list[WorkspaceRequest]):
    items = await _service.create_bulk(coworking_id, requests)
    return success_response(data=items, message="工作区批量创建成功")


@router.put("/workspaces/{workspace_id}")
async def update_workspace(workspace_id: int, request: WorkspaceRequest):
    item = await _service.update(workspace_id, request)
    return success_response(data=item, message="工作区更新成功")


@router.delete("/workspaces/{workspace_id}")
async def delete_workspace(workspace_id: int):
    await _service.delete(workspace_id)
    return success_response(data=None, message="工作区删除成功")
