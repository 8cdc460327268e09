"""
@description API 请求/响应模型
@responsibility 定义所有 API 接口的数据结构，读模型同时作为缓存中的实体快照
"""

from datetime import date
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from coworking.models.enums import UserRole, WorkspaceType


class CoworkingRequest(BaseModel):
    name: str = Field(..., description="空间名称（唯一）")
    address: str = Field(..., description="地址（唯一）")
    email: str = Field(..., description="联系邮箱")
    phone_number: str = Field(..., description="联系电话")
    description: Optional[str] = Field(None, description="描述")


class CoworkingItem(CoworkingRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="空间 ID")


class UserRequest(BaseModel):
    first_name: str = Field(..., description="名")
    last_name: str = Field(..., description="姓")
    email: str = Field(..., description="邮箱（唯一）")
    role: UserRole = Field(UserRole.USER, description="角色")


class UserItem(UserRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="用户 ID")


class WorkspaceRequest(BaseModel):
    name: str = Field(..., description="工作区名称（同一空间内唯一）")
    type: WorkspaceType = Field(..., description="工作区类型")
    capacity: int = Field(1, description="容量（仅 OPEN_SPACE 生效）")
    description: Optional[str] = Field(None, description="描述")


class WorkspaceItem(WorkspaceRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="工作区 ID")
    coworking_id: int = Field(..., description="所属空间 ID")


class ReservationRequest(BaseModel):
    start_date: date = Field(..., description="开始日期（含）")
    end_date: date = Field(..., description="结束日期（含）")
    comment: Optional[str] = Field(None, description="备注")


class ReservationItem(ReservationRequest):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="预订 ID")
    workspace_id: int = Field(..., description="工作区 ID")
    user_id: int = Field(..., description="用户 ID")


class CacheStatusItem(BaseModel):
    name: str = Field(..., description="缓存名称")
    size: int = Field(..., description="当前条目数")
    capacity: int = Field(..., description="最大条目数")


class StatusResponse(BaseModel):
    caches: list[CacheStatusItem] = Field(..., description="各实体缓存占用情况")


T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """统一 API 响应格式"""

    code: int = Field(..., description="响应码（0=成功，非0=错误）")
    message: str = Field(..., description="响应消息")
    data: Optional[T] = Field(None, description="响应数据")


def success_response(data: T, message: str = "操作成功") -> ApiResponse[T]:
    """创建成功响应"""
    return ApiResponse(code=0, message=message, data=data)


def error_response(code: int, message: str, data: Optional[T] = None) -> ApiResponse[T]:
    """创建错误响应"""
    return ApiResponse(code=code, message=message, data=data)
