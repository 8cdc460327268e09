"""
@description 枚举类型
@responsibility 定义工作区类型和用户角色
"""

import enum


class WorkspaceType(str, enum.Enum):
    OPEN_SPACE = "OPEN_SPACE"  # 开放工位区，按 capacity 计算容量
    MEETING_ROOM = "MEETING_ROOM"
    FIXED_DESK = "FIXED_DESK"
    OFFICE = "OFFICE"  # 独立办公室，有最少预订天数限制


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"
