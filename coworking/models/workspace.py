"""
@description 工作区模型
@responsibility 记录联合办公空间内的可预订工作区（类型、容量）
"""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from coworking.core.database import Base
from coworking.models.enums import WorkspaceType


class Workspace(Base):
    __tablename__ = "workspaces"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # 创建后不可变更所属空间
    coworking_id = Column(
        Integer, ForeignKey("coworkings.id"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    type = Column(Enum(WorkspaceType), nullable=False)
    # 只有 OPEN_SPACE 会按此值计算容量，其余类型固定为 1
    capacity = Column(Integer, nullable=False, default=1)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        UniqueConstraint("coworking_id", "name", name="uq_workspace_coworking_name"),
        CheckConstraint("capacity >= 1", name="ck_workspace_capacity_positive"),
    )
