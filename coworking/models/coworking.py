"""
@description 联合办公空间模型
@responsibility 记录联合办公空间的基本信息
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from coworking.core.database import Base


class Coworking(Base):
    __tablename__ = "coworkings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    address = Column(String(200), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    phone_number = Column(String(32), nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
