"""
学习档案域模型 - 领域表与领域优先级表
"""

from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from .base import TimestampModel


class Domain(SQLModel, table=True):
    """顶层学习领域，如 "编程"，由领域配置初始化"""
    __tablename__ = "domains"

    id: int = Field(primary_key=True)
    name: str = Field(nullable=False)


class DomainPriority(TimestampModel, table=True):
    """
    领域优先级表
    由外部流程维护，本流水线只在拼装 Prompt 时读取
    """
    __tablename__ = "domain_priorities"
    __table_args__ = (UniqueConstraint("user_id", "domain_id", name="uix_user_domain_priority"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True, nullable=False)
    domain_id: int = Field(foreign_key="domains.id", nullable=False)
    priority_score: float = Field(default=0, ge=0, le=10, nullable=False)
    priority_notes: Optional[str] = Field(default=None)
