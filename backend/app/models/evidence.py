"""
学习档案域模型 - 证据日志表
只追加的审计轨迹，与当前评估行相互独立
"""

from enum import Enum
from typing import Optional

from sqlmodel import Field

from .base import CreatedAtModel


class EvidenceSource(str, Enum):
    """证据来源枚举"""
    CONVERSATION = "conversation"


class EvidenceLog(CreatedAtModel, table=True):
    """
    证据日志表
    每条被接受且带证据的更新写入一行，写入后不可修改、不可删除
    """
    __tablename__ = "evidence_logs"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: str = Field(index=True, nullable=False)
    domain_id: int = Field(foreign_key="domains.id", nullable=False)
    sub_dimension: str = Field(nullable=False)

    # 用户原话或转述
    evidence_text: str = Field(nullable=False)

    source: EvidenceSource = Field(default=EvidenceSource.CONVERSATION, nullable=False)
