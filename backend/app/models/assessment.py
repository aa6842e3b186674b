"""
学习档案域模型 - 子维度评估表
每个 (user_id, domain_id, sub_dimension) 只有一行当前评估
"""

from enum import Enum
from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field

from .base import TimestampModel


class CognitiveState(str, Enum):
    """认知状态枚举：用户对自身该能力的认知清晰度"""
    CLEAR = "clear"
    SENSING = "sensing"
    AWARE = "aware"
    UNAWARE = "unaware"


class MotivationState(str, Enum):
    """意愿状态枚举：用户在该能力上的学习动力"""
    DRIVEN = "driven"
    INTERESTED = "interested"
    PASSIVE = "passive"
    NONE = "none"


DEFAULT_CONTENT_LAYER = "universal"


class ProfileAssessment(TimestampModel, table=True):
    """
    子维度评估表
    存储用户在每个领域、每个子维度上的当前层级，只由对账写入器修改
    """
    __tablename__ = "profile_assessments"

    # 身份键：同一用户同一领域的同一子维度只有一行
    __table_args__ = (
        UniqueConstraint("user_id", "domain_id", "sub_dimension", name="uix_user_domain_subdim"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    # 外部认证系统提供的不透明用户 ID
    user_id: str = Field(index=True, nullable=False)

    domain_id: int = Field(foreign_key="domains.id", index=True, nullable=False)

    # 子维度 key：可以是预定义 key，也可以是用户个性化标签
    sub_dimension: str = Field(nullable=False)

    # 是否为用户个性化子维度（只在首次插入时写入）
    is_custom: bool = Field(default=False, nullable=False)

    # 层级描述，如 "运用->熟练"，是层级的唯一事实来源
    level_label: str = Field(nullable=False)

    # 由 LevelScale 根据 level_label 计算的 0-10 分
    level_score: float = Field(default=1.0, ge=0, le=10, nullable=False)

    content_layer: str = Field(default=DEFAULT_CONTENT_LAYER, nullable=False)

    # 学习性质：由其他流程维护，本流水线只读
    learning_nature: Optional[str] = Field(default=None)

    cognitive_state: Optional[CognitiveState] = Field(default=None)
    motivation_state: Optional[MotivationState] = Field(default=None)
