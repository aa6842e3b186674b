"""
数据库模型模块
导出所有表模型和枚举类型
"""

# 学习档案域
from .domain import Domain, DomainPriority
from .assessment import (
    ProfileAssessment,
    CognitiveState,
    MotivationState,
    DEFAULT_CONTENT_LAYER,
)
from .evidence import EvidenceLog, EvidenceSource

# 会话域
from .conversation import ConversationMessage, MessageRole, TriggerMode

# 基础模型
from .base import TimestampModel, CreatedAtModel

__all__ = [
    # 学习档案域
    "Domain", "DomainPriority",
    "ProfileAssessment", "CognitiveState", "MotivationState", "DEFAULT_CONTENT_LAYER",
    "EvidenceLog", "EvidenceSource",
    # 会话域
    "ConversationMessage", "MessageRole", "TriggerMode",
    # 基础模型
    "TimestampModel", "CreatedAtModel",
]
