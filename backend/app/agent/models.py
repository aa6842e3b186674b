"""
Agent 数据模型 - 双轨输出的结构化记录

原始的 update 块是结构不确定的 JSON，这里分两步收口：
1. RawProfileUpdate：宽松的中间形态，只接受已知字段，类型不做强约束
2. ProfileUpdate：规范化后的档案更新，必填字段齐全，可选枚举已校验

任何未经校验的字典都不能越过 Normalizer 边界。
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.assessment import CognitiveState, MotivationState, DEFAULT_CONTENT_LAYER

# 数据库 BIGINT 上限，超出的 ID 无法写入
MAX_DOMAIN_ID = 2 ** 63 - 1


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _lenient_enum(enum_cls, value: Any) -> Any:
    """未知的枚举值视为缺省，保证向前兼容模型新增的状态标签"""
    if value is None or isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return None
    return None


class RawProfileUpdate(BaseModel):
    """
    update 块中单条记录的原始形态

    字段类型保持 Any，由 ProfileUpdate 负责真正的校验；未知字段忽略。
    """
    model_config = ConfigDict(extra="ignore")

    domain_id: Any = None
    sub_dimension: Any = None
    level_label: Any = None
    evidence: Any = None
    cognitive_state: Any = None
    motivation_state: Any = None
    content_layer: Any = None


class ProfileUpdate(BaseModel):
    """
    规范化的档案更新

    身份键为 (user_id, domain_id, sub_dimension)，user_id 由调用方提供。
    """
    model_config = ConfigDict(extra="ignore", use_enum_values=False)

    domain_id: int = Field(ge=0, le=MAX_DOMAIN_ID, description="顶层学习领域 ID")
    sub_dimension: str = Field(min_length=1, description="子维度 key 或个性化标签")
    level_label: str = Field(min_length=1, description="层级描述，如 '运用->熟练'")
    evidence: Optional[str] = Field(default=None, description="支撑判断的用户原话或转述")
    cognitive_state: Optional[CognitiveState] = None
    motivation_state: Optional[MotivationState] = None
    content_layer: str = Field(default=DEFAULT_CONTENT_LAYER)

    @field_validator("domain_id", mode="before")
    @classmethod
    def _coerce_domain_id(cls, value: Any) -> Any:
        # bool 是 int 的子类，不能当作领域 ID
        if isinstance(value, bool):
            raise ValueError("domain_id must be an integer, got bool")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("domain_id must be an integer")
            return int(value)
        if isinstance(value, str):
            value = value.strip()
            if not value.lstrip("-").isdigit():
                raise ValueError("domain_id must be an integer")
            return int(value)
        return value

    @field_validator("sub_dimension", "level_label", mode="before")
    @classmethod
    def _require_text(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("must be a string")
        return value.strip()

    @field_validator("evidence", mode="before")
    @classmethod
    def _clean_evidence(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, str):
            return None
        return _blank_to_none(value)

    @field_validator("cognitive_state", mode="before")
    @classmethod
    def _lenient_cognitive_state(cls, value: Any) -> Any:
        return _lenient_enum(CognitiveState, value)

    @field_validator("motivation_state", mode="before")
    @classmethod
    def _lenient_motivation_state(cls, value: Any) -> Any:
        return _lenient_enum(MotivationState, value)

    @field_validator("content_layer", mode="before")
    @classmethod
    def _default_content_layer(cls, value: Any) -> Any:
        if not isinstance(value, str) or not value.strip():
            return DEFAULT_CONTENT_LAYER
        return value.strip()

    @property
    def identity(self) -> tuple:
        """(domain_id, sub_dimension)，与 user_id 共同组成身份键"""
        return (self.domain_id, self.sub_dimension)


class RejectionReason(str, Enum):
    """记录被拒绝的原因"""
    NOT_AN_OBJECT = "not_an_object"
    INVALID_FIELDS = "invalid_fields"


class RejectedUpdate(BaseModel):
    """被 Normalizer 拒绝的记录"""
    index: int = Field(description="记录在本次输出中的位置（0-based）")
    reason: RejectionReason
    errors: List[str] = Field(default_factory=list, description="出错字段与原因")


class NormalizationResult(BaseModel):
    """一批记录的规范化结果"""
    accepted: List[ProfileUpdate] = Field(default_factory=list)
    rejected: List[RejectedUpdate] = Field(default_factory=list)
    truncated: List[ProfileUpdate] = Field(
        default_factory=list,
        description="校验通过但超出单次上限而被丢弃的记录"
    )


class ParsedCompletion(BaseModel):
    """双轨输出的解析结果"""
    response: str
    raw_updates: List[Any] = Field(default_factory=list)
    diagnostics: List[str] = Field(
        default_factory=list,
        description="被跳过的 update 块说明，不影响请求"
    )


class PersistStatus(str, Enum):
    """一次写入的整体状态"""
    PERSISTED = "persisted"
    PARTIAL = "partial"
    FAILED = "failed"
    SKIPPED = "skipped"


class PersistStage(str, Enum):
    ASSESSMENT_UPSERT = "assessment_upsert"
    EVIDENCE_INSERT = "evidence_insert"


class PersistFailure(BaseModel):
    stage: PersistStage
    error: str


class PersistResult(BaseModel):
    """
    对账写入结果

    持久化是尽力而为的，失败不会抛出，调用方和测试据此判断是否降级。
    """
    status: PersistStatus
    assessments_written: int = 0
    evidence_written: int = 0
    failures: List[PersistFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures
