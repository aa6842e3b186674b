"""
档案更新规范化

把解析出的原始记录逐条校验为 ProfileUpdate，单条失败只丢弃该条；
整批通过后按输出顺序截取前 MAX_UPDATES_PER_COMPLETION 条。
"""

import logging
from typing import Any, List, Sequence, Union

from pydantic import ValidationError

from app.agent.models import (
    NormalizationResult,
    ProfileUpdate,
    RawProfileUpdate,
    RejectedUpdate,
    RejectionReason,
)

logger = logging.getLogger(__name__)

MAX_UPDATES_PER_COMPLETION = 3


def _format_errors(error: ValidationError) -> List[str]:
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "record"
        messages.append(f"{location}: {item.get('msg', 'invalid')}")
    return messages


def normalize_update(raw: Any, index: int = 0) -> Union[ProfileUpdate, RejectedUpdate]:
    """
    校验单条原始记录

    Args:
        raw: 原始记录（任意结构）
        index: 记录在本次输出中的位置，用于拒绝原因

    Returns:
        ProfileUpdate 或 RejectedUpdate
    """
    if not isinstance(raw, dict):
        return RejectedUpdate(
            index=index,
            reason=RejectionReason.NOT_AN_OBJECT,
            errors=[f"expected object, got {type(raw).__name__}"]
        )

    try:
        shape = RawProfileUpdate.model_validate(raw)
        return ProfileUpdate.model_validate(shape.model_dump(exclude_unset=True))
    except ValidationError as e:
        return RejectedUpdate(
            index=index,
            reason=RejectionReason.INVALID_FIELDS,
            errors=_format_errors(e)
        )


def normalize_updates(
    raw_updates: Sequence[Any],
    max_updates: int = MAX_UPDATES_PER_COMPLETION
) -> NormalizationResult:
    """
    规范化一批原始记录

    截断策略：先逐条校验，再保留前 max_updates 条通过的记录（保持输出顺序），
    其余记入 truncated，不重试。

    Args:
        raw_updates: 解析器输出的原始记录列表
        max_updates: 单次输出最多接受的更新数

    Returns:
        NormalizationResult
    """
    valid: List[ProfileUpdate] = []
    rejected: List[RejectedUpdate] = []

    for index, raw in enumerate(raw_updates):
        result = normalize_update(raw, index)
        if isinstance(result, RejectedUpdate):
            logger.warning("Rejected update #%d (%s): %s", index, result.reason.value, result.errors)
            rejected.append(result)
        else:
            valid.append(result)

    accepted, truncated = valid[:max_updates], valid[max_updates:]
    if truncated:
        logger.info("Dropped %d updates beyond the per-completion cap of %d", len(truncated), max_updates)

    return NormalizationResult(accepted=accepted, rejected=rejected, truncated=truncated)
