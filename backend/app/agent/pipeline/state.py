"""
档案更新流水线状态定义

单次请求内的状态流转：
    received -> parsed -> normalized -> (persisted | persist_failed) -> returned
persist_failed 不阻断流程，仍然会走到 returned。
"""

from enum import Enum
from typing import Any, List, Optional, TypedDict

from app.agent.models import PersistResult, ProfileUpdate, RejectedUpdate


class PipelineStage(str, Enum):
    RECEIVED = "received"
    PARSED = "parsed"
    NORMALIZED = "normalized"
    PERSISTED = "persisted"
    PERSIST_FAILED = "persist_failed"
    RETURNED = "returned"


class ProfileUpdateState(TypedDict, total=False):
    """
    流水线状态

    user_id 不放在状态里，由 config["configurable"]["user_id"] 传入。
    """

    # --- 输入 ---
    user_message: str
    raw_completion: str

    # --- 当前阶段 ---
    stage: PipelineStage

    # --- 解析器输出 ---
    response: str
    raw_updates: List[Any]
    diagnostics: List[str]

    # --- 规范化输出 ---
    # updates 是最终被接受的列表（已截断），也是返回给调用方的 "档案已更新" 列表
    updates: List[ProfileUpdate]
    rejected: List[RejectedUpdate]
    truncated: List[ProfileUpdate]

    # --- 写入结果 ---
    # 写入阶段的结果（persisted 或 persist_failed），跳过写入时不存在
    persist_stage: PipelineStage
    persist_result: Optional[PersistResult]
    turn_logged: bool
