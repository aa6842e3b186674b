"""
档案更新流水线节点

parse_node / normalize_node 是纯函数；
persist_node / record_turn_node 依赖存储，由 graph.py 注入写入器后构造。
"""

import logging
from typing import TYPE_CHECKING, Callable

from langchain_core.runnables import RunnableConfig

from app.agent.pipeline.normalizer import MAX_UPDATES_PER_COMPLETION, normalize_updates
from app.agent.pipeline.parser import parse_ai_response
from app.agent.pipeline.state import PipelineStage, ProfileUpdateState

if TYPE_CHECKING:
    from app.services.conversation_log import ConversationRecorder
    from app.services.reconciliation import ReconciliationWriter

logger = logging.getLogger(__name__)


def _get_user_id_from_config(config: RunnableConfig) -> str:
    """
    从 LangGraph config 中获取 user_id

    Raises:
        ValueError: user_id 缺失或不是非空字符串
    """
    user_id = (config or {}).get("configurable", {}).get("user_id")
    if not isinstance(user_id, str) or not user_id:
        raise ValueError("config['configurable']['user_id'] must be a non-empty string")
    return user_id


def parse_node(state: ProfileUpdateState) -> ProfileUpdateState:
    """解析双轨输出：回复文本 + 原始 update 记录"""
    parsed = parse_ai_response(state.get("raw_completion"))
    logger.debug("Parsed completion: %d raw updates, %d diagnostics",
                 len(parsed.raw_updates), len(parsed.diagnostics))
    return {
        "stage": PipelineStage.PARSED,
        "response": parsed.response,
        "raw_updates": parsed.raw_updates,
        "diagnostics": parsed.diagnostics,
    }


def make_normalize_node(max_updates: int = MAX_UPDATES_PER_COMPLETION) -> Callable:
    def normalize_node(state: ProfileUpdateState) -> ProfileUpdateState:
        """逐条校验原始记录并截断到上限"""
        result = normalize_updates(state.get("raw_updates", []), max_updates=max_updates)
        return {
            "stage": PipelineStage.NORMALIZED,
            "updates": result.accepted,
            "rejected": result.rejected,
            "truncated": result.truncated,
        }

    return normalize_node


def route_after_normalize(state: ProfileUpdateState) -> str:
    """没有可写入的更新时跳过持久化"""
    if state.get("updates"):
        return "persist_node"
    return "record_turn_node"


def make_persist_node(writer: "ReconciliationWriter") -> Callable:
    def persist_node(state: ProfileUpdateState, config: RunnableConfig) -> ProfileUpdateState:
        """写入评估与证据；失败降级为 persist_failed，流程继续"""
        user_id = _get_user_id_from_config(config)
        result = writer.apply(user_id, state.get("updates", []))
        if not result.ok:
            logger.warning("Profile persistence degraded for user %s: %s", user_id, result.status.value)
        persist_stage = PipelineStage.PERSISTED if result.ok else PipelineStage.PERSIST_FAILED
        return {
            "stage": persist_stage,
            "persist_stage": persist_stage,
            "persist_result": result,
        }

    return persist_node


def make_record_turn_node(recorder: "ConversationRecorder") -> Callable:
    def record_turn_node(state: ProfileUpdateState, config: RunnableConfig) -> ProfileUpdateState:
        """追加本轮对话流水，附带被接受的更新"""
        user_id = _get_user_id_from_config(config)
        logged = recorder.record(
            user_id=user_id,
            user_message=state.get("user_message", ""),
            assistant_reply=state.get("response", ""),
            updates=state.get("updates", [])
        )
        return {"stage": PipelineStage.RETURNED, "turn_logged": logged}

    return record_turn_node
