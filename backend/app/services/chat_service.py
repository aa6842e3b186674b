"""
聊天服务层

一次用户消息的完整处理：
1. 读取档案快照并拼装系统提示词
2. 调用学习顾问模型
3. 运行档案更新流水线：解析 -> 规范化 -> 对账写入 -> 对话流水
4. 返回 {response, updates}

模型调用失败和空输出是致命错误；写入失败只降级，不影响返回回复。
"""

import logging
from typing import Any, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.engine import Engine

from app.agent.advisor import call_advisor
from app.agent.level_scale import LevelScale
from app.agent.models import PersistResult, PersistStatus, ProfileUpdate, RejectedUpdate
from app.agent.pipeline.graph import create_profile_update_graph
from app.agent.pipeline.normalizer import MAX_UPDATES_PER_COMPLETION
from app.agent.pipeline.state import PipelineStage
from app.agent.prompts import build_system_prompt
from app.services.conversation_log import ConversationRecorder
from app.services.profile_snapshot import ProfileSnapshotReader, format_profile_for_prompt
from app.services.reconciliation import ReconciliationWriter

logger = logging.getLogger(__name__)


class ChatResult(BaseModel):
    """
    一次请求的结果

    response 和 updates 是返回给前端的部分；其余字段描述降级情况。
    updates 表示尝试写入的更新，不保证已经持久化。
    """
    response: str
    updates: List[ProfileUpdate] = Field(default_factory=list)
    persist_stage: Optional[PipelineStage] = Field(
        default=None,
        description="写入阶段结果：persisted 或 persist_failed；没有更新时为 None"
    )
    persist: PersistResult = Field(default_factory=lambda: PersistResult(status=PersistStatus.SKIPPED))
    rejected: List[RejectedUpdate] = Field(default_factory=list)
    truncated: List[ProfileUpdate] = Field(default_factory=list)
    diagnostics: List[str] = Field(default_factory=list)
    turn_logged: bool = False


class ChatService:
    """
    聊天服务类

    所有依赖在构造时显式传入，不读取进程环境。

    使用示例：
        service = ChatService(engine, llm, level_scale)
        result = service.send_message("user-123", "今天我一个人修好了一个竞态条件")
        print(result.response, result.updates)
    """

    def __init__(
        self,
        engine: Engine,
        llm: Any = None,
        level_scale: Optional[LevelScale] = None,
        max_updates: int = MAX_UPDATES_PER_COMPLETION
    ):
        """
        Args:
            engine: 数据库引擎
            llm: LangChain 聊天模型；只调用 process_completion 时可以为 None
            level_scale: 层级刻度，用于计算 level_score
            max_updates: 单次输出最多接受的更新数
        """
        self.engine = engine
        self.llm = llm
        self.max_updates = max_updates
        self.snapshot_reader = ProfileSnapshotReader(engine)
        self.writer = ReconciliationWriter(engine, level_scale)
        self.recorder = ConversationRecorder(engine)
        self.graph = create_profile_update_graph(self.writer, self.recorder, max_updates=max_updates)

    def build_prompt(self, user_id: str) -> str:
        """读取档案快照并拼装系统提示词"""
        snapshot = self.snapshot_reader.get_user_profile(user_id)
        return build_system_prompt(format_profile_for_prompt(snapshot), max_updates=self.max_updates)

    def process_completion(self, user_id: str, user_message: str, raw_completion: str) -> ChatResult:
        """
        对已有的模型输出运行档案更新流水线

        Args:
            user_id: 用户 ID
            user_message: 用户输入
            raw_completion: 模型原始输出

        Returns:
            ChatResult

        Raises:
            EmptyCompletionError: 模型输出为空
        """
        final_state = self.graph.invoke(
            {
                "stage": PipelineStage.RECEIVED,
                "user_message": user_message,
                "raw_completion": raw_completion,
            },
            config={"configurable": {"user_id": user_id}}
        )

        result = ChatResult(
            response=final_state["response"],
            updates=final_state.get("updates", []),
            persist_stage=final_state.get("persist_stage"),
            persist=final_state.get("persist_result") or PersistResult(status=PersistStatus.SKIPPED),
            rejected=final_state.get("rejected", []),
            truncated=final_state.get("truncated", []),
            diagnostics=final_state.get("diagnostics", []),
            turn_logged=final_state.get("turn_logged", False),
        )
        logger.info(
            "Processed message for user %s: %d updates accepted, %d rejected, persist=%s",
            user_id, len(result.updates), len(result.rejected), result.persist.status.value
        )
        return result

    def send_message(self, user_id: str, message: str) -> ChatResult:
        """
        处理一条用户消息

        Args:
            user_id: 外部认证提供的用户 ID
            message: 用户输入

        Returns:
            ChatResult

        Raises:
            ValueError: 消息为空
            LLMCallError: 模型调用失败，不产生任何档案变更
            EmptyCompletionError: 模型输出为空
        """
        if not message or not message.strip():
            raise ValueError("消息不能为空")
        if self.llm is None:
            raise RuntimeError("ChatService 未配置 LLM，无法调用模型")

        system_prompt = self.build_prompt(user_id)
        raw_completion = call_advisor(self.llm, system_prompt, message)
        return self.process_completion(user_id, message, raw_completion)
