"""
对话流水记录

每轮对话追加用户消息和助手回复，与档案状态无关；写入失败只记录日志。
"""

import logging
from typing import Sequence

from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.agent.models import ProfileUpdate
from app.repositories.conversation_repository import ConversationRepository
from app.services.reconciliation import STORAGE_ERRORS

logger = logging.getLogger(__name__)


class ConversationRecorder:
    """对话流水记录器"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def record(
        self,
        user_id: str,
        user_message: str,
        assistant_reply: str,
        updates: Sequence[ProfileUpdate] = ()
    ) -> bool:
        """
        追加一轮对话

        Returns:
            bool: 是否写入成功
        """
        profile_update = [u.model_dump(mode="json") for u in updates] or None
        try:
            with Session(self.engine) as session:
                ConversationRepository(session).append_turn(
                    user_id=user_id,
                    user_message=user_message,
                    assistant_reply=assistant_reply,
                    profile_update=profile_update
                )
            return True
        except STORAGE_ERRORS:
            logger.error("Failed to record conversation turn for user %s", user_id, exc_info=True)
            return False
