"""
对话流水 Repository
conversations 只追加
"""

from typing import Any, Dict, List, Optional

from sqlmodel import Session

from app.models.conversation import ConversationMessage, MessageRole, TriggerMode


class ConversationRepository:
    """对话流水数据访问对象"""

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def append_turn(
        self,
        user_id: str,
        user_message: str,
        assistant_reply: str,
        profile_update: Optional[List[Dict[str, Any]]] = None,
        trigger_mode: TriggerMode = TriggerMode.FREE_INPUT
    ) -> List[ConversationMessage]:
        """
        追加一轮对话：用户消息 + 助手回复

        Args:
            user_id: 用户 ID
            user_message: 用户输入
            assistant_reply: 展示给用户的回复
            profile_update: 本轮被接受的档案更新（JSON 形式），没有时为 None
            trigger_mode: 触发模式

        Returns:
            写入的两条 ConversationMessage
        """
        messages = [
            ConversationMessage(
                user_id=user_id,
                role=MessageRole.USER,
                content=user_message,
                trigger_mode=trigger_mode
            ),
            ConversationMessage(
                user_id=user_id,
                role=MessageRole.ASSISTANT,
                content=assistant_reply,
                trigger_mode=trigger_mode,
                profile_update=profile_update or None
            ),
        ]
        self.session.add_all(messages)
        self.session.commit()
        for message in messages:
            self.session.refresh(message)
        return messages

