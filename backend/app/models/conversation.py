"""
会话域模型 - 对话流水表
每轮对话写入用户消息和助手回复两行，只追加
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import Field, Column, JSON

from .base import CreatedAtModel


class MessageRole(str, Enum):
    """消息角色枚举"""
    USER = "user"
    ASSISTANT = "assistant"


class TriggerMode(str, Enum):
    """触发模式枚举：当前只有自由输入模式"""
    FREE_INPUT = "free_input"


class ConversationMessage(CreatedAtModel, table=True):
    """
    对话流水表
    与档案状态无关的不可变日志
    """
    __tablename__ = "conversations"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: str = Field(index=True, nullable=False)

    role: MessageRole = Field(nullable=False)

    content: str = Field(nullable=False)

    trigger_mode: TriggerMode = Field(default=TriggerMode.FREE_INPUT, nullable=False)

    # 助手消息附带本轮被接受的档案更新，没有更新时为 NULL
    profile_update: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        sa_column=Column(JSON)
    )
