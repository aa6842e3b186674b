"""
服务层模块
提供业务逻辑的抽象层，封装完整的请求流程
"""

from .chat_service import ChatService, ChatResult
from .reconciliation import ReconciliationWriter
from .profile_snapshot import ProfileSnapshotReader, format_profile_for_prompt
from .conversation_log import ConversationRecorder

__all__ = [
    "ChatService",
    "ChatResult",
    "ReconciliationWriter",
    "ProfileSnapshotReader",
    "format_profile_for_prompt",
    "ConversationRecorder"
]
