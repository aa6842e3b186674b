"""
聊天接口

POST /api/chat：用户输入 -> 档案注入 -> LLM -> 解析 -> 写库 -> 返回
用户身份由上游认证代理通过 X-User-Id 请求头传入。
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from app.agent.errors import ProfilePipelineError
from app.agent.models import ProfileUpdate
from app.agent.prompts import EMPTY_MESSAGE_ERROR, GENERIC_SERVER_ERROR, UNAUTHENTICATED_ERROR
from app.services.chat_service import ChatService

router = APIRouter(prefix="/api", tags=["chat"])
logger = logging.getLogger(__name__)

_chat_service: Optional[ChatService] = None


class ChatRequest(BaseModel):
    # 非字符串的 message 按空消息处理，返回 400 而不是 422
    message: Optional[Any] = None


class ChatResponse(BaseModel):
    response: str
    updates: List[ProfileUpdate]


def get_chat_service() -> ChatService:
    """按需创建全局 ChatService；配置在这里一次性读取后显式注入"""
    global _chat_service
    if _chat_service is None:
        from app.agent.level_scale import load_level_scale
        from app.agent.llm_factory import LLMFactory
        from app.db.init_db import init_db

        level_scale = load_level_scale()
        engine = init_db(level_scale=level_scale)
        _chat_service = ChatService(engine, LLMFactory().create_llm(), level_scale)
    return _chat_service


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHENTICATED_ERROR)
    return x_user_id.strip()


@router.post("/chat", response_model=ChatResponse)
def chat(
    payload: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    service: ChatService = Depends(get_chat_service),
) -> ChatResponse:
    if not isinstance(payload.message, str) or not payload.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=EMPTY_MESSAGE_ERROR)

    try:
        result = service.send_message(user_id, payload.message)
    except ProfilePipelineError:
        logger.exception("/api/chat failed for user %s", user_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=GENERIC_SERVER_ERROR)

    return ChatResponse(response=result.response, updates=result.updates)
