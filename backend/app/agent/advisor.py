"""
学习顾问模型调用

一次调用 = 系统提示词（含档案快照）+ 用户消息，返回模型的原始文本。
"""

import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from app.agent.errors import LLMCallError

logger = logging.getLogger(__name__)


def _content_to_text(content: Any) -> str:
    # 部分模型返回分段内容：[{"type": "text", "text": "..."}]
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


def call_advisor(llm: Any, system_prompt: str, user_message: str) -> str:
    """
    调用学习顾问模型

    Args:
        llm: LangChain 聊天模型
        system_prompt: 系统提示词
        user_message: 用户输入

    Returns:
        str: 模型原始输出

    Raises:
        LLMCallError: 模型调用失败
    """
    messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_message)]
    try:
        result = llm.invoke(messages)
    except Exception as e:
        logger.error("Advisor model call failed: %s", e)
        raise LLMCallError(f"模型调用失败: {e}") from e

    return _content_to_text(getattr(result, "content", result))
