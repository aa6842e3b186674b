"""
双轨输出解析器

一次模型输出同时包含两部分：
- <response>...</response>：给用户看的回复
- <update>...</update>：零个或多个 JSON 块（单个对象或对象数组），用于更新档案

解析对 update 块是容错的：坏块跳过并记录诊断信息，不影响其他块和回复文本。
"""

import json
import logging
import re
from typing import Any, List, Optional

from app.agent.errors import EmptyCompletionError
from app.agent.models import ParsedCompletion

logger = logging.getLogger(__name__)

RESPONSE_BLOCK = re.compile(r"<response>([\s\S]*?)</response>", re.IGNORECASE)
UPDATE_BLOCK = re.compile(r"<update>([\s\S]*?)</update>", re.IGNORECASE)


def extract_response_text(raw: str) -> str:
    """取第一个 <response> 块；没有标记时整段输出就是回复"""
    match = RESPONSE_BLOCK.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


def extract_update_blocks(raw: str) -> List[str]:
    """按出现顺序返回所有 <update> 块的内部文本"""
    return [m.group(1).strip() for m in UPDATE_BLOCK.finditer(raw)]


def parse_ai_response(raw: Optional[str]) -> ParsedCompletion:
    """
    解析一次模型输出

    Args:
        raw: 模型原始输出

    Returns:
        ParsedCompletion: 回复文本、按顺序拼接的原始 update 记录、诊断信息

    Raises:
        EmptyCompletionError: 输出为 None 或全是空白
    """
    if raw is None or not raw.strip():
        raise EmptyCompletionError("模型输出为空，无法解析回复")

    response = extract_response_text(raw)
    raw_updates: List[Any] = []
    diagnostics: List[str] = []

    for block_index, block in enumerate(extract_update_blocks(raw)):
        if not block:
            diagnostics.append(f"update block #{block_index} is empty")
            continue

        try:
            payload = json.loads(block)
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse update block #%d: %s", block_index, e)
            diagnostics.append(f"update block #{block_index} is not valid JSON: {e.msg}")
            continue

        if isinstance(payload, list):
            raw_updates.extend(payload)
        elif isinstance(payload, dict):
            raw_updates.append(payload)
        else:
            logger.warning(
                "Skipping update block #%d: expected object or array, got %s",
                block_index, type(payload).__name__
            )
            diagnostics.append(
                f"update block #{block_index} is {type(payload).__name__}, expected object or array"
            )

    return ParsedCompletion(response=response, raw_updates=raw_updates, diagnostics=diagnostics)
