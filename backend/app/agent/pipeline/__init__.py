"""
档案更新流水线

解析 -> 规范化 -> 对账写入 -> 对话流水

使用示例:
    from app.agent.pipeline import create_profile_update_graph

    graph = create_profile_update_graph(writer, recorder)
    state = graph.invoke(
        {"user_message": message, "raw_completion": raw},
        config={"configurable": {"user_id": user_id}}
    )
"""

from app.agent.pipeline.parser import parse_ai_response
from app.agent.pipeline.normalizer import normalize_update, normalize_updates, MAX_UPDATES_PER_COMPLETION
from app.agent.pipeline.state import PipelineStage, ProfileUpdateState
from app.agent.pipeline.graph import create_profile_update_graph

__all__ = [
    "parse_ai_response",
    "normalize_update",
    "normalize_updates",
    "MAX_UPDATES_PER_COMPLETION",
    "PipelineStage",
    "ProfileUpdateState",
    "create_profile_update_graph",
]
