"""
档案更新流水线图定义

    graph TD
        START((Start)) --> PARSE[parse_node]
        PARSE --> NORMALIZE[normalize_node]
        NORMALIZE -->|有更新| PERSIST[persist_node]
        NORMALIZE -->|无更新| RECORD[record_turn_node]
        PERSIST --> RECORD
        RECORD --> END((End))

每次请求独立执行，不使用 checkpoint，不重试。
"""

from typing import TYPE_CHECKING

from langgraph.graph import StateGraph, END

from app.agent.pipeline.normalizer import MAX_UPDATES_PER_COMPLETION
from app.agent.pipeline.nodes import (
    parse_node,
    make_normalize_node,
    make_persist_node,
    make_record_turn_node,
    route_after_normalize,
)
from app.agent.pipeline.state import ProfileUpdateState

if TYPE_CHECKING:
    from app.services.conversation_log import ConversationRecorder
    from app.services.reconciliation import ReconciliationWriter


def create_profile_update_graph(
    writer: "ReconciliationWriter",
    recorder: "ConversationRecorder",
    max_updates: int = MAX_UPDATES_PER_COMPLETION
):
    """
    创建档案更新流水线

    Args:
        writer: 对账写入器
        recorder: 对话流水记录器
        max_updates: 单次输出最多接受的更新数

    Returns:
        编译后的 LangGraph 实例
    """
    workflow = StateGraph(ProfileUpdateState)

    workflow.add_node("parse_node", parse_node)
    workflow.add_node("normalize_node", make_normalize_node(max_updates))
    workflow.add_node("persist_node", make_persist_node(writer))
    workflow.add_node("record_turn_node", make_record_turn_node(recorder))

    workflow.set_entry_point("parse_node")
    workflow.add_edge("parse_node", "normalize_node")
    workflow.add_conditional_edges(
        "normalize_node",
        route_after_normalize,
        {
            "persist_node": "persist_node",
            "record_turn_node": "record_turn_node",
        }
    )
    workflow.add_edge("persist_node", "record_turn_node")
    workflow.add_edge("record_turn_node", END)

    return workflow.compile()
