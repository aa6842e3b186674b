"""
档案快照读取

读取用户当前的子维度评估和领域优先级，并格式化为可以注入 Prompt 的文本。
只读，不参与写入链路。
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field
from sqlalchemy.engine import Engine
from sqlmodel import Session

from app.repositories.assessment_repository import AssessmentRepository
from app.repositories.domain_repository import DomainRepository

PROFILE_HEADER = "=== 用户学习档案 ==="
PROFILE_FOOTER = "=== 档案结束 ==="


class AssessmentView(BaseModel):
    """快照中的一条子维度评估"""
    domain_id: int
    domain_name: Optional[str] = None
    sub_dimension: str
    is_custom: bool = False
    level_label: str
    level_score: float
    content_layer: str
    learning_nature: Optional[str] = None
    cognitive_state: Optional[str] = None
    motivation_state: Optional[str] = None


class PriorityView(BaseModel):
    """快照中的一条领域优先级"""
    domain_id: int
    domain_name: Optional[str] = None
    priority_score: float
    priority_notes: Optional[str] = None


class ProfileSnapshot(BaseModel):
    assessments: List[AssessmentView] = Field(default_factory=list)
    priorities: List[PriorityView] = Field(default_factory=list)


class ProfileSnapshotReader:
    """档案快照读取器"""

    def __init__(self, engine: Engine):
        self.engine = engine

    def get_user_profile(self, user_id: str) -> ProfileSnapshot:
        """
        拉取完整档案（子维度 + 优先级）

        评估按领域升序、分数降序；优先级按分数降序。

        Args:
            user_id: 用户 ID

        Returns:
            ProfileSnapshot
        """
        with Session(self.engine) as session:
            domain_repo = DomainRepository(session)
            names = domain_repo.get_name_map()

            assessments = [
                AssessmentView(
                    domain_id=row.domain_id,
                    domain_name=names.get(row.domain_id),
                    sub_dimension=row.sub_dimension,
                    is_custom=row.is_custom,
                    level_label=row.level_label,
                    level_score=row.level_score,
                    content_layer=row.content_layer,
                    learning_nature=row.learning_nature,
                    cognitive_state=row.cognitive_state.value if row.cognitive_state else None,
                    motivation_state=row.motivation_state.value if row.motivation_state else None,
                )
                for row in AssessmentRepository(session).get_all_by_user(user_id)
            ]

            priorities = [
                PriorityView(
                    domain_id=p.domain_id,
                    domain_name=names.get(p.domain_id),
                    priority_score=p.priority_score,
                    priority_notes=p.priority_notes,
                )
                for p in domain_repo.get_priorities_by_user(user_id)
            ]

        return ProfileSnapshot(assessments=assessments, priorities=priorities)


def _format_score(score: float) -> str:
    return str(int(score)) if float(score).is_integer() else f"{score:g}"


def format_profile_for_prompt(snapshot: ProfileSnapshot) -> str:
    """
    将档案格式化为 Prompt 注入文本

    每个领域一段，领域头取该领域第一行评估的层、性质、认知、意愿。

    Args:
        snapshot: 档案快照

    Returns:
        str: 多行文本
    """
    by_domain: Dict[int, List[AssessmentView]] = {}
    for row in snapshot.assessments:
        by_domain.setdefault(row.domain_id, []).append(row)

    priority_map = {p.domain_id: p for p in snapshot.priorities}

    lines = [PROFILE_HEADER]

    for domain_id, rows in by_domain.items():
        first = rows[0]
        domain_name = first.domain_name or f"域{domain_id}"
        priority = priority_map.get(domain_id)
        priority_text = _format_score(priority.priority_score) if priority else "?"

        lines.append(
            f"\n【{domain_name}】优先级:{priority_text}/10"
            f" | 层:{first.content_layer or 'universal'}"
            f" | 性质:{first.learning_nature or ''}"
            f" | 认知:{first.cognitive_state or ''}"
            f" | 意愿:{first.motivation_state or ''}"
        )

        for row in rows:
            custom = "[个性化]" if row.is_custom else ""
            lines.append(f"  - {row.sub_dimension}{custom}: {row.level_label}({_format_score(row.level_score)}/10)")

    lines.append(f"\n{PROFILE_FOOTER}")
    return "\n".join(lines)
