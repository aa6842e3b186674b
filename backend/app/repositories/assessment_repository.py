"""
子维度评估 Repository
提供 profile_assessments 的批量 upsert 与查询
"""

from typing import Any, Dict, List, Sequence

from sqlalchemy.dialects import postgresql, sqlite
from sqlmodel import Session, select, col

from app.models.assessment import ProfileAssessment

# 冲突时覆盖的列；is_custom 和 created_at 只在首次插入时写入
UPSERT_UPDATE_COLUMNS = (
    "level_label",
    "level_score",
    "content_layer",
    "cognitive_state",
    "motivation_state",
    "updated_at",
)
IDENTITY_COLUMNS = ("user_id", "domain_id", "sub_dimension")


class AssessmentRepository:
    """
    子维度评估数据访问对象
    写入只通过 upsert_many，不提供删除
    """

    def __init__(self, session: Session):
        """
        初始化 Repository

        Args:
            session: SQLModel 数据库会话
        """
        self.session = session

    def _insert_for_dialect(self):
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return postgresql.insert(ProfileAssessment)
        if dialect == "sqlite":
            return sqlite.insert(ProfileAssessment)
        raise NotImplementedError(f"不支持的数据库方言: {dialect}")

    def upsert_many(self, rows: Sequence[Dict[str, Any]]) -> int:
        """
        以一条冲突感知语句批量写入评估行

        身份键 (user_id, domain_id, sub_dimension) 冲突时更新已有行，不会产生重复行。
        同一批次里不能出现重复身份键，调用方负责先合并。

        Args:
            rows: 列名到值的字典列表

        Returns:
            写入的行数
        """
        if not rows:
            return 0

        stmt = self._insert_for_dialect().values(list(rows))
        stmt = stmt.on_conflict_do_update(
            index_elements=list(IDENTITY_COLUMNS),
            set_={column: stmt.excluded[column] for column in UPSERT_UPDATE_COLUMNS}
        )
        self.session.exec(stmt)
        self.session.commit()
        return len(rows)

    def get_all_by_user(self, user_id: str) -> List[ProfileAssessment]:
        """
        获取用户的所有评估，按领域升序、分数降序

        Args:
            user_id: 用户 ID

        Returns:
            ProfileAssessment 对象列表
        """
        statement = (
            select(ProfileAssessment)
            .where(ProfileAssessment.user_id == user_id)
            .order_by(col(ProfileAssessment.domain_id), col(ProfileAssessment.level_score).desc())
        )
        return list(self.session.exec(statement).all())
