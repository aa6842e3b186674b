"""
证据日志 Repository
evidence_logs 只追加，不提供修改和删除
"""

from typing import Sequence

from sqlmodel import Session

from app.models.evidence import EvidenceLog


class EvidenceRepository:
    """证据日志数据访问对象"""

    def __init__(self, session: Session):
        self.session = session

    def append_many(self, logs: Sequence[EvidenceLog]) -> int:
        """
        批量追加证据记录

        Args:
            logs: 待写入的 EvidenceLog 列表

        Returns:
            写入的条数
        """
        if not logs:
            return 0
        self.session.add_all(list(logs))
        self.session.commit()
        return len(logs)

