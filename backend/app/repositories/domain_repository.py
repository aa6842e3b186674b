"""
领域与领域优先级 Repository（只读）
"""

from typing import Dict, List

from sqlmodel import Session, select, col

from app.models.domain import Domain, DomainPriority


class DomainRepository:
    """领域数据访问对象"""

    def __init__(self, session: Session):
        self.session = session

    def get_name_map(self) -> Dict[int, str]:
        """返回 {domain_id: name}"""
        return {domain.id: domain.name for domain in self.session.exec(select(Domain)).all()}

    def get_priorities_by_user(self, user_id: str) -> List[DomainPriority]:
        """按优先级降序返回用户的领域优先级"""
        statement = (
            select(DomainPriority)
            .where(DomainPriority.user_id == user_id)
            .order_by(col(DomainPriority.priority_score).desc())
        )
        return list(self.session.exec(statement).all())
