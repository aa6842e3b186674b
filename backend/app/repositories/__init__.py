"""
Repository (DAO) 模块
提供数据库操作的抽象层
"""

from .assessment_repository import AssessmentRepository
from .evidence_repository import EvidenceRepository
from .conversation_repository import ConversationRepository
from .domain_repository import DomainRepository

__all__ = [
    "AssessmentRepository",
    "EvidenceRepository",
    "ConversationRepository",
    "DomainRepository"
]
