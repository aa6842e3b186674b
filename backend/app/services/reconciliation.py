"""
对账写入器

把规范化后的档案更新合并进持久化状态：
1. 子维度评估：按身份键 (user_id, domain_id, sub_dimension) 批量 upsert，冲突即覆盖
2. 证据日志：每条带证据的更新追加一行，只插入

持久化是尽力而为的：任一步骤失败都记录日志并体现在 PersistResult 中，
不会抛出到流水线，保证对话回复始终能返回给用户。
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.agent.level_scale import LevelScale, PLACEHOLDER_LEVEL_SCORE
from app.agent.models import (
    PersistFailure,
    PersistResult,
    PersistStage,
    PersistStatus,
    ProfileUpdate,
)
from app.models.base import utc_now
from app.models.evidence import EvidenceLog, EvidenceSource
from app.repositories.assessment_repository import AssessmentRepository
from app.repositories.evidence_repository import EvidenceRepository

logger = logging.getLogger(__name__)

# 驱动层的 OverflowError 不会被 SQLAlchemy 包装；不支持的方言抛 NotImplementedError
STORAGE_ERRORS = (SQLAlchemyError, OverflowError, NotImplementedError)


def merge_by_identity(updates: Sequence[ProfileUpdate]) -> List[ProfileUpdate]:
    """
    合并同一批次内重复的身份键，后出现的记录覆盖先出现的

    结果按每个身份键最后一次出现的位置排序。
    """
    merged: Dict[tuple, ProfileUpdate] = {}
    for update in updates:
        merged.pop(update.identity, None)
        merged[update.identity] = update
    return list(merged.values())


class ReconciliationWriter:
    """
    对账写入器

    使用示例：
        writer = ReconciliationWriter(engine, load_level_scale())
        result = writer.apply("user-123", updates)
        if not result.ok:
            ...
    """

    def __init__(self, engine: Engine, level_scale: Optional[LevelScale] = None):
        """
        Args:
            engine: 数据库引擎
            level_scale: 层级刻度；None 时所有分数写占位值
        """
        self.engine = engine
        self.level_scale = level_scale

    def score_for(self, update: ProfileUpdate) -> float:
        if self.level_scale is None:
            return PLACEHOLDER_LEVEL_SCORE
        return self.level_scale.score_for(update.domain_id, update.level_label)

    def build_assessment_rows(self, user_id: str, updates: Sequence[ProfileUpdate]) -> List[Dict[str, Any]]:
        """构造 upsert 行；批内重复身份键先合并"""
        now = utc_now()
        return [
            {
                "user_id": user_id,
                "domain_id": update.domain_id,
                "sub_dimension": update.sub_dimension,
                "is_custom": False,
                "level_label": update.level_label,
                "level_score": self.score_for(update),
                "content_layer": update.content_layer,
                "cognitive_state": update.cognitive_state,
                "motivation_state": update.motivation_state,
                "created_at": now,
                "updated_at": now,
            }
            for update in merge_by_identity(updates)
        ]

    def build_evidence_logs(self, user_id: str, updates: Sequence[ProfileUpdate]) -> List[EvidenceLog]:
        """每条带证据的更新对应一条证据，批内重复不合并"""
        return [
            EvidenceLog(
                user_id=user_id,
                domain_id=update.domain_id,
                sub_dimension=update.sub_dimension,
                evidence_text=update.evidence,
                source=EvidenceSource.CONVERSATION
            )
            for update in updates
            if update.evidence
        ]

    def apply(self, user_id: str, updates: Sequence[ProfileUpdate]) -> PersistResult:
        """
        写入一批已截断的档案更新

        Args:
            user_id: 外部认证提供的用户 ID
            updates: 规范化后的更新列表

        Returns:
            PersistResult：成功、部分失败、全部失败或跳过（空批次）
        """
        if not updates:
            return PersistResult(status=PersistStatus.SKIPPED)

        failures: List[PersistFailure] = []
        assessments_written = 0
        evidence_written = 0

        rows = self.build_assessment_rows(user_id, updates)
        try:
            with Session(self.engine) as session:
                assessments_written = AssessmentRepository(session).upsert_many(rows)
            logger.info("Upserted %d assessments for user %s", assessments_written, user_id)
        except STORAGE_ERRORS as e:
            logger.error("Assessment upsert failed for user %s", user_id, exc_info=True)
            failures.append(PersistFailure(stage=PersistStage.ASSESSMENT_UPSERT, error=str(e)))

        logs = self.build_evidence_logs(user_id, updates)
        if logs:
            try:
                with Session(self.engine) as session:
                    evidence_written = EvidenceRepository(session).append_many(logs)
                logger.info("Appended %d evidence logs for user %s", evidence_written, user_id)
            except STORAGE_ERRORS as e:
                logger.error("Evidence insert failed for user %s", user_id, exc_info=True)
                failures.append(PersistFailure(stage=PersistStage.EVIDENCE_INSERT, error=str(e)))

        attempted_steps = 2 if logs else 1
        if not failures:
            status = PersistStatus.PERSISTED
        elif len(failures) < attempted_steps:
            status = PersistStatus.PARTIAL
        else:
            status = PersistStatus.FAILED

        return PersistResult(
            status=status,
            assessments_written=assessments_written,
            evidence_written=evidence_written,
            failures=failures
        )
