"""
Repository 层单元测试
"""

from sqlmodel import select

from app.models import (
    CognitiveState,
    ConversationMessage,
    EvidenceLog,
    EvidenceSource,
    MessageRole,
    MotivationState,
    ProfileAssessment,
    TriggerMode,
)
from app.models.base import utc_now
from app.repositories import (
    AssessmentRepository,
    ConversationRepository,
    DomainRepository,
    EvidenceRepository,
)


def _row(user_id: str, sub_dimension: str = "debugging", level_label: str = "探索", **overrides) -> dict:
    now = utc_now()
    row = {
        "user_id": user_id,
        "domain_id": 2,
        "sub_dimension": sub_dimension,
        "is_custom": False,
        "level_label": level_label,
        "level_score": 4.6,
        "content_layer": "universal",
        "cognitive_state": None,
        "motivation_state": None,
        "created_at": now,
        "updated_at": now,
    }
    row.update(overrides)
    return row


def _assessment(session, user_id: str, sub_dimension: str):
    statement = select(ProfileAssessment).where(
        ProfileAssessment.user_id == user_id,
        ProfileAssessment.domain_id == 2,
        ProfileAssessment.sub_dimension == sub_dimension
    ).execution_options(populate_existing=True)
    return session.exec(statement).first()


class TestAssessmentRepository:
    """测试 AssessmentRepository"""

    def test_upsert_inserts_new_rows(self, test_db_session, test_user_id):
        repo = AssessmentRepository(test_db_session)

        written = repo.upsert_many([_row(test_user_id), _row(test_user_id, "算法")])

        assert written == 2
        assert len(repo.get_all_by_user(test_user_id)) == 2

    def test_upsert_updates_existing_identity(self, test_db_session, test_user_id):
        repo = AssessmentRepository(test_db_session)
        repo.upsert_many([_row(test_user_id, level_label="探索")])

        repo.upsert_many([_row(
            test_user_id, level_label="运用", level_score=6.4,
            cognitive_state=CognitiveState.CLEAR, motivation_state=MotivationState.DRIVEN
        )])

        rows = test_db_session.exec(select(ProfileAssessment)).all()
        assert len(rows) == 1
        test_db_session.refresh(rows[0])
        assert rows[0].level_label == "运用"
        assert rows[0].level_score == 6.4
        assert rows[0].cognitive_state == CognitiveState.CLEAR
        assert rows[0].motivation_state == MotivationState.DRIVEN

    def test_upsert_keeps_is_custom_and_learning_nature(self, test_db_session, test_user_id, test_assessments):
        repo = AssessmentRepository(test_db_session)

        repo.upsert_many([_row(test_user_id, "系统设计", level_label="精通", level_score=10.0)])
        repo.upsert_many([_row(test_user_id, "debugging", level_label="运用", level_score=6.4)])

        custom = _assessment(test_db_session, test_user_id, "系统设计")
        assert custom.is_custom is True
        assert custom.level_label == "精通"

        debugging = _assessment(test_db_session, test_user_id, "debugging")
        assert debugging.learning_nature == "技能型"

    def test_upsert_is_scoped_by_user(self, test_db_session):
        repo = AssessmentRepository(test_db_session)

        repo.upsert_many([_row("user-a")])
        repo.upsert_many([_row("user-b", level_label="精通")])

        assert _assessment(test_db_session, "user-a", "debugging").level_label == "探索"
        assert _assessment(test_db_session, "user-b", "debugging").level_label == "精通"

    def test_upsert_empty(self, test_db_session):
        assert AssessmentRepository(test_db_session).upsert_many([]) == 0

    def test_get_all_by_user_ordering(self, test_db_session, test_user_id, test_assessments):
        rows = AssessmentRepository(test_db_session).get_all_by_user(test_user_id)

        assert [(r.domain_id, r.sub_dimension) for r in rows] == [
            (1, "复盘"),
            (2, "系统设计"),
            (2, "debugging"),
        ]


class TestEvidenceRepository:
    """测试 EvidenceRepository"""

    def test_append_and_read_in_order(self, test_db_session, test_user_id):
        repo = EvidenceRepository(test_db_session)
        logs = [
            EvidenceLog(user_id=test_user_id, domain_id=2, sub_dimension="debugging",
                        evidence_text=text, source=EvidenceSource.CONVERSATION)
            for text in ("第一次", "第二次")
        ]

        assert repo.append_many(logs) == 2

        stored = test_db_session.exec(select(EvidenceLog).order_by(EvidenceLog.id)).all()
        assert [log.evidence_text for log in stored] == ["第一次", "第二次"]
        assert all(log.source == EvidenceSource.CONVERSATION for log in stored)
        assert all(log.created_at is not None for log in stored)

    def test_append_empty(self, test_db_session):
        assert EvidenceRepository(test_db_session).append_many([]) == 0


class TestConversationRepository:
    """测试 ConversationRepository"""

    def test_append_turn_writes_two_rows(self, test_db_session, test_user_id):
        repo = ConversationRepository(test_db_session)
        update = [{"domain_id": 2, "sub_dimension": "debugging", "level_label": "运用"}]

        user_row, assistant_row = repo.append_turn(test_user_id, "我修了个 bug", "不错！", update)

        assert user_row.role == MessageRole.USER
        assert user_row.profile_update is None
        assert assistant_row.role == MessageRole.ASSISTANT
        assert assistant_row.profile_update == update
        assert assistant_row.trigger_mode == TriggerMode.FREE_INPUT

    def test_empty_update_is_stored_as_null(self, test_db_session, test_user_id):
        repo = ConversationRepository(test_db_session)

        _, assistant_row = repo.append_turn(test_user_id, "你好", "你好！", [])

        assert assistant_row.profile_update is None

    def test_turns_are_appended_per_user(self, test_db_session, test_user_id):
        repo = ConversationRepository(test_db_session)
        repo.append_turn(test_user_id, "第一轮", "回复一")
        repo.append_turn(test_user_id, "第二轮", "回复二")
        repo.append_turn("someone-else", "别人的", "别人的回复")

        rows = test_db_session.exec(
            select(ConversationMessage)
            .where(ConversationMessage.user_id == test_user_id)
            .order_by(ConversationMessage.id)
        ).all()

        assert [m.content for m in rows] == ["第一轮", "回复一", "第二轮", "回复二"]
        assert len(test_db_session.exec(select(ConversationMessage)).all()) == 6
