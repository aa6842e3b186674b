"""
Pytest 测试配置
提供测试数据库、领域刻度、Mock LLM 等测试基础设施
"""

import sys
from pathlib import Path
from typing import Generator
from unittest.mock import Mock

import pytest
from langchain_core.messages import AIMessage
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from app.agent.level_scale import LevelScale
from app.db.init_db import create_tables, create_default_domains
from app.models import DomainPriority, ProfileAssessment, CognitiveState, MotivationState


TEST_USER_ID = "user-test-001"

SAMPLE_COMPLETION = (
    "<response>Great progress!</response>"
    "<update>[{\"domain_id\":2,\"sub_dimension\":\"debugging\","
    "\"level_label\":\"探索->运用\",\"evidence\":\"fixed a race condition alone\"}]</update>"
)


# ==================== 领域配置 Fixtures ====================

@pytest.fixture(scope="function")
def level_scale() -> LevelScale:
    """
    测试用领域刻度：默认 6 级阶梯，外语领域使用自己的阶梯
    """
    return LevelScale.from_dict({
        "default_ladder": ["未接触", "了解", "探索", "运用", "熟练", "精通"],
        "domains": [
            {"id": 1, "name": "学习方法"},
            {"id": 2, "name": "编程"},
            {"id": 3, "name": "外语", "ladder": ["入门", "基础", "流利"]},
        ]
    })


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine(level_scale):
    """
    创建测试用的内存数据库引擎，并写入测试领域
    StaticPool 保证多个 Session 共享同一个内存数据库
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    create_tables(engine)
    with Session(engine) as session:
        create_default_domains(session, level_scale)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine) -> Generator[Session, None, None]:
    """
    创建测试用的数据库会话
    """
    with Session(test_db_engine) as session:
        yield session


# ==================== Mock LLM Fixtures ====================

@pytest.fixture(scope="function")
def mock_llm():
    """
    Mock LLM 实例
    默认返回样例双轨输出，避免真实调用 LLM API
    """
    mock = Mock()
    mock.invoke.return_value = AIMessage(content=SAMPLE_COMPLETION)
    return mock


# ==================== 测试数据 Fixtures ====================

@pytest.fixture(scope="function")
def test_user_id() -> str:
    """外部认证提供的测试用户 ID"""
    return TEST_USER_ID


@pytest.fixture(scope="function")
def sample_completion() -> str:
    """样例双轨输出：一条回复 + 一条带证据的更新"""
    return SAMPLE_COMPLETION


@pytest.fixture(scope="function")
def test_assessments(test_db_session: Session) -> list:
    """
    为测试用户写入已有档案：编程领域两条、学习方法领域一条
    """
    rows = [
        ProfileAssessment(
            user_id=TEST_USER_ID, domain_id=2, sub_dimension="debugging",
            level_label="了解->探索", level_score=4.6, content_layer="universal",
            learning_nature="技能型", cognitive_state=CognitiveState.SENSING,
            motivation_state=MotivationState.DRIVEN
        ),
        ProfileAssessment(
            user_id=TEST_USER_ID, domain_id=2, sub_dimension="系统设计",
            level_label="运用->熟练", level_score=8.2, content_layer="universal",
            is_custom=True
        ),
        ProfileAssessment(
            user_id=TEST_USER_ID, domain_id=1, sub_dimension="复盘",
            level_label="了解", level_score=2.8, content_layer="universal"
        ),
    ]
    test_db_session.add_all(rows)
    test_db_session.commit()
    for row in rows:
        test_db_session.refresh(row)
    return rows


@pytest.fixture(scope="function")
def test_priorities(test_db_session: Session) -> list:
    """
    为测试用户写入领域优先级
    """
    rows = [
        DomainPriority(user_id=TEST_USER_ID, domain_id=2, priority_score=8, priority_notes="主业"),
        DomainPriority(user_id=TEST_USER_ID, domain_id=1, priority_score=5),
    ]
    test_db_session.add_all(rows)
    test_db_session.commit()
    return rows


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
