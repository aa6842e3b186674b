"""
数据库初始化脚本
负责创建数据库引擎、表结构，以及根据领域配置写入默认领域
"""

import logging
import os
from pathlib import Path
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine

from app.agent.level_scale import LevelScale, load_level_scale
# 导入模型以注册到 SQLModel.metadata
from app.models import Domain, DomainPriority, ProfileAssessment, EvidenceLog, ConversationMessage  # noqa: F401

logger = logging.getLogger(__name__)

BACKEND_ROOT = Path(__file__).parent.parent.parent


def get_database_url() -> str:
    """
    获取数据库连接 URL

    优先级：DATABASE_URL > DATABASE_PATH（SQLite 文件）> backend/database.db
    """
    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        return database_url

    db_path = os.environ.get("DATABASE_PATH", "database.db")
    if not os.path.isabs(db_path):
        db_path = str(BACKEND_ROOT / db_path)
    return f"sqlite:///{db_path}"


def get_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    创建并返回数据库引擎

    Args:
        database_url: 数据库 URL，None 时使用 get_database_url()
        echo: 是否打印 SQL 语句

    Returns:
        SQLAlchemy Engine
    """
    url = database_url or get_database_url()
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=echo, connect_args=connect_args)


def create_tables(engine: Engine) -> None:
    """
    创建所有数据库表
    SQLModel 会自动根据模型创建表结构
    """
    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created at %s", engine.url)


def create_default_domains(session: Session, level_scale: LevelScale) -> int:
    """
    根据领域配置写入默认领域，已存在的领域只同步名称

    Args:
        session: 数据库会话
        level_scale: 领域配置

    Returns:
        新建的领域数量
    """
    created_count = 0
    for domain_config in level_scale.domains():
        domain = session.get(Domain, domain_config.id)
        if domain is None:
            session.add(Domain(id=domain_config.id, name=domain_config.name))
            created_count += 1
        elif domain.name != domain_config.name:
            domain.name = domain_config.name
            session.add(domain)

    session.commit()
    if created_count:
        logger.info("Created %d default domains", created_count)
    return created_count


def init_db(
    database_url: Optional[str] = None,
    level_scale: Optional[LevelScale] = None
) -> Engine:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 创建所有表结构
    3. 写入默认领域

    Returns:
        初始化完成的 Engine
    """
    engine = get_engine(database_url)
    create_tables(engine)

    scale = level_scale or load_level_scale()
    with Session(engine) as session:
        create_default_domains(session, scale)

    return engine


if __name__ == "__main__":
    from app.logging_config import configure_logging

    configure_logging()
    init_db()
