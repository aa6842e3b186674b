"""
基础数据库配置模块
提供所有模型共用的时间戳基类
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import SQLModel, Field


def utc_now() -> datetime:
    """返回 timezone-aware 的当前 UTC 时间"""
    return datetime.now(timezone.utc)


class CreatedAtModel(SQLModel):
    """只追加表的基类：只有 created_at，写入后不再修改"""
    created_at: Optional[datetime] = Field(
        default_factory=utc_now,
        nullable=False
    )


class TimestampModel(CreatedAtModel):
    """时间戳基类，为可变表提供 created_at 和 updated_at 字段

    updated_at 在 ORM 更新时自动刷新；批量 upsert 语句会显式写入该列
    """
    updated_at: Optional[datetime] = Field(
        default_factory=utc_now,
        nullable=False,
        sa_column_kwargs={"onupdate": utc_now}
    )
