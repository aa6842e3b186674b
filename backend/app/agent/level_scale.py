"""
层级刻度模块

把 level_label（如 "运用->熟练"）映射为 0-10 的 level_score。
刻度来自领域配置文件 level_scale.json，每个领域可以声明自己的阶梯，
未声明的领域使用 default_ladder。无法识别的标签返回占位分。
"""

import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

PLACEHOLDER_LEVEL_SCORE = 1.0
MIN_LEVEL_SCORE = 1.0
MAX_LEVEL_SCORE = 10.0

DEFAULT_LEVEL_SCALE_PATH = Path(__file__).parent.parent.parent / "level_scale.json"

# "探索->运用" / "探索 → 运用"：箭头右侧是目标层级
_TRANSITION_SPLIT = re.compile(r"\s*(?:->|→)\s*")


@dataclass(frozen=True)
class DomainScale:
    """单个领域的配置"""
    id: int
    name: str
    ladder: Optional[List[str]] = None


@dataclass
class LevelScale:
    """领域层级刻度"""
    default_ladder: List[str]
    domain_scales: Dict[int, DomainScale] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelScale":
        """
        从配置字典构建刻度

        Raises:
            ValueError: default_ladder 缺失或领域配置格式错误
        """
        default_ladder = data.get("default_ladder")
        if not default_ladder or not isinstance(default_ladder, list):
            raise ValueError("领域配置中缺少 default_ladder 字段")

        domain_scales = {}
        for item in data.get("domains", []):
            try:
                domain_id = int(item["id"])
                name = str(item["name"])
            except (KeyError, TypeError, ValueError) as e:
                raise ValueError(f"领域配置格式错误: {item!r}") from e
            ladder = item.get("ladder")
            domain_scales[domain_id] = DomainScale(
                id=domain_id,
                name=name,
                ladder=list(ladder) if ladder else None
            )

        return cls(default_ladder=list(default_ladder), domain_scales=domain_scales)

    def domains(self) -> List[DomainScale]:
        """按 ID 排序返回所有配置的领域"""
        return [self.domain_scales[k] for k in sorted(self.domain_scales)]

    def ladder_for(self, domain_id: int) -> List[str]:
        domain = self.domain_scales.get(domain_id)
        if domain and domain.ladder:
            return domain.ladder
        return self.default_ladder

    def score_for(self, domain_id: int, level_label: str) -> float:
        """
        计算层级标签对应的分数

        目标层级在阶梯上的位置线性映射到 1-10 分；
        阶梯上找不到目标层级时返回 PLACEHOLDER_LEVEL_SCORE。

        Args:
            domain_id: 领域 ID
            level_label: 层级标签，可以是单个层级或 "A->B" 形式的迁移

        Returns:
            float: 保留一位小数的分数
        """
        target = target_stage(level_label)
        ladder = self.ladder_for(domain_id)
        if not target or target not in ladder:
            return PLACEHOLDER_LEVEL_SCORE
        if len(ladder) == 1:
            return MAX_LEVEL_SCORE

        position = ladder.index(target)
        span = MAX_LEVEL_SCORE - MIN_LEVEL_SCORE
        return round(MIN_LEVEL_SCORE + span * position / (len(ladder) - 1), 1)


def target_stage(level_label: str) -> str:
    """取出层级标签中的目标层级（箭头右侧），没有箭头时返回整个标签"""
    parts = [p for p in _TRANSITION_SPLIT.split(level_label.strip()) if p]
    return parts[-1] if parts else ""


def load_level_scale(path: Optional[str] = None) -> LevelScale:
    """
    加载领域层级配置

    Args:
        path: 配置文件路径；None 时依次使用 LEVEL_SCALE_PATH 环境变量和默认路径

    Raises:
        FileNotFoundError: 配置文件不存在
        ValueError: 配置内容错误
    """
    config_path = path or os.environ.get("LEVEL_SCALE_PATH") or str(DEFAULT_LEVEL_SCALE_PATH)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"领域配置文件不存在: {config_path}")
    return LevelScale.from_dict(data)
