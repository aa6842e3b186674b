"""
层级刻度单元测试
"""

import json

import pytest

from app.agent.level_scale import (
    LevelScale,
    PLACEHOLDER_LEVEL_SCORE,
    load_level_scale,
    target_stage,
)


class TestTargetStage:
    """测试目标层级提取"""

    @pytest.mark.parametrize("label, expected", [
        ("探索->运用", "运用"),
        ("探索 → 运用", "运用"),
        ("  熟练 ", "熟练"),
        ("了解->探索->运用", "运用"),
        ("->", ""),
    ])
    def test_target_stage(self, label, expected):
        assert target_stage(label) == expected


class TestScoreFor:
    """测试标签到分数的映射"""

    @pytest.mark.parametrize("label, expected", [
        ("未接触", 1.0),
        ("了解", 2.8),
        ("探索->运用", 6.4),
        ("运用->熟练", 8.2),
        ("精通", 10.0),
    ])
    def test_default_ladder(self, level_scale, label, expected):
        assert level_scale.score_for(2, label) == expected

    def test_domain_specific_ladder(self, level_scale):
        assert level_scale.score_for(3, "入门->基础") == 5.5
        assert level_scale.score_for(3, "流利") == 10.0

    def test_domain_ladder_does_not_know_default_stages(self, level_scale):
        assert level_scale.score_for(3, "熟练") == PLACEHOLDER_LEVEL_SCORE

    def test_unknown_label_returns_placeholder(self, level_scale):
        assert level_scale.score_for(2, "大师级") == PLACEHOLDER_LEVEL_SCORE

    def test_unconfigured_domain_uses_default_ladder(self, level_scale):
        assert level_scale.score_for(99, "运用") == 6.4

    def test_single_stage_ladder(self):
        scale = LevelScale.from_dict({"default_ladder": ["会"]})

        assert scale.score_for(1, "会") == 10.0


class TestLevelScaleConfig:
    """测试配置加载"""

    def test_domains_are_sorted_by_id(self):
        scale = LevelScale.from_dict({
            "default_ladder": ["a", "b"],
            "domains": [{"id": 5, "name": "外语"}, {"id": "2", "name": "编程"}]
        })

        assert [d.id for d in scale.domains()] == [2, 5]

    def test_missing_default_ladder(self):
        with pytest.raises(ValueError, match="default_ladder"):
            LevelScale.from_dict({"domains": []})

    def test_malformed_domain(self):
        with pytest.raises(ValueError, match="领域配置格式错误"):
            LevelScale.from_dict({"default_ladder": ["a"], "domains": [{"name": "无 ID"}]})

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "scale.json"
        path.write_text(json.dumps({
            "default_ladder": ["低", "中", "高"],
            "domains": [{"id": 1, "name": "学习方法"}]
        }, ensure_ascii=False), encoding="utf-8")

        scale = load_level_scale(str(path))

        assert scale.ladder_for(1) == ["低", "中", "高"]
        assert scale.score_for(1, "中") == 5.5

    def test_load_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "scale.json"
        path.write_text(json.dumps({"default_ladder": ["x", "y"]}), encoding="utf-8")
        monkeypatch.setenv("LEVEL_SCALE_PATH", str(path))

        assert load_level_scale().default_ladder == ["x", "y"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="领域配置文件不存在"):
            load_level_scale(str(tmp_path / "missing.json"))

    def test_bundled_config_loads(self, monkeypatch):
        monkeypatch.delenv("LEVEL_SCALE_PATH", raising=False)

        scale = load_level_scale()

        assert scale.domains()
        assert scale.score_for(2, "运用") > PLACEHOLDER_LEVEL_SCORE
