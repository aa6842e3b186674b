"""
双轨输出解析器单元测试
"""

import pytest

from app.agent.errors import EmptyCompletionError
from app.agent.pipeline.parser import (
    parse_ai_response,
    extract_response_text,
    extract_update_blocks,
)


class TestResponseBlock:
    """测试 <response> 块提取"""

    def test_extracts_response_block(self, sample_completion):
        parsed = parse_ai_response(sample_completion)

        assert parsed.response == "Great progress!"

    def test_response_block_is_trimmed_and_case_insensitive(self):
        raw = "<RESPONSE>\n  你好，继续加油  \n</Response>"

        assert extract_response_text(raw) == "你好，继续加油"

    def test_missing_markers_fall_back_to_whole_text(self):
        """没有标记时整段输出作为回复，更新列表为空"""
        parsed = parse_ai_response("  今天聊得很开心！  \n")

        assert parsed.response == "今天聊得很开心！"
        assert parsed.raw_updates == []
        assert parsed.diagnostics == []

    def test_only_first_response_block_is_used(self):
        raw = "<response>第一段</response><response>第二段</response>"

        assert parse_ai_response(raw).response == "第一段"


class TestUpdateBlocks:
    """测试 <update> 块解析"""

    def test_array_block(self, sample_completion):
        parsed = parse_ai_response(sample_completion)

        assert len(parsed.raw_updates) == 1
        assert parsed.raw_updates[0]["sub_dimension"] == "debugging"
        assert parsed.raw_updates[0]["level_label"] == "探索->运用"

    def test_single_object_is_wrapped(self):
        raw = '<response>ok</response><update>{"domain_id": 1, "sub_dimension": "复盘", "level_label": "了解"}</update>'

        parsed = parse_ai_response(raw)

        assert parsed.raw_updates == [{"domain_id": 1, "sub_dimension": "复盘", "level_label": "了解"}]

    def test_multiple_blocks_concatenate_in_order(self):
        raw = (
            "<response>ok</response>"
            '<update>[{"sub_dimension": "a"}, {"sub_dimension": "b"}]</update>'
            "中间的文字"
            '<update>{"sub_dimension": "c"}</update>'
        )

        parsed = parse_ai_response(raw)

        assert [u["sub_dimension"] for u in parsed.raw_updates] == ["a", "b", "c"]

    def test_empty_array_block(self):
        parsed = parse_ai_response("<response>ok</response><update>[] </update>")

        assert parsed.raw_updates == []
        assert parsed.diagnostics == []

    def test_malformed_block_is_isolated(self):
        """坏块被跳过，不影响其他块和回复文本"""
        raw = (
            "<response>收到</response>"
            "<update>[{\"domain_id\": 2, \"sub_dimension\": \"debugging\", \"level_label\": \"运用\"}]</update>"
            "<update>[{\"domain_id\": 2, \"sub_dimension\": </update>"
        )

        parsed = parse_ai_response(raw)

        assert parsed.response == "收到"
        assert len(parsed.raw_updates) == 1
        assert parsed.raw_updates[0]["sub_dimension"] == "debugging"
        assert len(parsed.diagnostics) == 1
        assert "#1" in parsed.diagnostics[0]

    def test_malformed_block_before_valid_block(self):
        raw = "<update>not json</update><update>{\"sub_dimension\": \"x\"}</update>"

        parsed = parse_ai_response(raw)

        assert parsed.raw_updates == [{"sub_dimension": "x"}]
        assert len(parsed.diagnostics) == 1

    def test_scalar_json_block_is_skipped(self):
        parsed = parse_ai_response("<response>ok</response><update>42</update>")

        assert parsed.raw_updates == []
        assert "int" in parsed.diagnostics[0]

    def test_blank_block_is_skipped(self):
        parsed = parse_ai_response("<response>ok</response><update>   </update>")

        assert parsed.raw_updates == []
        assert len(parsed.diagnostics) == 1

    def test_extract_update_blocks_keeps_encounter_order(self):
        raw = "<update>1</update>x<UPDATE>2</UPDATE>"

        assert extract_update_blocks(raw) == ["1", "2"]

    def test_update_markers_without_response_markers(self):
        """没有 <response> 时回复是整段原文（包含 update 块）"""
        raw = '好的<update>{"sub_dimension": "x"}</update>'

        parsed = parse_ai_response(raw)

        assert parsed.response == raw
        assert parsed.raw_updates == [{"sub_dimension": "x"}]


class TestEmptyInput:
    """测试完全缺失的输入"""

    @pytest.mark.parametrize("raw", [None, "", "   \n\t"])
    def test_empty_completion_raises(self, raw):
        with pytest.raises(EmptyCompletionError):
            parse_ai_response(raw)
