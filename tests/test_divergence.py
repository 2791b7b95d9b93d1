"""
测试 chanlun.core.divergence 模块.
"""

from __future__ import annotations

from chanlun.core.divergence import find_previous_same_direction, is_divergence


class TestIsDivergence:
    """测试 is_divergence 函数."""

    def test_up_weaker_area_new_high(self, make_stroke):
        """测试向上笔创新高且面积 50 -> 30 为背驰."""
        older = make_stroke(True, 100, 90, macd_area=50)
        newer = make_stroke(True, 110, 95, macd_area=30)
        assert is_divergence(older, newer)

    def test_up_stronger_area(self, make_stroke):
        """测试面积 30 -> 50 不背驰."""
        older = make_stroke(True, 100, 90, macd_area=30)
        newer = make_stroke(True, 110, 95, macd_area=50)
        assert not is_divergence(older, newer)

    def test_equal_high_counts(self, make_stroke):
        """测试高点持平也算创新高."""
        older = make_stroke(True, 100, 90, macd_area=50)
        newer = make_stroke(True, 100, 92, macd_area=30)
        assert is_divergence(older, newer)

    def test_equal_area_not_divergence(self, make_stroke):
        """测试面积相等不背驰."""
        older = make_stroke(True, 100, 90, macd_area=40)
        newer = make_stroke(True, 110, 95, macd_area=40)
        assert not is_divergence(older, newer)

    def test_up_no_new_high(self, make_stroke):
        """测试未创新高不背驰."""
        older = make_stroke(True, 110, 90, macd_area=50)
        newer = make_stroke(True, 105, 95, macd_area=30)
        assert not is_divergence(older, newer)

    def test_down_new_low_weaker(self, make_stroke):
        """测试向下笔创新低且面积减小为背驰."""
        older = make_stroke(False, 110, 90, macd_area=50)
        newer = make_stroke(False, 105, 85, macd_area=30)
        assert is_divergence(older, newer)

    def test_down_no_new_low(self, make_stroke):
        """测试向下笔未创新低不背驰."""
        older = make_stroke(False, 110, 90, macd_area=50)
        newer = make_stroke(False, 105, 95, macd_area=30)
        assert not is_divergence(older, newer)

    def test_direction_mismatch(self, make_stroke):
        """测试方向不同不背驰."""
        older = make_stroke(True, 100, 90, macd_area=50)
        newer = make_stroke(False, 110, 80, macd_area=30)
        assert not is_divergence(older, newer)

    def test_none_inputs(self, make_stroke):
        """测试任一笔缺失返回 False."""
        stroke = make_stroke(True, 100, 90, macd_area=50)
        assert not is_divergence(None, stroke)
        assert not is_divergence(stroke, None)
        assert not is_divergence(None, None)

    def test_zero_area_never_diverges(self, make_stroke):
        """测试面积为 0（指标不可用）时永不背驰."""
        older = make_stroke(True, 100, 90, macd_area=0.0)
        newer = make_stroke(True, 110, 95, macd_area=0.0)
        assert not is_divergence(older, newer)


class TestFindPreviousSameDirection:
    """测试 find_previous_same_direction 函数."""

    def test_index_below_two(self, make_stroke):
        """测试 index < 2 返回 None."""
        strokes = [make_stroke(True, 100, 90), make_stroke(False, 100, 85)]
        assert find_previous_same_direction(strokes, 0) is None
        assert find_previous_same_direction(strokes, 1) is None

    def test_two_back(self, make_stroke):
        """测试交替笔列表返回前两笔."""
        strokes = [
            make_stroke(True, 100, 90),
            make_stroke(False, 100, 85),
            make_stroke(True, 110, 85),
            make_stroke(False, 110, 80),
        ]
        assert find_previous_same_direction(strokes, 2) is strokes[0]
        assert find_previous_same_direction(strokes, 3) is strokes[1]

    def test_skips_mismatched(self, make_stroke):
        """测试两步一跳时跳过方向不一致的笔."""
        strokes = [
            make_stroke(True, 100, 90),
            make_stroke(True, 105, 95),
            make_stroke(False, 105, 90),
            make_stroke(False, 100, 85),
            make_stroke(True, 110, 85),
        ]
        assert find_previous_same_direction(strokes, 4) is strokes[0]

    def test_not_found(self, make_stroke):
        """测试找不到同向笔."""
        strokes = [
            make_stroke(False, 100, 90),
            make_stroke(True, 105, 90),
            make_stroke(True, 110, 95),
        ]
        assert find_previous_same_direction(strokes, 2) is None

    def test_out_of_range(self, make_stroke):
        """测试越界返回 None."""
        strokes = [make_stroke(True, 100, 90)] * 3
        assert find_previous_same_direction(strokes, 5) is None
