"""
笔构建.

每次全量重建笔列表（分型可能被更新）。
缠论规则：笔至少包含 stroke_min_bars 根独立 K 线（处理后，含两端）。
"""

from __future__ import annotations

from typing import Callable, Optional

from chanlun.core.objects import Fractal, FractalType, MergedBar, Stroke

# (start_original_index, end_original_index) -> MACD 面积
AreaFunc = Callable[[int, int], float]


def _is_more_extreme(candidate: Fractal, start: Fractal) -> bool:
    if start.type == FractalType.TOP:
        return candidate.price > start.price
    return candidate.price < start.price


def is_valid_stroke(start: Fractal, end: Fractal, stroke_min_bars: int) -> bool:
    """
    判断两个异类分型能否构成一笔.

    1. 合并 K 线跨度（含两端）>= stroke_min_bars
    2. 向上笔终点严格高于起点，向下笔终点严格低于起点
    3. 顶底分型不能处于"包含"状态：
       向上笔若底分型高点 >= 顶分型低点，则顶分型高点必须突破底分型高点
    """
    if start.type == end.type:
        return False

    if end.index - start.index + 1 < stroke_min_bars:
        return False

    is_up = start.type == FractalType.BOTTOM
    if is_up and end.price <= start.price:
        return False
    if not is_up and end.price >= start.price:
        return False

    if is_up and start.high >= end.low and end.high <= start.high:
        return False
    if not is_up and start.low <= end.high and end.low >= start.low:
        return False

    return True


def make_stroke(
    start: Fractal,
    end: Fractal,
    merged_bars: list[MergedBar],
    area_func: Optional[AreaFunc] = None,
) -> Stroke:
    """构建笔，并扫描区间内全部合并 K 线求真实高低点."""
    is_up = start.type == FractalType.BOTTOM
    high = end.high if is_up else start.high
    low = start.low if is_up else end.low

    for k in range(start.index, min(end.index + 1, len(merged_bars))):
        high = max(high, merged_bars[k].high)
        low = min(low, merged_bars[k].low)

    area = area_func(start.original_index, end.original_index) if area_func else 0.0

    return Stroke(
        is_up=is_up,
        high=high,
        low=low,
        start_index=start.index,
        end_index=end.index,
        start_fractal=start,
        end_fractal=end,
        macd_area=area,
        bar_count=end.index - start.index + 1,
    )


def build_strokes(
    fractals: list[Fractal],
    merged_bars: list[MergedBar],
    stroke_min_bars: int = 5,
    area_func: Optional[AreaFunc] = None,
) -> list[Stroke] | None:
    """
    全量构建笔列表.

    从左到右扫描：同类分型更极端时替换起点；遇到满足条件的异类分型即成笔，
    下一笔从该笔终点开始。找不到终点时起点前移一个分型。

    Args:
        fractals: 分型列表
        merged_bars: 合并 K 线列表
        stroke_min_bars: 笔的最少合并 K 线数
        area_func: MACD 面积计算函数，None 时面积为 0

    Returns:
        笔列表；分型不足 2 个时返回 None（保持原状态）
    """
    if len(fractals) < 2:
        return None

    strokes: list[Stroke] = []
    start_idx = 0

    while start_idx < len(fractals) - 1:
        start = fractals[start_idx]
        found = False

        for j in range(start_idx + 1, len(fractals)):
            candidate = fractals[j]

            if candidate.type == start.type:
                if _is_more_extreme(candidate, start):
                    start = candidate
                    start_idx = j
                continue

            if not is_valid_stroke(start, candidate, stroke_min_bars):
                continue

            strokes.append(make_stroke(start, candidate, merged_bars, area_func))
            start_idx = j
            found = True
            break

        if not found:
            start_idx += 1

    return strokes
