"""
中枢识别.

缠论定义：中枢由至少 N 笔连续重叠构成，
ZG = min(各笔高点)，ZD = max(各笔低点)，GG/DD 为整体包络。
相邻中枢区间重叠时合并（中枢扩展）。
"""

from __future__ import annotations

import logging

from chanlun.core.objects import Pivot, Stroke

logger = logging.getLogger(__name__)


def is_strokes_overlap(stroke1: Stroke, stroke2: Stroke) -> bool:
    """两笔价格区间是否严格重叠（仅端点相接不算）."""
    return stroke1.high > stroke2.low and stroke1.low < stroke2.high


def _collect_run(strokes: list[Stroke], i: int) -> Pivot:
    """从第 i 笔开始，收集连续重叠的笔，返回候选中枢（可能不足 N 笔）."""
    seed = strokes[i]
    candidate = Pivot(
        zg=seed.high,
        zd=seed.low,
        gg=seed.high,
        dd=seed.low,
        strokes=[seed],
    )

    for stroke in strokes[i + 1:]:
        new_zg = min(candidate.zg, stroke.high)
        new_zd = max(candidate.zd, stroke.low)
        if new_zd >= new_zg:
            break

        candidate.strokes.append(stroke)
        candidate.zg = new_zg
        candidate.zd = new_zd
        candidate.gg = max(candidate.gg, stroke.high)
        candidate.dd = min(candidate.dd, stroke.low)

    candidate.start_index = candidate.strokes[0].start_index
    candidate.end_index = candidate.strokes[-1].end_index
    return candidate


def _extend_pivot(last: Pivot, pivot: Pivot) -> None:
    """中枢扩展：把新中枢并入上一个中枢（第一笔已在上一个中枢中）."""
    last.end_index = pivot.end_index
    last.zg = min(last.zg, pivot.zg)
    last.zd = max(last.zd, pivot.zd)
    last.gg = max(last.gg, pivot.gg)
    last.dd = min(last.dd, pivot.dd)
    last.strokes.extend(pivot.strokes[1:])


def build_pivots(strokes: list[Stroke] | None, min_strokes: int = 3) -> list[Pivot] | None:
    """
    全量识别中枢.

    Args:
        strokes: 笔列表
        min_strokes: 形成中枢的最少笔数

    Returns:
        中枢列表；笔数不足时返回 None（保持原状态）
    """
    if strokes is None or len(strokes) < min_strokes:
        return None

    pivots: list[Pivot] = []
    i = 0

    while i <= len(strokes) - min_strokes:
        candidate = _collect_run(strokes, i)
        run_length = len(candidate.strokes)

        if run_length >= min_strokes:
            last = pivots[-1] if pivots else None
            if last is not None and candidate.zd < last.zg and candidate.zg > last.zd:
                _extend_pivot(last, candidate)
                logger.debug(
                    "[中枢] 扩展: ZG=%.2f ZD=%.2f 笔数=%d",
                    last.zg, last.zd, len(last.strokes),
                )
            else:
                pivots.append(candidate)

            # 跳过已处理的笔（末笔可作为下一个中枢的起点）
            i += run_length - 1
        else:
            i += 1

    return pivots
