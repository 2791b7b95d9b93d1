"""
背驰判断.

背驰：同向的两笔，后一笔价格创新高/新低，但 MACD 面积减小。
"""

from __future__ import annotations

from typing import Optional

from chanlun.core.objects import Stroke


def is_divergence(older: Optional[Stroke], newer: Optional[Stroke]) -> bool:
    """
    判断两笔是否存在背驰.

    Args:
        older: 前一笔
        newer: 后一笔

    Returns:
        向上笔：newer.high >= older.high 且面积减小；
        向下笔：newer.low <= older.low 且面积减小。
        任一笔缺失或方向不同时返回 False。
    """
    if older is None or newer is None:
        return False

    if older.is_up != newer.is_up:
        return False

    if older.is_up:
        return newer.high >= older.high and newer.macd_area < older.macd_area
    return newer.low <= older.low and newer.macd_area < older.macd_area


def find_previous_same_direction(strokes: list[Stroke], index: int) -> Optional[Stroke]:
    """
    向前查找与 strokes[index] 同向的最近一笔（每次跳两笔）.

    index < 2 或越界时返回 None。
    """
    if index < 2 or len(strokes) <= index:
        return None

    current = strokes[index]
    for i in range(index - 2, -1, -2):
        if strokes[i].is_up == current.is_up:
            return strokes[i]
    return None
