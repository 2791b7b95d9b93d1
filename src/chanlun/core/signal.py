"""
买卖点识别.

与前几个阶段不同，买卖点不全量重建：每次只看最新的一到两笔，
新产生的买卖点追加到状态中的列表，一买/一卖会被记住供二买/二卖参考。

状态迁移集中在 classify()，它是纯函数：
输入 (笔列表, 当前中枢, 记忆)，输出 (新买卖点, 新记忆)。
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from chanlun.core.divergence import find_previous_same_direction, is_divergence
from chanlun.core.objects import BSPoint, BSPointType, Pivot, Stroke


@dataclass(frozen=True)
class SignalMemory:
    """跨调用保存的一买/一卖（直到被新的覆盖）."""

    last_buy1: Optional[BSPoint] = None
    last_sell1: Optional[BSPoint] = None


def _point(point_type: BSPointType, stroke: Stroke, price: float, divergence: bool = False) -> BSPoint:
    return BSPoint(
        type=point_type,
        index=stroke.end_index,
        price=price,
        datetime=stroke.end_fractal.datetime if stroke.end_fractal else None,
        is_divergence=divergence,
    )


def classify(
    strokes: list[Stroke],
    pivot: Optional[Pivot],
    memory: SignalMemory,
    use_divergence: bool = True,
) -> tuple[list[BSPoint], SignalMemory]:
    """
    根据最新两笔识别买卖点.

    一买/一卖要求最新一笔与前一笔同向（与笔的交替性矛盾，通常不会触发，
    保留该条件以保证结果可复现）。

    Args:
        strokes: 笔列表
        pivot: 当前中枢
        memory: 上一次的一买/一卖记忆
        use_divergence: 一买/一卖是否要求背驰

    Returns:
        (本次新增的买卖点, 更新后的记忆)；笔数不足 3 时原样返回记忆
    """
    if len(strokes) < 3:
        return [], memory

    points: list[BSPoint] = []
    last = strokes[-1]
    prev = strokes[-2]

    # 一买：向下趋势背驰
    if not last.is_up and not prev.is_up:
        prev_same = find_previous_same_direction(strokes, len(strokes) - 1)
        if prev_same is not None:
            divergence = not use_divergence or is_divergence(prev_same, last)
            if divergence and last.low <= prev_same.low:
                buy1 = _point(BSPointType.BUY1, last, last.low, divergence)
                memory = replace(memory, last_buy1=buy1)
                points.append(buy1)

    # 一卖：向上趋势背驰
    if last.is_up and prev.is_up:
        prev_same = find_previous_same_direction(strokes, len(strokes) - 1)
        if prev_same is not None:
            divergence = not use_divergence or is_divergence(prev_same, last)
            if divergence and last.high >= prev_same.high:
                sell1 = _point(BSPointType.SELL1, last, last.high, divergence)
                memory = replace(memory, last_sell1=sell1)
                points.append(sell1)

    # 二买：一买后回调不破一买低点
    if memory.last_buy1 is not None and not last.is_up and prev.is_up:
        if last.low > memory.last_buy1.price:
            points.append(_point(BSPointType.BUY2, last, last.low))

    # 二卖：一卖后反弹不破一卖高点
    if memory.last_sell1 is not None and last.is_up and not prev.is_up:
        if last.high < memory.last_sell1.price:
            points.append(_point(BSPointType.SELL2, last, last.high))

    if pivot is not None and pivot.is_valid:
        # 三买：向上离开中枢后回踩不进中枢
        if prev.is_up and not last.is_up:
            if prev.high > pivot.zg and last.low >= pivot.zg:
                points.append(_point(BSPointType.BUY3, last, last.low))

        # 三卖：向下离开中枢后回抽不进中枢
        if not prev.is_up and last.is_up:
            if prev.low < pivot.zd and last.high <= pivot.zd:
                points.append(_point(BSPointType.SELL3, last, last.high))

    return points, memory
