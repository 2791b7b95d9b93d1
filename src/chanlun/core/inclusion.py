"""
K 线包含处理.

缠论规则：向上时取高高低高，向下时取低低高低。
只追加处理游标之后的新 K 线，已合并的末根 K 线会被原地修改。
"""

from __future__ import annotations

import logging
from typing import Sequence

from vnpy.trader.object import BarData

from chanlun.core.objects import MergeDirection, MergedBar

logger = logging.getLogger(__name__)


def has_contain_relation(high1: float, low1: float, high2: float, low2: float) -> bool:
    """
    判断两根 K 线是否存在包含关系.

    非严格比较：高低点完全相同也算包含。
    """
    return (high1 >= high2 and low1 <= low2) or (high2 >= high1 and low2 <= low1)


def _new_merged_bar(bar: BarData, index: int, direction: MergeDirection) -> MergedBar:
    return MergedBar(
        original_index=index,
        last_original_index=index,
        high=bar.high_price,
        low=bar.low_price,
        open=bar.open_price,
        close=bar.close_price,
        datetime=bar.datetime,
        merged_count=1,
        direction=direction,
    )


def _resolve_direction(merged_bars: list[MergedBar], last: MergedBar, bar: BarData) -> MergeDirection:
    """确定合并方向：沿用已有方向，否则参考前一根，最后才比较新 K 线高点."""
    if last.direction != MergeDirection.NONE:
        return last.direction
    if len(merged_bars) >= 2:
        prev = merged_bars[-2]
        return MergeDirection.UP if last.high > prev.high else MergeDirection.DOWN
    return MergeDirection.UP if bar.high_price > last.high else MergeDirection.DOWN


def process_inclusion(
    merged_bars: list[MergedBar],
    bars: Sequence[BarData],
    last_processed_index: int,
) -> int:
    """
    处理 K 线包含关系，增量生成合并后的 K 线序列.

    Args:
        merged_bars: 合并 K 线列表（原地追加/修改）
        bars: 完整的原始 K 线历史
        last_processed_index: 已处理的原始 K 线数量（游标）

    Returns:
        新的游标位置（= len(bars)）
    """
    start = last_processed_index
    if start == 0 and not merged_bars and bars:
        merged_bars.append(_new_merged_bar(bars[0], 0, MergeDirection.NONE))
        start = 1

    for i in range(start, len(bars)):
        bar = bars[i]

        if not merged_bars:
            merged_bars.append(_new_merged_bar(bar, i, MergeDirection.NONE))
            continue

        last = merged_bars[-1]

        if has_contain_relation(last.high, last.low, bar.high_price, bar.low_price):
            direction = _resolve_direction(merged_bars, last, bar)
            before = (last.high, last.low)

            if direction == MergeDirection.UP:
                last.high = max(last.high, bar.high_price)
                last.low = max(last.low, bar.low_price)
            else:
                last.high = min(last.high, bar.high_price)
                last.low = min(last.low, bar.low_price)

            last.merged_count += 1
            last.last_original_index = i
            last.close = bar.close_price
            last.direction = direction

            logger.debug(
                "[包含] %s处理 | 前: H=%.2f L=%.2f | 后: H=%.2f L=%.2f",
                "向上" if direction == MergeDirection.UP else "向下",
                before[0], before[1], last.high, last.low,
            )
        else:
            direction = MergeDirection.UP if bar.high_price > last.high else MergeDirection.DOWN
            merged_bars.append(_new_merged_bar(bar, i, direction))

    return len(bars)
