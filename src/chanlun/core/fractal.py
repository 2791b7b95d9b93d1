"""
分型识别.

基于包含处理后的 K 线序列，每次全量重建分型列表
（K 线合并可能改变之前的分型判定）。
"""

from __future__ import annotations

from chanlun.core.objects import Fractal, FractalType, MergedBar


def identify_fractal(merged_bars: list[MergedBar], index: int) -> FractalType:
    """
    判断合并 K 线序列中某位置是否为分型.

    顶分型：中间 K 线高点严格高于左右两根；
    底分型：中间 K 线低点严格低于左右两根。
    首尾位置没有完整邻居，永远不是分型。
    """
    if index < 1 or index >= len(merged_bars) - 1:
        return FractalType.NONE

    prev = merged_bars[index - 1]
    curr = merged_bars[index]
    nxt = merged_bars[index + 1]

    if curr.high > prev.high and curr.high > nxt.high:
        return FractalType.TOP

    if curr.low < prev.low and curr.low < nxt.low:
        return FractalType.BOTTOM

    return FractalType.NONE


def build_fractals(merged_bars: list[MergedBar]) -> list[Fractal] | None:
    """
    全量识别分型.

    连续同类型分型（中间没有反向分型）只保留更极端的一个，
    且只与上一个已接受的分型比较。

    Returns:
        分型列表；合并 K 线不足 3 根时返回 None（保持原状态）
    """
    if len(merged_bars) < 3:
        return None

    fractals: list[Fractal] = []
    count = len(merged_bars)

    for i in range(1, count - 1):
        fractal_type = identify_fractal(merged_bars, i)
        if fractal_type == FractalType.NONE:
            continue

        bar = merged_bars[i]
        fractal = Fractal(
            index=i,
            type=fractal_type,
            price=bar.high if fractal_type == FractalType.TOP else bar.low,
            high=bar.high,
            low=bar.low,
            original_index=bar.original_index,
            last_original_index=bar.last_original_index,
            datetime=bar.datetime,
            # 右邻是仍在变化的末根 K 线时尚未确认
            is_confirmed=i < count - 2,
        )

        if fractals and fractals[-1].type == fractal_type:
            last = fractals[-1]
            if fractal_type == FractalType.TOP and fractal.price > last.price:
                fractals[-1] = fractal
            elif fractal_type == FractalType.BOTTOM and fractal.price < last.price:
                fractals[-1] = fractal
        else:
            fractals.append(fractal)

    return fractals
