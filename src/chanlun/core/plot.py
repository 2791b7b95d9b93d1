"""
绘图输出.

把当前缠论结构转换为与图表端约定的绘图记录（不负责渲染）：
- 最近一个已确认的分型：点
- 每一笔：线段（偏移量从当前 K 线往回数）
- 当前中枢：ZG / ZD 两条水平线
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, Sequence

from vnpy.trader.object import BarData

from chanlun.core.engine import ChanState
from chanlun.core.objects import FractalType

MAIN_CHART = "main"


class PlotType(IntEnum):
    """绘图类型."""

    LINE = 0
    CURVE = 1
    RECTANGLE = 2
    XLINE = 3
    POINT = 4
    TEXT = 5
    LINE_SEGMENT = 6


@dataclass(frozen=True)
class LineSegmentExtra:
    """线段附加信息."""

    start_offset: int
    end_offset: int
    val1: float
    val2: float


@dataclass(frozen=True)
class PlotRecord:
    """绘图记录."""

    chart_name: str
    name: str
    plot_type: PlotType
    value: float
    extra: Optional[Any] = None


def build_plot_records(state: ChanState, bars: Sequence[BarData]) -> list[PlotRecord]:
    """根据状态生成绘图记录."""
    records: list[PlotRecord] = []
    if not bars:
        return records

    if state.fractals:
        fractal = state.fractals[-1]
        if fractal.is_confirmed:
            name = "fractal_top" if fractal.type == FractalType.TOP else "fractal_bottom"
            records.append(PlotRecord(MAIN_CHART, name, PlotType.POINT, fractal.price))

    current = len(bars) - 1
    for stroke in state.strokes:
        start = stroke.start_fractal.last_original_index
        end = stroke.end_fractal.last_original_index
        extra = LineSegmentExtra(
            start_offset=current - start,
            end_offset=current - end,
            val1=bars[start].close_price,
            val2=bars[end].close_price,
        )
        records.append(PlotRecord(MAIN_CHART, "bi", PlotType.LINE_SEGMENT, 0.0, extra))

    pivot = state.current_pivot
    if pivot is not None and pivot.is_valid:
        records.append(PlotRecord(MAIN_CHART, "zhongshu_zg", PlotType.LINE, pivot.zg))
        records.append(PlotRecord(MAIN_CHART, "zhongshu_zd", PlotType.LINE, pivot.zd))

    return records
