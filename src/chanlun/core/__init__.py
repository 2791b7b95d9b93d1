"""
缠论核心模块.

流水线各阶段（包含处理/分型/笔/背驰/中枢/买卖点）及其编排、输出映射。
"""

from chanlun.core.config import ChanConfig, LotsMode, TradeMode
from chanlun.core.decision import (
    OrderType,
    Position,
    PositionStatus,
    TradeInstruction,
    calc_volume,
    decide,
)
from chanlun.core.engine import ChanEngine, ChanState, run_pipeline
from chanlun.core.objects import (
    BSPoint,
    BSPointType,
    Fractal,
    FractalType,
    MergeDirection,
    MergedBar,
    Pivot,
    Stroke,
)
from chanlun.core.plot import PlotRecord, PlotType, build_plot_records

__all__ = [
    "BSPoint",
    "BSPointType",
    "ChanConfig",
    "ChanEngine",
    "ChanState",
    "Fractal",
    "FractalType",
    "LotsMode",
    "MergeDirection",
    "MergedBar",
    "OrderType",
    "Pivot",
    "PlotRecord",
    "PlotType",
    "Position",
    "PositionStatus",
    "Stroke",
    "TradeInstruction",
    "TradeMode",
    "build_plot_records",
    "calc_volume",
    "decide",
    "run_pipeline",
]
