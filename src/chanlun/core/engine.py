"""
缠论流水线引擎.

每根完成的 K 线触发一次完整的同步处理：
包含处理 -> 分型 -> 笔 -> 中枢 -> 买卖点。
除包含处理是增量追加外，其余阶段每次都从当前状态全量重建。

每个 品种+周期 拥有独立的 ChanState，首次出现时创建，进程内常驻。
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Sequence

from vnpy.trader.object import BarData

from chanlun.core.config import ChanConfig
from chanlun.core.fractal import build_fractals
from chanlun.core.inclusion import process_inclusion
from chanlun.core.indicator import MacdHistogramCache
from chanlun.core.objects import BSPoint, Fractal, MergedBar, Pivot, Stroke
from chanlun.core.pivot import build_pivots
from chanlun.core.signal import SignalMemory, classify
from chanlun.core.stroke import build_strokes

logger = logging.getLogger(__name__)


@dataclass
class ChanState:
    """单个 品种+周期 的缠论状态."""

    key: str = ""
    merged_bars: list[MergedBar] = field(default_factory=list)
    fractals: list[Fractal] = field(default_factory=list)
    strokes: list[Stroke] = field(default_factory=list)
    pivots: list[Pivot] = field(default_factory=list)
    current_pivot: Optional[Pivot] = None
    bs_points: list[BSPoint] = field(default_factory=list)
    memory: SignalMemory = field(default_factory=SignalMemory)
    last_processed_index: int = 0
    macd_cache: MacdHistogramCache = field(default_factory=MacdHistogramCache)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def last_buy1(self) -> Optional[BSPoint]:
        return self.memory.last_buy1

    @property
    def last_sell1(self) -> Optional[BSPoint]:
        return self.memory.last_sell1


def run_pipeline(state: ChanState, bars: Sequence[BarData], config: ChanConfig) -> list[BSPoint]:
    """
    对一个状态执行完整流水线.

    各阶段数据不足时返回 None，对应字段保持上一次的结果。

    Returns:
        本次新增的买卖点
    """
    # 1. K 线包含处理（增量）
    state.last_processed_index = process_inclusion(
        state.merged_bars, bars, state.last_processed_index
    )

    # 2. 分型识别
    fractals = build_fractals(state.merged_bars)
    if fractals is not None:
        state.fractals = fractals

    # 3. 笔构建
    strokes = build_strokes(
        state.fractals,
        state.merged_bars,
        config.stroke_min_bars,
        area_func=lambda start, end: state.macd_cache.area(bars, start, end),
    )
    if strokes is not None:
        state.strokes = strokes

    # 4. 中枢识别
    pivots = build_pivots(state.strokes, config.pivot_min_strokes)
    if pivots is not None:
        state.pivots = pivots
        state.current_pivot = pivots[-1] if pivots else None

    # 5. 买卖点识别
    new_points, state.memory = classify(
        state.strokes, state.current_pivot, state.memory, config.use_divergence
    )
    state.bs_points.extend(new_points)

    logger.debug(
        "[缠论] %s K线=%d 合并=%d 分型=%d 笔=%d 中枢=%d",
        state.key, len(bars), len(state.merged_bars), len(state.fractals),
        len(state.strokes), len(state.pivots),
    )
    for point in new_points:
        logger.info(
            "[买卖点] %s %s @ %.2f (背驰=%s)",
            state.key, point.type.label, point.price, point.is_divergence,
        )

    return new_points


class ChanEngine:
    """
    多品种缠论引擎.

    使用方式:
        engine = ChanEngine(ChanConfig())
        state = engine.update("p0.DCE_1m", bars)
    """

    def __init__(self, config: Optional[ChanConfig] = None) -> None:
        self.config = config or ChanConfig()
        self.config.validate()
        self._states: dict[str, ChanState] = {}
        self._registry_lock = threading.Lock()

    def __contains__(self, key: str) -> bool:
        return key in self._states

    def __len__(self) -> int:
        return len(self._states)

    def get_state(self, key: str) -> ChanState:
        """获取或创建状态."""
        with self._registry_lock:
            state = self._states.get(key)
            if state is None:
                state = ChanState(
                    key=key,
                    macd_cache=MacdHistogramCache(
                        self.config.macd_fast,
                        self.config.macd_slow,
                        self.config.macd_signal,
                    ),
                )
                self._states[key] = state
                logger.info("创建缠论状态: %s", key)
            return state

    def update(
        self,
        key: str,
        bars: Sequence[BarData],
        is_final: bool = True,
    ) -> Optional[ChanState]:
        """
        新 K 线到达时驱动流水线.

        Args:
            key: 品种+周期 状态键
            bars: 该键的完整 K 线历史（只追加，不可改写）
            is_final: K 线是否已完成；未完成的 K 线不触发任何处理

        Returns:
            更新后的状态；未处理时返回 None
        """
        if not is_final:
            return None

        if len(bars) < self.config.min_bar_count:
            return None

        state = self.get_state(key)
        with state.lock:
            run_pipeline(state, bars, self.config)
        return state
