"""
MACD 柱状图计算与缓存.

笔的力度统计只消费 histogram（DIFF - DEA），不关心指标细节。
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd
from vnpy.trader.object import BarData

logger = logging.getLogger(__name__)


def compute_macd_histogram(
    closes: Sequence[float],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> np.ndarray:
    """
    计算 MACD histogram.

    预热期（DIFF 需要 slow 根，DEA 还需要 signal 个 DIFF）内的值为 NaN。

    Args:
        closes: 收盘价序列
        fast: 快线 EMA 周期
        slow: 慢线 EMA 周期
        signal: 信号线 EMA 周期

    Returns:
        与 closes 等长的 histogram 数组
    """
    close = pd.Series(closes, dtype=float)
    exp1 = close.ewm(span=fast, adjust=False, min_periods=fast).mean()
    exp2 = close.ewm(span=slow, adjust=False, min_periods=slow).mean()
    diff = exp1 - exp2
    dea = diff.ewm(span=signal, adjust=False, min_periods=signal).mean()
    return (diff - dea).to_numpy()


class MacdHistogramCache:
    """
    按状态缓存的 histogram.

    首次需要时才计算；历史增长后重新计算以覆盖新 K 线
    （EMA 只依赖前缀，已观察到的值不会改变）。
    计算失败后永久降级为 0 面积。
    """

    def __init__(self, fast: int = 12, slow: int = 26, signal: int = 9) -> None:
        self.fast = fast
        self.slow = slow
        self.signal = signal
        self.values: Optional[np.ndarray] = None
        self.failed: bool = False

    def load(self, bars: Sequence[BarData]) -> Optional[np.ndarray]:
        """返回覆盖全部 bars 的 histogram，失败时返回 None."""
        if self.failed:
            return None

        if self.values is None or len(self.values) < len(bars):
            try:
                self.values = compute_macd_histogram(
                    [bar.close_price for bar in bars],
                    self.fast, self.slow, self.signal,
                )
            except Exception:
                logger.warning("MACD 计算失败，笔面积按 0 处理", exc_info=True)
                self.failed = True
                self.values = None
                return None

        return self.values

    def area(self, bars: Sequence[BarData], start_index: int, end_index: int) -> float:
        """
        计算原始 K 线区间 [start_index, end_index] 内的 Σ|histogram|.

        NaN（预热期）不计入。
        """
        values = self.load(bars)
        if values is None:
            return 0.0

        segment = values[start_index:end_index + 1]
        if segment.size == 0:
            return 0.0
        return float(np.nansum(np.abs(segment)))
