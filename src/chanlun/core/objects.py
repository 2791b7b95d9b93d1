"""
缠论结构数据对象.

包含处理后 K 线、分型、笔、中枢、买卖点的数据类定义。
价格统一使用 float，索引分两种：
- 合并 K 线序列中的位置（index）
- 原始 K 线序列中的位置（original_index）
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional


class MergeDirection(IntEnum):
    """包含处理方向."""

    NONE = 0
    UP = 1      # 向上：高高低高
    DOWN = -1   # 向下：低低高低


class FractalType(Enum):
    """分型类型."""

    NONE = "none"
    TOP = "top"        # 顶分型
    BOTTOM = "bottom"  # 底分型


class BSPointType(IntEnum):
    """
    买卖点类型.

    数值符号表示方向（正=买，负=卖），绝对值表示类别（1/2/3）。
    """

    BUY1 = 1    # 一买：下跌背驰后的第一个买点
    BUY2 = 2    # 二买：一买后回调不破一买低点
    BUY3 = 3    # 三买：离开中枢后回踩不进中枢
    SELL1 = -1  # 一卖：上涨背驰后的第一个卖点
    SELL2 = -2  # 二卖：一卖后反弹不破一卖高点
    SELL3 = -3  # 三卖：离开中枢后回抽不进中枢

    @property
    def is_buy(self) -> bool:
        return self.value > 0

    @property
    def level(self) -> int:
        return abs(self.value)

    @property
    def label(self) -> str:
        """简写标签，如 1B / 3S."""
        return f"{self.level}{'B' if self.is_buy else 'S'}"


@dataclass
class MergedBar:
    """包含处理后的 K 线."""

    original_index: int
    """第一根原始 K 线索引"""

    last_original_index: int
    """最后一根原始 K 线索引（用于绘制）"""

    high: float
    low: float
    open: float = 0.0
    close: float = 0.0
    datetime: Optional[datetime] = None
    merged_count: int = 1
    direction: MergeDirection = MergeDirection.NONE


@dataclass
class Fractal:
    """分型."""

    index: int
    """在合并 K 线序列中的位置"""

    type: FractalType
    price: float
    """顶分型取 high，底分型取 low"""

    high: float
    low: float
    original_index: int = 0
    last_original_index: int = 0
    datetime: Optional[datetime] = None
    is_confirmed: bool = True


@dataclass
class Stroke:
    """笔."""

    is_up: bool
    """True 为向上笔（底分型 -> 顶分型）"""

    high: float
    """笔区间内所有合并 K 线的最高点"""

    low: float
    """笔区间内所有合并 K 线的最低点"""

    start_index: int = 0
    end_index: int = 0
    start_fractal: Optional[Fractal] = None
    end_fractal: Optional[Fractal] = None
    macd_area: float = 0.0
    """Σ|MACD histogram|，背驰判断的唯一力度依据"""

    bar_count: int = 0
    """包含的合并 K 线数量（含两端）"""


@dataclass
class Pivot:
    """
    中枢（ZhongShu）.

    ZG/ZD 是成员笔的公共重叠区间，GG/DD 是成员笔的整体包络。
    """

    zg: float
    """中枢高点 = min(各笔高点)"""

    zd: float
    """中枢低点 = max(各笔低点)"""

    gg: float
    dd: float
    start_index: int = 0
    end_index: int = 0
    strokes: list[Stroke] = field(default_factory=list)
    level: int = 0

    @property
    def is_valid(self) -> bool:
        return self.zd < self.zg

    @property
    def zz(self) -> float:
        """中枢中心."""
        return (self.zg + self.zd) / 2


@dataclass(frozen=True)
class BSPoint:
    """买卖点."""

    type: BSPointType
    index: int
    """对应笔终点在合并 K 线序列中的位置"""

    price: float
    datetime: Optional[datetime] = None
    is_divergence: bool = False
