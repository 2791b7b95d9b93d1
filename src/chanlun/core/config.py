"""
缠论流水线配置.

参数默认值集中定义在 chanlun.common.constants。
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any

from chanlun.common.constants import (
    DEFAULT_LOTS,
    DEFAULT_MIN_BAR_COUNT,
    DEFAULT_MONEY,
    DEFAULT_PIVOT_MIN_STROKES,
    DEFAULT_STROKE_MIN_BARS,
    MACD_FAST,
    MACD_SIGNAL,
    MACD_SLOW,
)


class TradeMode(IntEnum):
    """交易方向模式."""

    BOTH = 0        # 标准（多空双向）
    LONG_ONLY = 1   # 仅做多
    SHORT_ONLY = 2  # 仅做空


class LotsMode(IntEnum):
    """手数模式."""

    FIXED = 0  # 固定手数
    MONEY = 1  # 固定金额


@dataclass
class ChanConfig:
    """缠论流水线配置."""

    min_bar_count: int = DEFAULT_MIN_BAR_COUNT
    stroke_min_bars: int = DEFAULT_STROKE_MIN_BARS
    pivot_min_strokes: int = DEFAULT_PIVOT_MIN_STROKES
    use_pivot: bool = True
    use_divergence: bool = True
    mode: TradeMode = TradeMode.BOTH
    lots_mode: LotsMode = LotsMode.MONEY
    lots: float = DEFAULT_LOTS
    money: float = DEFAULT_MONEY
    macd_fast: int = MACD_FAST
    macd_slow: int = MACD_SLOW
    macd_signal: int = MACD_SIGNAL

    @classmethod
    def from_setting(cls, setting: dict[str, Any]) -> "ChanConfig":
        """
        从 vnpy 风格的参数字典构建配置.

        未知键被忽略；整数形式的开关（0/1）和枚举值会被转换。

        Raises:
            ValueError: 参数校验失败
        """
        known = cls.__dataclass_fields__.keys()
        kwargs = {k: v for k, v in setting.items() if k in known}

        for key in ("use_pivot", "use_divergence"):
            if key in kwargs:
                kwargs[key] = bool(kwargs[key])
        if "mode" in kwargs:
            kwargs["mode"] = TradeMode(int(kwargs["mode"]))
        if "lots_mode" in kwargs:
            kwargs["lots_mode"] = LotsMode(int(kwargs["lots_mode"]))

        config = cls(**kwargs)
        config.validate()
        return config

    def validate(self) -> None:
        """
        参数校验.

        Raises:
            ValueError: 参数不合法
        """
        if self.min_bar_count < 1:
            raise ValueError(f"min_bar_count 必须为正数: {self.min_bar_count}")
        if self.stroke_min_bars < 3:
            raise ValueError(f"stroke_min_bars 不能小于 3: {self.stroke_min_bars}")
        if self.pivot_min_strokes < 2:
            raise ValueError(f"pivot_min_strokes 不能小于 2: {self.pivot_min_strokes}")
        if min(self.macd_fast, self.macd_slow, self.macd_signal) < 1:
            raise ValueError("MACD 参数必须为正数")
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) 必须小于 macd_slow ({self.macd_slow})"
            )
        if self.lots <= 0:
            raise ValueError(f"lots 必须为正数: {self.lots}")
        if self.money <= 0:
            raise ValueError(f"money 必须为正数: {self.money}")

    def to_dict(self) -> dict[str, Any]:
        """转换为可 JSON 序列化的字典."""
        data = asdict(self)
        data["mode"] = int(self.mode)
        data["lots_mode"] = int(self.lots_mode)
        return data
