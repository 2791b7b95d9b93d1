"""
pytest 配置和共享 fixtures.
"""

from __future__ import annotations

import os
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional

import pytest

# 确保项目根目录在 Python 路径中
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))
os.chdir(REPO_ROOT)

from vnpy.trader.constant import Exchange, Interval  # noqa: E402
from vnpy.trader.object import BarData  # noqa: E402

from chanlun.core.objects import (  # noqa: E402
    Fractal,
    FractalType,
    MergedBar,
    Stroke,
)

BASE_DT = datetime(2025, 1, 2, 9, 0)


def create_bar(
    index: int,
    high: float,
    low: float,
    close: Optional[float] = None,
    symbol: str = "p2505",
) -> BarData:
    """创建测试用 Bar 数据（时间按分钟递增）."""
    close = (high + low) / 2 if close is None else close
    return BarData(
        symbol=symbol,
        exchange=Exchange.DCE,
        datetime=BASE_DT + timedelta(minutes=index),
        interval=Interval.MINUTE,
        open_price=close,
        high_price=high,
        low_price=low,
        close_price=close,
        volume=100,
        gateway_name="TEST",
    )


def create_zigzag_bars(
    turns: list[float],
    step: float = 2.0,
    half_width: float = 1.0,
) -> list[BarData]:
    """
    按转折点生成折线行情.

    相邻 K 线的高低点同向移动 step，因此不存在包含关系，
    每个转折点恰好形成一个分型。
    """
    mids = [turns[0]]
    for target in turns[1:]:
        current = mids[-1]
        direction = 1 if target > current else -1
        while mids[-1] != target:
            mids.append(mids[-1] + direction * step)
    return [create_bar(i, mid + half_width, mid - half_width) for i, mid in enumerate(mids)]


@pytest.fixture
def sample_vt_symbols() -> list[str]:
    """返回测试用的 vt_symbol 列表."""
    return [
        "p0.DCE",
        "p2501.DCE",
        "rb0.SHFE",
        "IF2501.CFFEX",
        "cu0.SHFE",
    ]


@pytest.fixture
def invalid_vt_symbols() -> list[str]:
    """返回无效的 vt_symbol 列表."""
    return [
        "p0",           # 缺少交易所
        ".DCE",         # 缺少 symbol
        "p0.INVALID",   # 无效交易所
        "",             # 空字符串
    ]


@pytest.fixture
def make_bars() -> Callable[[list[tuple[float, float]]], list[BarData]]:
    """(high, low) 列表 -> BarData 列表."""
    def _make(ranges: list[tuple[float, float]]) -> list[BarData]:
        return [create_bar(i, high, low) for i, (high, low) in enumerate(ranges)]
    return _make


@pytest.fixture
def make_merged_bars() -> Callable[[list[tuple[float, float]]], list[MergedBar]]:
    """(high, low) 列表 -> 一一对应原始 K 线的 MergedBar 列表."""
    def _make(ranges: list[tuple[float, float]]) -> list[MergedBar]:
        return [
            MergedBar(
                original_index=i,
                last_original_index=i,
                high=high,
                low=low,
                close=(high + low) / 2,
                datetime=BASE_DT + timedelta(minutes=i),
            )
            for i, (high, low) in enumerate(ranges)
        ]
    return _make


@pytest.fixture
def make_fractal() -> Callable[..., Fractal]:
    """构造分型."""
    def _make(index: int, fractal_type: FractalType, high: float, low: float) -> Fractal:
        price = high if fractal_type == FractalType.TOP else low
        return Fractal(
            index=index,
            type=fractal_type,
            price=price,
            high=high,
            low=low,
            original_index=index,
            last_original_index=index,
            datetime=BASE_DT + timedelta(minutes=index),
        )
    return _make


@pytest.fixture
def make_stroke() -> Callable[..., Stroke]:
    """构造笔（默认带起止分型，便于买卖点和绘图使用）."""
    def _make(
        is_up: bool,
        high: float,
        low: float,
        start_index: int = 0,
        end_index: int = 0,
        macd_area: float = 0.0,
    ) -> Stroke:
        def _fractal(index: int, is_top: bool) -> Fractal:
            return Fractal(
                index=index,
                type=FractalType.TOP if is_top else FractalType.BOTTOM,
                price=high if is_top else low,
                high=high if is_top else low + 2,
                low=high - 2 if is_top else low,
                original_index=index,
                last_original_index=index,
                datetime=BASE_DT + timedelta(minutes=index),
            )

        start = _fractal(start_index, is_top=not is_up)
        end = _fractal(end_index, is_top=is_up)
        return Stroke(
            is_up=is_up,
            high=high,
            low=low,
            start_index=start_index,
            end_index=end_index,
            start_fractal=start,
            end_fractal=end,
            macd_area=macd_area,
            bar_count=end_index - start_index + 1,
        )
    return _make


@pytest.fixture
def buy3_bars() -> list[BarData]:
    """
    中枢后向上离开、回踩不进中枢的行情.

    笔: 120↓108↑118↓106↑140↓124，中枢 ZG=119 ZD=107，末笔回踩低点 123 >= ZG。
    """
    return create_zigzag_bars([100, 120, 108, 118, 106, 140, 124, 130])


@pytest.fixture
def sell3_bars() -> list[BarData]:
    """
    中枢后向下离开、回抽不进中枢的行情.

    笔: 180↑192↓182↑194↓160↑176，中枢 ZG=193 ZD=181，末笔回抽高点 177 <= ZD。
    """
    return create_zigzag_bars([200, 180, 192, 182, 194, 160, 176, 170])
