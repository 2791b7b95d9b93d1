"""
公共工具函数.

提供 vt_symbol 解析、状态键生成和 DataFrame -> BarData 转换。
"""

from __future__ import annotations

from typing import overload

import pandas as pd
from vnpy.trader.constant import Exchange, Interval
from vnpy.trader.object import BarData

from chanlun.common.constants import EXCHANGE_MAP, REQUIRED_BAR_COLUMNS


@overload
def parse_vt_symbol(vt_symbol: str, *, return_exchange_enum: bool = True) -> tuple[str, Exchange]: ...


@overload
def parse_vt_symbol(vt_symbol: str, *, return_exchange_enum: bool = False) -> tuple[str, str]: ...


def parse_vt_symbol(
    vt_symbol: str,
    *,
    return_exchange_enum: bool = True,
) -> tuple[str, Exchange] | tuple[str, str]:
    """
    解析 vt_symbol 为 symbol 和 exchange.

    Args:
        vt_symbol: 合约代码，如 "p0.DCE" 或 "p2501.DCE"
        return_exchange_enum: 是否返回 Exchange 枚举（默认 True）

    Returns:
        (symbol, exchange) 元组

    Raises:
        ValueError: vt_symbol 格式错误或交易所不支持

    Examples:
        >>> parse_vt_symbol("p0.DCE")
        ('p0', <Exchange.DCE: 'DCE'>)
    """
    if "." not in vt_symbol:
        raise ValueError(
            f"vt_symbol 格式错误: {vt_symbol}，应为 symbol.exchange 格式"
        )

    symbol, exchange_str = vt_symbol.rsplit(".", 1)
    exchange_upper = exchange_str.upper()

    if not symbol:
        raise ValueError(f"vt_symbol 中 symbol 为空: {vt_symbol}")

    if return_exchange_enum:
        if exchange_upper not in EXCHANGE_MAP:
            raise ValueError(
                f"未知的交易所: {exchange_str}，"
                f"支持的交易所: {list(EXCHANGE_MAP.keys())}"
            )
        return symbol, EXCHANGE_MAP[exchange_upper]

    return symbol, exchange_str


def make_state_key(symbol: str, interval: Interval | str) -> str:
    """
    生成 品种+周期 状态键.

    每个状态键对应一份独立的缠论状态（合并K线/分型/笔/中枢/买卖点）。

    Examples:
        >>> make_state_key("p0.DCE", "1m")
        'p0.DCE_1m'
    """
    interval_str = interval.value if isinstance(interval, Interval) else str(interval)
    return f"{symbol}_{interval_str}"


def bars_from_dataframe(
    df: pd.DataFrame,
    vt_symbol: str = "chan.LOCAL",
    interval: Interval = Interval.MINUTE,
    gateway_name: str = "REPLAY",
) -> list[BarData]:
    """
    将 OHLCV DataFrame 转换为 BarData 列表.

    Args:
        df: 至少包含 datetime/open/high/low/close 列，volume 列可选
        vt_symbol: 合约代码
        interval: K 线周期
        gateway_name: 网关名称

    Returns:
        按 datetime 升序排列的 BarData 列表

    Raises:
        ValueError: 缺少必需列
    """
    missing = [c for c in REQUIRED_BAR_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"缺少必需列: {missing}")

    symbol, exchange = parse_vt_symbol(vt_symbol)

    frame = df.copy()
    frame["datetime"] = pd.to_datetime(frame["datetime"])
    frame = frame.sort_values("datetime").reset_index(drop=True)
    has_volume = "volume" in frame.columns

    bars: list[BarData] = []
    for row in frame.itertuples(index=False):
        bars.append(BarData(
            symbol=symbol,
            exchange=exchange,
            datetime=row.datetime.to_pydatetime(),
            interval=interval,
            open_price=float(row.open),
            high_price=float(row.high),
            low_price=float(row.low),
            close_price=float(row.close),
            volume=float(row.volume) if has_volume else 0.0,
            gateway_name=gateway_name,
        ))
    return bars
