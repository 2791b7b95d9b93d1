"""
交易决策映射.

把笔/中枢/买卖点状态映射为下单意图，供外部交易层执行。
decide() 是纯状态迁移函数：不持有任何状态，也不真正下单。
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from chanlun.core.config import ChanConfig, LotsMode, TradeMode
from chanlun.core.objects import BSPoint, BSPointType, Pivot, Stroke


class OrderType(IntEnum):
    """下单意图."""

    NONE = 0
    BUY = 1            # 开多
    SELL = 2           # 开空
    BUY_TO_COVER = 3   # 平空
    SELL_TO_COVER = 4  # 平多


class PositionStatus(IntEnum):
    """持仓状态."""

    FLAT = 0
    LONG = 1
    SHORT = 2


@dataclass(frozen=True)
class Position:
    """决策层持仓记录."""

    status: PositionStatus = PositionStatus.FLAT
    volume: float = 0.0


@dataclass(frozen=True)
class TradeInstruction:
    """下单指令."""

    order_type: OrderType
    price: float
    volume: float


FLAT = Position()


def calc_volume(
    config: ChanConfig,
    close: float,
    size: float = 1.0,
    margin_ratio: float = 1.0,
    fractional: bool = False,
) -> float:
    """
    计算下单手数.

    Args:
        config: 配置（lots_mode/lots/money）
        close: 最新收盘价
        size: 合约乘数
        margin_ratio: 保证金比例
        fractional: 是否允许小数手（数字货币类保留 3 位小数）

    Returns:
        固定手数模式返回 lots；固定金额模式返回 money / (价格 × 乘数 × 保证金比例) 向下取整
    """
    if config.lots_mode == LotsMode.FIXED:
        return config.lots

    denominator = close * size * margin_ratio
    if denominator <= 0:
        return 0.0

    num = config.money / denominator
    if fractional:
        return math.floor(num * 1000) / 1000.0
    return float(math.floor(num))


def _latest_divergent(bs_points: list[BSPoint], point_type: BSPointType) -> bool:
    if not bs_points:
        return False
    latest = bs_points[-1]
    return latest.type == point_type and latest.is_divergence


def _open(status: PositionStatus, order_type: OrderType, close: float, volume: float):
    return Position(status, volume), [TradeInstruction(order_type, close, volume)]


def decide(
    position: Position,
    strokes: list[Stroke],
    pivot: Optional[Pivot],
    bs_points: list[BSPoint],
    close: float,
    volume: float,
    config: ChanConfig,
) -> tuple[Position, list[TradeInstruction]]:
    """
    根据最新两笔和当前中枢决定持仓变化.

    使用中枢时：
    - 空仓：三买/三卖开仓；笔在中枢下方（上方）转向且最新买卖点为背驰一买（一卖）时开仓
    - 持多：笔向下转折时平多，价格已跌破 ZD 则反手开空
    - 持空：笔向上转折时平空，价格已突破 ZG 则反手开多
    不使用中枢（或中枢无效）时：跟随笔方向转折开平仓。

    Returns:
        (新持仓, 下单指令列表)
    """
    if len(strokes) < 2:
        return position, []

    last = strokes[-1]
    prev = strokes[-2]
    turn_down = prev.is_up and not last.is_up
    turn_up = not prev.is_up and last.is_up
    allow_long = config.mode != TradeMode.SHORT_ONLY
    allow_short = config.mode != TradeMode.LONG_ONLY

    if config.use_pivot and pivot is not None and pivot.is_valid:
        zg, zd = pivot.zg, pivot.zd

        if position.status == PositionStatus.FLAT:
            if turn_down and prev.high > zg and last.low >= zg and allow_long:
                return _open(PositionStatus.LONG, OrderType.BUY, close, volume)
            if turn_up and prev.low < zd and last.high <= zd and allow_short:
                return _open(PositionStatus.SHORT, OrderType.SELL, close, volume)
            if turn_up and close < zd and allow_long:
                if _latest_divergent(bs_points, BSPointType.BUY1) or not config.use_divergence:
                    return _open(PositionStatus.LONG, OrderType.BUY, close, volume)
                return position, []
            if turn_down and close > zg and allow_short:
                if _latest_divergent(bs_points, BSPointType.SELL1) or not config.use_divergence:
                    return _open(PositionStatus.SHORT, OrderType.SELL, close, volume)
            return position, []

        if position.status == PositionStatus.LONG and turn_down:
            instructions = [TradeInstruction(OrderType.SELL_TO_COVER, close, position.volume)]
            if close < zd and allow_short:
                instructions.append(TradeInstruction(OrderType.SELL, close, volume))
                return Position(PositionStatus.SHORT, volume), instructions
            return FLAT, instructions

        if position.status == PositionStatus.SHORT and turn_up:
            instructions = [TradeInstruction(OrderType.BUY_TO_COVER, close, position.volume)]
            if close > zg and allow_long:
                instructions.append(TradeInstruction(OrderType.BUY, close, volume))
                return Position(PositionStatus.LONG, volume), instructions
            return FLAT, instructions

        return position, []

    if position.status == PositionStatus.FLAT:
        if turn_up and allow_long:
            return _open(PositionStatus.LONG, OrderType.BUY, close, volume)
        if turn_down and allow_short:
            return _open(PositionStatus.SHORT, OrderType.SELL, close, volume)
        return position, []

    if position.status == PositionStatus.LONG and turn_down:
        instructions = [TradeInstruction(OrderType.SELL_TO_COVER, close, position.volume)]
        if allow_short:
            instructions.append(TradeInstruction(OrderType.SELL, close, volume))
            return Position(PositionStatus.SHORT, volume), instructions
        return FLAT, instructions

    if position.status == PositionStatus.SHORT and turn_up:
        instructions = [TradeInstruction(OrderType.BUY_TO_COVER, close, position.volume)]
        if allow_long:
            instructions.append(TradeInstruction(OrderType.BUY, close, volume))
            return Position(PositionStatus.LONG, volume), instructions
        return FLAT, instructions

    return position, []
