# src/chanlun/strategies/cta_chan_lun.py
"""
缠论买卖点策略.

核心逻辑：
1. 每根完成的 K 线驱动一次缠论流水线（包含处理 -> 分型 -> 笔 -> 中枢 -> 买卖点）
2. 根据最新两笔与当前中枢决定开平仓（三买/三卖、背驰一买/一卖、笔转折）
3. 手数支持固定手数和固定金额两种模式

数据要求：
- 回测时直接使用数据库中的 K 线周期
- 实盘时由 BarGenerator 把 Tick 合成为 1 分钟 K 线
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from vnpy.trader.object import BarData, OrderData, TickData, TradeData
from vnpy.trader.utility import BarGenerator
from vnpy_ctastrategy import CtaTemplate
from vnpy_ctastrategy.base import StopOrder

from chanlun.common.constants import (
    DEFAULT_LOTS,
    DEFAULT_MIN_BAR_COUNT,
    DEFAULT_MONEY,
    DEFAULT_PIVOT_MIN_STROKES,
    DEFAULT_STROKE_MIN_BARS,
)
from chanlun.common.utils import make_state_key
from chanlun.core.config import ChanConfig
from chanlun.core.decision import OrderType, Position, TradeInstruction, calc_volume, decide
from chanlun.core.engine import ChanEngine
from chanlun.core.plot import PlotRecord, build_plot_records
from chanlun.utils.chan_debugger import ChanDebugger

logger = logging.getLogger(__name__)


class CtaChanLunStrategy(CtaTemplate):
    """
    缠论买卖点策略.

    使用中枢时：
    - 3B/3S：离开中枢后回踩/回抽不进中枢，顺势开仓
    - 1B/1S：中枢外笔转折且出现背驰买卖点，逆势开仓
    - 笔反向转折平仓，价格已在中枢另一侧时反手
    不使用中枢时：跟随笔方向转折开平仓。
    """

    author: str = "ChanLun"

    # -------------------------
    # 可配置参数
    # -------------------------
    min_bar_count: int = DEFAULT_MIN_BAR_COUNT      # 流水线启动所需最少 K 线数
    stroke_min_bars: int = DEFAULT_STROKE_MIN_BARS  # 笔的最少合并 K 线数（含两端）
    pivot_min_strokes: int = DEFAULT_PIVOT_MIN_STROKES

    use_pivot: bool = True
    use_divergence: bool = True
    mode: int = 0                    # 0=多空双向, 1=仅做多, 2=仅做空

    lots_mode: int = 1               # 0=固定手数, 1=固定金额
    lots: float = DEFAULT_LOTS
    money: float = DEFAULT_MONEY
    margin_ratio: float = 0.1        # 保证金比例
    fractional_volume: bool = False  # 允许小数手（保留 3 位）

    # 调试
    debug_enabled: bool = False
    debug_log_console: bool = True

    parameters: list[str] = [
        "min_bar_count", "stroke_min_bars", "pivot_min_strokes",
        "use_pivot", "use_divergence", "mode",
        "lots_mode", "lots", "money", "margin_ratio", "fractional_volume",
        "debug_enabled", "debug_log_console",
    ]

    # -------------------------
    # 运行时变量
    # -------------------------
    bar_count: int = 0
    bi_count: int = 0
    pivot_count: int = 0
    signal: str = ""

    variables: list[str] = [
        "bar_count", "bi_count", "pivot_count", "signal",
    ]

    def __init__(
        self,
        cta_engine: Any,
        strategy_name: str,
        vt_symbol: str,
        setting: dict[str, Any],
    ) -> None:
        super().__init__(cta_engine, strategy_name, vt_symbol, setting)

        self.config = ChanConfig.from_setting({
            name: getattr(self, name) for name in self.parameters
        })
        self.engine = ChanEngine(self.config)

        # 实盘用 BarGenerator (Tick -> 1m Bar)
        self.bg: Optional[BarGenerator] = None

        # 完整 K 线历史（只追加）
        self._bars: list[BarData] = []

        # 决策层持仓
        self._position: Position = Position()

        # 最近一次的绘图输出
        self.plot_records: list[PlotRecord] = []

        self._debugger: Optional[ChanDebugger] = None

        logger.info("策略初始化: %s, vt_symbol=%s", strategy_name, vt_symbol)

    def on_init(self) -> None:
        self.write_log(f"策略初始化: {self.strategy_name}")

        self.bg = BarGenerator(self.on_bar)

        if self.debug_enabled:
            self._debugger = ChanDebugger(
                strategy_name=self.strategy_name,
                base_dir="data/debug",
                enabled=True,
                log_level="DEBUG",
                log_console=self.debug_log_console,
            )
            self._debugger.save_config({
                "strategy_name": self.strategy_name,
                "vt_symbol": self.vt_symbol,
                "margin_ratio": self.margin_ratio,
                "fractional_volume": self.fractional_volume,
                **self.config.to_dict(),
            })

        self.load_bar(10)
        self.write_log("策略初始化完成")

    def on_start(self) -> None:
        self.write_log("策略启动")
        self.put_event()

    def on_stop(self) -> None:
        self.write_log("策略停止")
        if self._debugger:
            self._debugger.close()
        self.put_event()

    def on_tick(self, tick: TickData) -> None:
        """Tick 数据回调（实盘时由 CTA 引擎调用）."""
        if self.bg:
            self.bg.update_tick(tick)

    def on_bar(self, bar: BarData) -> None:
        """
        K 线回调.

        vnpy 只推送已完成的 K 线，因此每根 K 线都按 is_final 处理。
        """
        self._bars.append(bar)
        self.bar_count = len(self._bars)

        if self._debugger and self.trading:
            self._debugger.log_bar(bar)

        key = make_state_key(self.vt_symbol, bar.interval or "")
        state = self.engine.update(key, self._bars, is_final=True)
        if state is None:
            self.put_event()
            return

        self.bi_count = len(state.strokes)
        self.pivot_count = len(state.pivots)
        if state.bs_points:
            self.signal = state.bs_points[-1].type.label

        self.plot_records = build_plot_records(state, self._bars)

        if self._debugger and self.trading:
            self._debugger.log_chan_state(state)

        if self.trading:
            volume = calc_volume(
                self.config,
                bar.close_price,
                size=self.get_size(),
                margin_ratio=self.margin_ratio,
                fractional=self.fractional_volume,
            )
            self._position, instructions = decide(
                self._position,
                state.strokes,
                state.current_pivot,
                state.bs_points,
                bar.close_price,
                volume,
                self.config,
            )
            for instruction in instructions:
                self._execute(instruction, bar)

        self.put_event()

    def _execute(self, instruction: TradeInstruction, bar: BarData) -> None:
        """把下单意图映射为 CtaTemplate 下单接口."""
        if instruction.volume <= 0:
            self.write_log(f"手数为 0，忽略指令: {instruction.order_type.name}")
            return

        price = instruction.price
        volume = instruction.volume
        if instruction.order_type == OrderType.BUY:
            self.buy(price, volume)
        elif instruction.order_type == OrderType.SELL:
            self.short(price, volume)
        elif instruction.order_type == OrderType.SELL_TO_COVER:
            self.sell(price, volume)
        elif instruction.order_type == OrderType.BUY_TO_COVER:
            self.cover(price, volume)
        else:
            return

        self.write_log(
            f"{instruction.order_type.name}: price={price:.2f}, volume={volume}, "
            f"signal={self.signal}"
        )
        if self._debugger:
            self._debugger.log_trade(instruction, self._position, bar.datetime)

    def on_trade(self, trade: TradeData) -> None:
        """成交回调."""
        self.write_log(
            f"成交: {trade.direction.value} {trade.offset.value} "
            f"{trade.volume}手 @ {trade.price:.2f}"
        )
        self.sync_data()
        self.put_event()

    def on_order(self, order: OrderData) -> None:
        """订单状态更新回调."""
        pass

    def on_stop_order(self, stop_order: StopOrder) -> None:
        """停止单回调."""
        pass
