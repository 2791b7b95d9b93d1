"""
测试 chanlun.strategies.cta_chan_lun 模块.

使用 MagicMock 代替 CTA 引擎，只检查策略发出的下单请求。
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from vnpy.trader.constant import Direction, Offset

from chanlun.core.config import LotsMode
from chanlun.core.decision import PositionStatus
from chanlun.strategies.cta_chan_lun import CtaChanLunStrategy

VT_SYMBOL = "p2505.DCE"


@pytest.fixture
def cta_engine():
    engine = MagicMock()
    engine.get_size.return_value = 10
    return engine


def _strategy(cta_engine, setting=None) -> CtaChanLunStrategy:
    return CtaChanLunStrategy(cta_engine, "chan_test", VT_SYMBOL, setting or {})


def _sent_orders(cta_engine) -> list[tuple[Direction, Offset]]:
    return [(c.args[1], c.args[2]) for c in cta_engine.send_order.call_args_list]


class TestStrategyInit:
    """测试策略参数."""

    def test_setting_applied(self, cta_engine):
        """测试参数字典写入配置."""
        strategy = _strategy(cta_engine, {"lots_mode": 0, "lots": 3, "use_divergence": False})
        assert strategy.config.lots_mode == LotsMode.FIXED
        assert strategy.config.lots == 3
        assert strategy.config.use_divergence is False

    def test_invalid_setting_raises(self, cta_engine):
        """测试非法参数在创建策略时报错."""
        with pytest.raises(ValueError):
            _strategy(cta_engine, {"stroke_min_bars": 1})

    def test_on_init_with_debugger(self, cta_engine, tmp_path, monkeypatch):
        """测试开启调试时在 data/debug 下创建会话目录."""
        monkeypatch.chdir(tmp_path)
        strategy = _strategy(cta_engine, {"debug_enabled": True, "debug_log_console": False})
        strategy.on_init()
        try:
            assert strategy.bg is not None
            assert (strategy._debugger.debug_dir / "config.json").exists()
        finally:
            strategy.on_stop()
        assert (strategy._debugger.debug_dir / "summary.json").exists()


class TestStrategyOnBar:
    """测试 K 线回调."""

    def test_structure_variables(self, cta_engine, buy3_bars):
        """测试未交易时只更新结构变量，不下单."""
        strategy = _strategy(cta_engine)
        for bar in buy3_bars:
            strategy.on_bar(bar)

        assert strategy.bar_count == len(buy3_bars)
        assert strategy.bi_count == 5
        assert strategy.pivot_count == 1
        assert strategy.signal == "3B"
        assert strategy.plot_records
        cta_engine.send_order.assert_not_called()

    def test_orders_sent_when_trading(self, cta_engine, buy3_bars):
        """测试交易时按决策表依次开平仓."""
        strategy = _strategy(cta_engine, {"lots_mode": 0, "lots": 2})
        strategy.trading = True
        for bar in buy3_bars:
            strategy.on_bar(bar)

        assert _sent_orders(cta_engine) == [
            (Direction.LONG, Offset.OPEN),    # 两笔后向上转折
            (Direction.SHORT, Offset.CLOSE),  # 中枢形成时向下转折
            (Direction.LONG, Offset.OPEN),    # 三买
            (Direction.SHORT, Offset.CLOSE),  # 持多遇到向下转折
            (Direction.LONG, Offset.OPEN),    # 三买
        ]
        volumes = {c.args[4] for c in cta_engine.send_order.call_args_list}
        assert volumes == {2}
        assert strategy._position.status == PositionStatus.LONG

    def test_zero_volume_skipped(self, cta_engine, buy3_bars):
        """测试固定金额折算为 0 手时不下单."""
        strategy = _strategy(cta_engine, {"lots_mode": 1, "money": 1})
        strategy.trading = True
        for bar in buy3_bars:
            strategy.on_bar(bar)

        cta_engine.send_order.assert_not_called()
        messages = [c.args[0] for c in cta_engine.write_log.call_args_list]
        assert any("手数为 0" in m for m in messages)

    def test_short_only_mode(self, cta_engine, buy3_bars):
        """测试仅做空模式下不开多."""
        strategy = _strategy(cta_engine, {"lots_mode": 0, "lots": 1, "mode": 2})
        strategy.trading = True
        for bar in buy3_bars:
            strategy.on_bar(bar)

        assert (Direction.LONG, Offset.OPEN) not in _sent_orders(cta_engine)
