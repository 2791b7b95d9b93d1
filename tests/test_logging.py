"""
测试 chanlun.common.logging 模块.
"""

from __future__ import annotations

import logging
from io import StringIO

import pytest

from chanlun.common.logging import (
    PIPELINE_LOGGER,
    PIPELINE_STAGES,
    get_logger,
    setup_logging,
)
from chanlun.core.engine import ChanEngine

KEY = "p2505.DCE_1m"


@pytest.fixture(autouse=True)
def reset_pipeline_levels():
    """每个测试后恢复 chanlun Logger 级别，避免影响其它测试."""
    yield
    logging.getLogger(PIPELINE_LOGGER).setLevel(logging.NOTSET)
    for name in PIPELINE_STAGES.values():
        logging.getLogger(name).setLevel(logging.NOTSET)


class TestSetupLogging:
    """测试 setup_logging 函数."""

    def test_default_level_is_info(self):
        """测试默认根 Logger 与 chanlun 都是 INFO."""
        setup_logging()
        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger(PIPELINE_LOGGER).level == logging.INFO

    def test_verbose_only_affects_pipeline(self):
        """测试 verbose=True 只把 chanlun 设为 DEBUG，根 Logger 仍为 INFO."""
        setup_logging(verbose=True)
        assert logging.getLogger().level == logging.INFO
        assert logging.getLogger(PIPELINE_LOGGER).level == logging.DEBUG

    def test_verbose_hides_third_party_debug(self):
        """测试 verbose 模式下第三方库的 DEBUG 不输出."""
        stream = StringIO()
        setup_logging(verbose=True, stream=stream)

        logging.getLogger("vnpy.trader.test").debug("第三方调试")
        get_logger("chanlun.core.test").debug("流水线调试")

        output = stream.getvalue()
        assert "第三方调试" not in output
        assert "流水线调试" in output

    def test_explicit_level_override(self):
        """测试显式指定级别覆盖 verbose 并同时作用于根 Logger."""
        setup_logging(verbose=True, level=logging.WARNING)
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger(PIPELINE_LOGGER).level == logging.WARNING

    def test_debug_stages(self):
        """测试只对指定阶段开启 DEBUG."""
        setup_logging(debug_stages=["pivot"])
        assert logging.getLogger("chanlun.core.pivot").level == logging.DEBUG
        assert logging.getLogger("chanlun.core.engine").level == logging.NOTSET
        assert not logging.getLogger("chanlun.core.engine").isEnabledFor(logging.DEBUG)

    def test_debug_stages_reset_on_reconfigure(self):
        """测试重新配置时清除上一次的阶段级别."""
        setup_logging(debug_stages=["inclusion", "engine"])
        setup_logging()
        for name in PIPELINE_STAGES.values():
            assert logging.getLogger(name).level == logging.NOTSET

    def test_unknown_stage_raises(self):
        """测试未知阶段名抛出 ValueError."""
        with pytest.raises(ValueError, match="未知的流水线阶段"):
            setup_logging(debug_stages=["segment"])

    def test_custom_stream(self):
        """测试自定义输出流."""
        stream = StringIO()
        setup_logging(stream=stream)

        get_logger("test_custom_stream").info("测试消息")

        assert "测试消息" in stream.getvalue()


class TestGetLogger:
    """测试 get_logger 函数."""

    def test_logger_name(self):
        """测试 Logger 名称正确."""
        logger = get_logger("chanlun.core.engine")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "chanlun.core.engine"
        assert logger is logging.getLogger("chanlun.core.engine")


class TestPipelineLogging:
    """测试流水线日志输出."""

    def _inclusion_bars(self, make_bars):
        """第 3 根 K 线被第 2 根包含，之后逐根抬高."""
        ranges = [(100, 90), (110, 100), (108, 102)]
        ranges += [(120 + 10 * i, 110 + 10 * i) for i in range(8)]
        return make_bars(ranges)

    def test_engine_debug_line_on_verbose(self, buy3_bars):
        """测试 verbose 模式下每次处理输出结构统计."""
        stream = StringIO()
        setup_logging(verbose=True, stream=stream)

        ChanEngine().update(KEY, buy3_bars)

        output = stream.getvalue()
        assert f"[缠论] {KEY}" in output
        assert "创建缠论状态" in output
        assert "[买卖点]" in output

    def test_engine_quiet_at_warning(self, buy3_bars):
        """测试 WARNING 级别下流水线不输出."""
        stream = StringIO()
        setup_logging(level=logging.WARNING, stream=stream)

        ChanEngine().update(KEY, buy3_bars)

        assert stream.getvalue() == ""

    def test_engine_stage_only(self, make_bars):
        """测试只开启 engine 阶段时不输出包含处理细节."""
        stream = StringIO()
        setup_logging(debug_stages=["engine"], stream=stream)

        ChanEngine().update(KEY, self._inclusion_bars(make_bars))

        output = stream.getvalue()
        assert f"[缠论] {KEY}" in output
        assert "[包含]" not in output

    def test_inclusion_stage_only(self, make_bars):
        """测试只开启 inclusion 阶段时输出包含处理细节."""
        stream = StringIO()
        setup_logging(debug_stages=["inclusion"], stream=stream)

        ChanEngine().update(KEY, self._inclusion_bars(make_bars))

        output = stream.getvalue()
        assert "[包含] 向上处理" in output
        assert "[缠论]" not in output
