"""ChanLun - 缠论结构识别与交易信号流水线."""

__version__ = "0.1.0"

# 导出常用模块供便捷访问
from chanlun.common import (
    INTERVAL_MAP,
    make_state_key,
    parse_vt_symbol,
    setup_logging,
)
from chanlun.core import ChanConfig, ChanEngine, ChanState

__all__ = [
    "__version__",
    "INTERVAL_MAP",
    "ChanConfig",
    "ChanEngine",
    "ChanState",
    "make_state_key",
    "parse_vt_symbol",
    "setup_logging",
]
