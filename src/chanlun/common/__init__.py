"""
公共模块.

提供项目级别的常量、工具函数和日志配置。
"""

from chanlun.common.constants import (
    EXCHANGE_MAP,
    INTERVAL_MAP,
)
from chanlun.common.logging import setup_logging
from chanlun.common.utils import bars_from_dataframe, make_state_key, parse_vt_symbol

__all__ = [
    "EXCHANGE_MAP",
    "INTERVAL_MAP",
    "bars_from_dataframe",
    "make_state_key",
    "parse_vt_symbol",
    "setup_logging",
]
