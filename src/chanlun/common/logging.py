"""
日志配置模块.

根 Logger 固定在 INFO（或显式指定的级别），vnpy 等第三方库的 DEBUG 输出不会混入；
详细输出只作用于 chanlun 命名空间，并可以按流水线阶段单独开启。
"""

from __future__ import annotations

import logging
import sys
from typing import Iterable, TextIO

# 默认日志格式
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PIPELINE_LOGGER = "chanlun"

# 会输出日志的流水线阶段 -> 模块 Logger 名称
PIPELINE_STAGES: dict[str, str] = {
    "inclusion": "chanlun.core.inclusion",   # 每次包含合并
    "pivot": "chanlun.core.pivot",           # 中枢扩展
    "engine": "chanlun.core.engine",         # 每根 K 线的结构统计、新买卖点
}


def setup_logging(
    verbose: bool = False,
    *,
    level: int | None = None,
    debug_stages: Iterable[str] | None = None,
    format_str: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    stream: TextIO | None = None,
) -> None:
    """
    配置全局日志.

    可重复调用，每次调用都会重置上一次的阶段级别。

    Args:
        verbose: chanlun 全部模块输出 DEBUG（根 Logger 仍为 INFO）
        level: 显式指定级别，同时作用于根 Logger 和 chanlun（覆盖 verbose）
        debug_stages: 只对这些流水线阶段开启 DEBUG，取值见 PIPELINE_STAGES
        format_str: 日志格式字符串
        date_format: 日期格式字符串
        stream: 输出流（默认 sys.stderr）

    Raises:
        ValueError: 未知的阶段名

    Examples:
        >>> setup_logging()  # INFO 级别
        >>> setup_logging(verbose=True)  # chanlun DEBUG
        >>> setup_logging(debug_stages=["pivot"])  # 只看中枢构建细节
    """
    stages = set(debug_stages or ())
    unknown = sorted(stages - PIPELINE_STAGES.keys())
    if unknown:
        raise ValueError(
            f"未知的流水线阶段: {unknown}，可选: {list(PIPELINE_STAGES)}"
        )

    if level is None:
        root_level = logging.INFO
        pipeline_level = logging.DEBUG if verbose else logging.INFO
    else:
        root_level = pipeline_level = level

    logging.basicConfig(
        level=root_level,
        format=format_str,
        datefmt=date_format,
        stream=stream or sys.stderr,
        force=True,
    )

    logging.getLogger(PIPELINE_LOGGER).setLevel(pipeline_level)
    for stage, name in PIPELINE_STAGES.items():
        logging.getLogger(name).setLevel(
            logging.DEBUG if stage in stages else logging.NOTSET
        )


def get_logger(name: str) -> logging.Logger:
    """
    获取命名 Logger.

    Args:
        name: Logger 名称，通常使用 __name__

    Returns:
        Logger 实例
    """
    return logging.getLogger(name)
