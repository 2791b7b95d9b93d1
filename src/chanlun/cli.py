"""
缠论离线回放命令行接口.

用法:
    python -m chanlun.cli --csv bars.csv
    python -m chanlun.cli --csv bars.csv --symbol p0.DCE --interval 1m --no-divergence -v
    python -m chanlun.cli --csv bars.csv --debug-stage pivot --debug-stage engine
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

import pandas as pd
from vnpy.trader.object import BarData

from chanlun.common.constants import (
    DEFAULT_PIVOT_MIN_STROKES,
    DEFAULT_STROKE_MIN_BARS,
    INTERVAL_MAP,
)
from chanlun.common.logging import PIPELINE_STAGES, get_logger, setup_logging
from chanlun.common.utils import bars_from_dataframe, make_state_key
from chanlun.core.config import ChanConfig
from chanlun.core.engine import ChanEngine, ChanState

logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """解析命令行参数."""
    parser = argparse.ArgumentParser(
        prog="chanlun.cli",
        description="缠论结构离线回放",
    )
    parser.add_argument(
        "--csv",
        type=str,
        required=True,
        help="K 线 CSV 文件（列: datetime, open, high, low, close[, volume]）",
    )
    parser.add_argument(
        "--symbol",
        type=str,
        default="chan.LOCAL",
        help="合约代码 (默认: chan.LOCAL)",
    )
    parser.add_argument(
        "--interval",
        type=str,
        default="1m",
        choices=list(INTERVAL_MAP.keys()),
        help="数据周期 (默认: 1m)",
    )
    parser.add_argument(
        "--stroke-min-bars",
        type=int,
        default=DEFAULT_STROKE_MIN_BARS,
        help=f"笔的最少合并 K 线数 (默认: {DEFAULT_STROKE_MIN_BARS})",
    )
    parser.add_argument(
        "--pivot-min-strokes",
        type=int,
        default=DEFAULT_PIVOT_MIN_STROKES,
        help=f"形成中枢的最少笔数 (默认: {DEFAULT_PIVOT_MIN_STROKES})",
    )
    parser.add_argument(
        "--no-divergence",
        action="store_true",
        help="一买/一卖不要求背驰",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="详细日志输出",
    )
    parser.add_argument(
        "--debug-stage",
        action="append",
        choices=list(PIPELINE_STAGES),
        help="只对指定流水线阶段输出 DEBUG 日志（可重复）",
    )
    return parser.parse_args(argv)


def print_result(state: Optional[ChanState], key: str, bar_count: int) -> None:
    """打印回放结果."""
    print("\n" + "=" * 60)
    print("  缠论回放结果")
    print("=" * 60)

    if state is None:
        print(f"状态键: {key}")
        print(f"K 线数: {bar_count}")
        print("数据不足，未触发流水线")
        print("=" * 60)
        return

    print(f"""
状态键: {key}
K 线数: {bar_count}
合并 K 线: {len(state.merged_bars)}
分型: {len(state.fractals)}
笔: {len(state.strokes)}
中枢: {len(state.pivots)}
买卖点: {len(state.bs_points)}
""")

    if state.current_pivot is not None:
        pivot = state.current_pivot
        print(f"当前中枢: ZG={pivot.zg:.2f} ZD={pivot.zd:.2f} GG={pivot.gg:.2f} DD={pivot.dd:.2f}")

    if state.bs_points:
        print("=== 买卖点 ===")
        for point in state.bs_points:
            dt = point.datetime.strftime("%Y-%m-%d %H:%M:%S") if point.datetime else "-"
            flag = " 背驰" if point.is_divergence else ""
            print(f"  {dt}  {point.type.label}  @ {point.price:.2f}{flag}")
    else:
        print("=== 无买卖点 ===")

    print("=" * 60)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI 入口."""
    args = parse_args(argv)

    setup_logging(verbose=args.verbose, debug_stages=args.debug_stage)

    interval = INTERVAL_MAP[args.interval]

    try:
        config = ChanConfig(
            stroke_min_bars=args.stroke_min_bars,
            pivot_min_strokes=args.pivot_min_strokes,
            use_divergence=not args.no_divergence,
        )
        config.validate()
    except ValueError as e:
        logger.error("参数错误: %s", e)
        sys.exit(1)

    try:
        df = pd.read_csv(args.csv)
        bars = bars_from_dataframe(df, vt_symbol=args.symbol, interval=interval)
    except (OSError, ValueError) as e:
        logger.error("读取 K 线失败: %s", e)
        sys.exit(1)

    key = make_state_key(args.symbol, interval)
    engine = ChanEngine(config)

    logger.info("开始回放: key=%s, bars=%d", key, len(bars))

    # 逐根回放，与实时推送的调用方式一致
    state: Optional[ChanState] = None
    history: list[BarData] = []
    for bar in bars:
        history.append(bar)
        result = engine.update(key, history, is_final=True)
        if result is not None:
            state = result

    print_result(state, key, len(bars))


if __name__ == "__main__":
    main()
