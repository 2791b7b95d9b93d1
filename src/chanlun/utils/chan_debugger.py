"""
缠论策略Debug工具类.

按会话落盘 K 线、笔、中枢、买卖点和交易指令，便于复盘流水线每一步的结果。
"""
from __future__ import annotations

import csv
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List

from vnpy.trader.object import BarData

from chanlun.core.decision import OrderType, Position, TradeInstruction
from chanlun.core.engine import ChanState
from chanlun.core.objects import BSPoint, MergedBar, Pivot, Stroke

_ACTION_NAMES = {
    OrderType.BUY: "开多",
    OrderType.SELL: "开空",
    OrderType.SELL_TO_COVER: "平多",
    OrderType.BUY_TO_COVER: "平空",
}


def _fmt_dt(dt: Any) -> str:
    if hasattr(dt, "strftime"):
        return dt.strftime("%Y-%m-%d %H:%M:%S")
    return "" if dt is None else str(dt)


class ChanDebugger:
    """
    缠论策略Debug工具类.

    功能:
    1. 创建带时间戳的debug目录
    2. 记录原始K线和包含处理后K线到CSV文件
    3. 记录新增的笔/中枢/买卖点
    4. 记录交易指令
    5. 日志同时输出到控制台和 strategy.log

    使用方式:
        debugger = ChanDebugger("CtaChanLun", enabled=True)
        debugger.log_bar(bar)
        debugger.log_chan_state(state)
        debugger.log_trade(instruction, position)
    """

    def __init__(
        self,
        strategy_name: str,
        base_dir: str = "data/debug",
        enabled: bool = True,
        log_level: str = "DEBUG",
        log_console: bool = True,
    ):
        """
        初始化Debugger.

        Args:
            strategy_name: 策略名称
            base_dir: debug根目录
            enabled: 是否启用debug
            log_level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
            log_console: 是否输出到控制台
        """
        self.enabled = enabled
        self.strategy_name = strategy_name

        if not enabled:
            self.logger = logging.getLogger(f"ChanDebug_{strategy_name}")
            return

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.session_id = f"{strategy_name}_{timestamp}"
        self.debug_dir = Path(base_dir) / self.session_id
        self.debug_dir.mkdir(parents=True, exist_ok=True)

        self._init_logger(log_level, log_console)
        self._init_csv_files()

        self.stats: Dict[str, Any] = {
            "start_time": timestamp,
            "end_time": "",
            "total_bars": 0,
            "total_merged_bars": 0,
            "total_strokes": 0,
            "total_pivots": 0,
            "total_bs_points": 0,
            "total_trades": 0,
        }

        # 已落盘数量（全量重建后只追加新增部分）
        self._logged_merged = 0
        self._logged_strokes = 0
        self._logged_pivots = 0
        self._logged_points = 0

        self.logger.info(f"{'='*60}")
        self.logger.info(f"ChanDebugger 初始化完成: {strategy_name}")
        self.logger.info(f"目录: {self.debug_dir}")
        self.logger.info(f"{'='*60}")

    def _init_logger(self, level: str, log_console: bool) -> None:
        """初始化日志系统."""
        self.logger = logging.getLogger(f"ChanDebug_{id(self)}")
        self.logger.setLevel(getattr(logging, level.upper(), logging.DEBUG))
        self.logger.handlers.clear()
        self.logger.propagate = False

        fh = logging.FileHandler(self.debug_dir / "strategy.log", encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        self.logger.addHandler(fh)

        if log_console:
            ch = logging.StreamHandler(sys.stdout)
            ch.setLevel(logging.INFO)
            ch.setFormatter(logging.Formatter("%(asctime)s | %(message)s", datefmt="%H:%M:%S"))
            self.logger.addHandler(ch)

    def _init_csv_files(self) -> None:
        """初始化CSV数据文件."""
        self.bar_file = self.debug_dir / "bars.csv"
        self.merged_bar_file = self.debug_dir / "merged_bars.csv"
        self.stroke_file = self.debug_dir / "chan_strokes.csv"
        self.pivot_file = self.debug_dir / "chan_pivots.csv"
        self.bs_point_file = self.debug_dir / "bs_points.csv"
        self.trade_file = self.debug_dir / "trades.csv"

        self._write_csv_header(self.bar_file, [
            "datetime", "open", "high", "low", "close", "volume",
        ])
        self._write_csv_header(self.merged_bar_file, [
            "merged_idx", "datetime", "high", "low", "original_index",
            "last_original_index", "merged_count", "direction",
        ])
        self._write_csv_header(self.stroke_file, [
            "stroke_idx", "direction", "start_index", "end_index",
            "start_datetime", "end_datetime", "high", "low", "macd_area", "bar_count",
        ])
        self._write_csv_header(self.pivot_file, [
            "pivot_idx", "zg", "zd", "gg", "dd", "zz",
            "start_index", "end_index", "stroke_count",
        ])
        self._write_csv_header(self.bs_point_file, [
            "datetime", "type", "index", "price", "is_divergence",
        ])
        self._write_csv_header(self.trade_file, [
            "datetime", "action", "price", "volume", "position",
        ])

    def _write_csv_header(self, filepath: Path, headers: List[str]) -> None:
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(headers)

    def _append_csv(self, filepath: Path, row: List[Any]) -> None:
        with open(filepath, "a", newline="", encoding="utf-8") as f:
            csv.writer(f).writerow(row)

    # =========================================================================
    # K线与缠论结构
    # =========================================================================

    def log_bar(self, bar: BarData) -> None:
        """记录原始K线."""
        if not self.enabled:
            return

        self._append_csv(self.bar_file, [
            _fmt_dt(bar.datetime),
            bar.open_price,
            bar.high_price,
            bar.low_price,
            bar.close_price,
            bar.volume,
        ])
        self.stats["total_bars"] += 1

    def log_merged_bar(self, merged: MergedBar, merged_idx: int) -> None:
        """记录包含处理后的K线."""
        if not self.enabled:
            return

        self._append_csv(self.merged_bar_file, [
            merged_idx,
            _fmt_dt(merged.datetime),
            merged.high,
            merged.low,
            merged.original_index,
            merged.last_original_index,
            merged.merged_count,
            merged.direction.name,
        ])
        self.stats["total_merged_bars"] += 1

        if merged.merged_count > 1:
            self.logger.debug(
                f"[包含] #{merged_idx} 合并{merged.merged_count}根 | "
                f"H={merged.high:.2f} L={merged.low:.2f} | {merged.direction.name}"
            )

    def log_stroke(self, stroke: Stroke, stroke_idx: int) -> None:
        """记录新笔."""
        if not self.enabled:
            return

        start_dt = stroke.start_fractal.datetime if stroke.start_fractal else None
        end_dt = stroke.end_fractal.datetime if stroke.end_fractal else None
        direction = "up" if stroke.is_up else "down"

        self._append_csv(self.stroke_file, [
            stroke_idx,
            direction,
            stroke.start_index,
            stroke.end_index,
            _fmt_dt(start_dt),
            _fmt_dt(end_dt),
            f"{stroke.high:.2f}",
            f"{stroke.low:.2f}",
            f"{stroke.macd_area:.4f}",
            stroke.bar_count,
        ])
        self.stats["total_strokes"] += 1

        self.logger.info(
            f"[笔] #{stroke_idx} {'向上' if stroke.is_up else '向下'} | "
            f"H={stroke.high:.2f} L={stroke.low:.2f} | 面积={stroke.macd_area:.2f}"
        )

    def log_pivot(self, pivot: Pivot, pivot_idx: int) -> None:
        """记录中枢（扩展后的中枢不会重复记录）."""
        if not self.enabled:
            return

        self._append_csv(self.pivot_file, [
            pivot_idx,
            f"{pivot.zg:.2f}",
            f"{pivot.zd:.2f}",
            f"{pivot.gg:.2f}",
            f"{pivot.dd:.2f}",
            f"{pivot.zz:.2f}",
            pivot.start_index,
            pivot.end_index,
            len(pivot.strokes),
        ])
        self.stats["total_pivots"] += 1

        self.logger.info(
            f"[中枢] #{pivot_idx} ZG={pivot.zg:.2f} | ZD={pivot.zd:.2f} | "
            f"区间={pivot.zg - pivot.zd:.2f}"
        )

    def log_bs_point(self, point: BSPoint) -> None:
        """记录买卖点."""
        if not self.enabled:
            return

        self._append_csv(self.bs_point_file, [
            _fmt_dt(point.datetime),
            point.type.label,
            point.index,
            f"{point.price:.2f}",
            int(point.is_divergence),
        ])
        self.stats["total_bs_points"] += 1

        self.logger.warning(
            f"[买卖点] {point.type.label} @ {point.price:.2f}"
            f"{' (背驰)' if point.is_divergence else ''}"
        )

    def log_chan_state(self, state: ChanState) -> None:
        """
        记录缠论状态中新增的笔/中枢/买卖点.

        笔和中枢每次全量重建，已记录的部分可能被修正，这里只追加超出已记录数量的部分。
        """
        if not self.enabled:
            return

        # 最后一根合并K线仍可能继续吸收新K线，暂不落盘
        for idx in range(self._logged_merged, len(state.merged_bars) - 1):
            self.log_merged_bar(state.merged_bars[idx], idx)
        self._logged_merged = max(self._logged_merged, len(state.merged_bars) - 1)

        for idx in range(self._logged_strokes, len(state.strokes)):
            self.log_stroke(state.strokes[idx], idx)
        self._logged_strokes = max(self._logged_strokes, len(state.strokes))

        for idx in range(self._logged_pivots, len(state.pivots)):
            self.log_pivot(state.pivots[idx], idx)
        self._logged_pivots = max(self._logged_pivots, len(state.pivots))

        for point in state.bs_points[self._logged_points:]:
            self.log_bs_point(point)
        self._logged_points = len(state.bs_points)

    # =========================================================================
    # 交易记录
    # =========================================================================

    def log_trade(
        self,
        instruction: TradeInstruction,
        position: Position,
        dt: Any = None,
    ) -> None:
        """
        记录交易指令.

        Args:
            instruction: 下单指令
            position: 指令执行后的持仓
            dt: K线时间
        """
        if not self.enabled:
            return

        action = _ACTION_NAMES.get(instruction.order_type, instruction.order_type.name)
        self._append_csv(self.trade_file, [
            _fmt_dt(dt),
            instruction.order_type.name,
            f"{instruction.price:.2f}",
            instruction.volume,
            position.status.name,
        ])

        if instruction.order_type in (OrderType.BUY, OrderType.SELL):
            self.stats["total_trades"] += 1

        self.logger.warning(
            f"[交易] {action} @ {instruction.price:.2f} x {instruction.volume} | "
            f"持仓={position.status.name}"
        )

    # =========================================================================
    # 配置和摘要
    # =========================================================================

    def save_config(self, config: Dict) -> None:
        """保存策略配置."""
        if not self.enabled:
            return

        safe_config = {}
        for k, v in config.items():
            try:
                json.dumps(v)
                safe_config[k] = v
            except (TypeError, ValueError):
                safe_config[k] = str(v)

        config_file = self.debug_dir / "config.json"
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(safe_config, f, indent=2, ensure_ascii=False)

        self.logger.info(f"配置已保存: {config_file}")

    def save_summary(self) -> None:
        """保存运行摘要."""
        if not self.enabled:
            return

        self.stats["end_time"] = datetime.now().strftime("%Y%m%d_%H%M%S")

        summary_file = self.debug_dir / "summary.json"
        with open(summary_file, "w", encoding="utf-8") as f:
            json.dump(self.stats, f, indent=2, ensure_ascii=False)

        self.logger.info(
            f"运行摘要: K线={self.stats['total_bars']} 笔={self.stats['total_strokes']} "
            f"中枢={self.stats['total_pivots']} 买卖点={self.stats['total_bs_points']} "
            f"交易={self.stats['total_trades']}"
        )
        self.logger.info(f"摘要已保存: {summary_file}")

    def close(self) -> None:
        """关闭debugger,保存摘要."""
        self.save_summary()
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)
