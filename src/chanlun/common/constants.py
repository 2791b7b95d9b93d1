"""
项目级常量定义.

集中管理缠论流水线的默认参数和周期映射，避免分散在各模块中重复定义。
"""

from __future__ import annotations

from vnpy.trader.constant import Exchange, Interval

# 最少 K 线数（至少需要形成 2 个分型才开始处理）
DEFAULT_MIN_BAR_COUNT: int = 11

# 笔的最少独立 K 线数（包含处理后，含两端分型）
DEFAULT_STROKE_MIN_BARS: int = 5

# 形成中枢的最少笔数
DEFAULT_PIVOT_MIN_STROKES: int = 3

# MACD 参数（笔面积统计用）
MACD_FAST: int = 12
MACD_SLOW: int = 26
MACD_SIGNAL: int = 9

# 手数控制
DEFAULT_LOTS: float = 1.0
DEFAULT_MONEY: float = 10000.0

# 周期映射 (字符串 -> Interval 枚举)
INTERVAL_MAP: dict[str, Interval] = {
    # 全称
    "MINUTE": Interval.MINUTE,
    "HOUR": Interval.HOUR,
    "DAILY": Interval.DAILY,
    "WEEKLY": Interval.WEEKLY,
    # 缩写
    "1m": Interval.MINUTE,
    "1h": Interval.HOUR,
    "1d": Interval.DAILY,
    "1w": Interval.WEEKLY,
}

# 离线回放 CSV 必需列
REQUIRED_BAR_COLUMNS: tuple[str, ...] = ("datetime", "open", "high", "low", "close")

# 交易所映射 (字符串 -> Exchange 枚举)
EXCHANGE_MAP: dict[str, Exchange] = {
    "DCE": Exchange.DCE,      # 大连商品交易所
    "SHFE": Exchange.SHFE,    # 上海期货交易所
    "CZCE": Exchange.CZCE,    # 郑州商品交易所
    "CFFEX": Exchange.CFFEX,  # 中国金融期货交易所
    "INE": Exchange.INE,      # 上海国际能源交易中心
    "SSE": Exchange.SSE,      # 上海证券交易所
    "SZSE": Exchange.SZSE,    # 深圳证券交易所
    "BSE": Exchange.BSE,      # 北京证券交易所
    "LOCAL": Exchange.LOCAL,  # 本地数据（离线回放）
}
