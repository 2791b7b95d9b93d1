"""ChanLun CTA 策略模块."""

from chanlun.strategies.cta_chan_lun import CtaChanLunStrategy

__all__ = [
    "CtaChanLunStrategy",
]
