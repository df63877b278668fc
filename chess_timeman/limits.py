"""
Search limits: the clock snapshot handed to the time manager on every search.
"""

import time
from dataclasses import dataclass, field
from typing import Dict

import chess


def now() -> int:
    """Monotonic timestamp in milliseconds."""
    return time.monotonic_ns() // 1_000_000


def _per_color() -> Dict[chess.Color, int]:
    return {chess.WHITE: 0, chess.BLACK: 0}


@dataclass
class SearchLimits:
    """
    Limits for one search, as sent by the GUI with the UCI ``go`` command.

    ``time`` and ``inc`` are keyed by colour and given in milliseconds.
    ``movestogo`` is 0 for sudden death. ``npmsec`` is filled in by the
    time manager when nodes are used as time.
    """
    time: Dict[chess.Color, int] = field(default_factory=_per_color)
    inc: Dict[chess.Color, int] = field(default_factory=_per_color)
    movestogo: int = 0
    npmsec: int = 0
    start_time: int = field(default_factory=now)
    depth: int = 0
    nodes: int = 0
    movetime: int = 0
    infinite: bool = False
    ponder: bool = False

    def use_time_management(self) -> bool:
        return bool(self.time[chess.WHITE] or self.time[chess.BLACK])

    @classmethod
    def for_side(cls, us: chess.Color, time_ms: int, inc_ms: int = 0, movestogo: int = 0, start_time=None):
        """Build limits where only ``us`` has clock data."""
        limits = cls(movestogo=movestogo)
        limits.time[us] = time_ms
        limits.inc[us] = inc_ms
        if start_time is not None:
            limits.start_time = start_time
        return limits
