"""
Chess Time Manager

Allocates search time for a chess engine playing under a clock: sudden death,
increment, moves-to-go and nodes-as-time controls.
"""

__version__ = "1.0.0"
__author__ = "Chess Engine Team"

from .limits import SearchLimits
from .options import OptionError, OptionsMap
from .session import GameSession
from .time_manager import DEFAULT_TIME_CONSTANTS, TimeConstants, TimeManagement
