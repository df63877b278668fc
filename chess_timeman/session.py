"""
Per-game session: owns the time manager, the options and the game-wide
original time adjustment.
"""

from typing import Optional, Union

import chess

from .limits import SearchLimits
from .logging_manager import get_logger
from .options import OptionsMap
from .time_manager import DEFAULT_TIME_CONSTANTS, TimeConstants, TimeManagement


class GameSession:
    """
    State shared by every search of one game.

    ``original_time_adjust`` is derived by the first sudden-death search of a
    game and reused until ``new_game()``.
    """

    def __init__(self, options: Optional[OptionsMap] = None, constants: TimeConstants = DEFAULT_TIME_CONSTANTS, logger=None):
        self.options = options or OptionsMap()
        self.logger = logger or get_logger()
        self.time_manager = TimeManagement(constants, logger=self.logger)
        self.original_time_adjust = -1.0
        self.limits: Optional[SearchLimits] = None

    def new_game(self):
        self.time_manager.clear()
        self.original_time_adjust = -1.0

    def start_search(self, limits: SearchLimits, position: Union[chess.Board, int], us: Optional[chess.Color] = None):
        """
        Arm the time manager for a search.

        ``position`` is either the root board (side to move and ply are taken
        from it) or a ply count, in which case ``us`` must be given.
        """
        if isinstance(position, chess.Board):
            ply = position.ply()
            if us is None:
                us = position.turn
        else:
            ply = position
            if us is None:
                raise ValueError("side to move is required when a ply count is given")

        self.limits = limits
        self.original_time_adjust = self.time_manager.init(
            limits, us, ply, self.options, self.original_time_adjust)

    def finish_search(self, nodes_searched: int, us: chess.Color):
        """Charge the searched nodes to the node budget in nodestime mode."""
        if self.limits is not None and self.limits.npmsec and self.time_manager.use_nodes_time:
            # The increment was already converted to nodes by init()
            self.time_manager.advance_nodes_time(nodes_searched - self.limits.inc[us])

    def optimum(self) -> int:
        return self.time_manager.optimum()

    def maximum(self) -> int:
        return self.time_manager.maximum()

    def elapsed(self, nodes) -> int:
        return self.time_manager.elapsed(nodes)

    def use_time_management(self) -> bool:
        return self.limits is not None and self.limits.use_time_management()

    def should_stop(self, nodes) -> bool:
        """
        Hard cutoff: the maximum time has been exceeded.

        When only the opponent has clock time, init() keeps the previous
        bounds, so the check runs against the last maximum (0 before any
        timed search).
        """
        return self.use_time_management() and self.elapsed(nodes) > self.maximum()
