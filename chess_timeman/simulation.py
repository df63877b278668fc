"""
Clock simulation: play out a whole game against the time manager.

Each move spends exactly the optimum time plus the move overhead, then the
increment is added. Useful to check that a time control never flags.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import chess

from .limits import SearchLimits
from .logging_manager import TimeLoggingManager
from .options import OptionsMap
from .session import GameSession


@dataclass
class MoveRecord:
    ply: int
    clock_before: int
    optimum: int
    maximum: int


@dataclass
class SimulationResult:
    moves: List[MoveRecord] = field(default_factory=list)
    flagged: bool = False
    final_clock: int = 0
    original_time_adjust: float = -1.0


def simulate_game(initial_ms: int, increment_ms: int, moves: int, movestogo: int = 0,
                  overhead_ms: int = 10, start_ply: int = 0,
                  options: Optional[OptionsMap] = None) -> SimulationResult:
    """
    Simulate ``moves`` of our own moves under the given time control.

    With ``movestogo`` set, the clock gets ``initial_ms`` added again every
    time a period of ``movestogo`` moves is completed (classical controls
    like 40 moves in 90 minutes).
    """
    if options is None:
        options = OptionsMap()
        options.set_option("Move Overhead", overhead_ms)

    session = GameSession(options, logger=TimeLoggingManager(quiet=True))
    session.new_game()
    result = SimulationResult()

    clock = initial_ms
    us = chess.WHITE if start_ply % 2 == 0 else chess.BLACK
    for move_number in range(moves):
        ply = start_ply + 2 * move_number
        mtg = movestogo - move_number % movestogo if movestogo else 0
        limits = SearchLimits.for_side(us, clock, increment_ms, mtg)
        session.start_search(limits, ply, us)

        result.moves.append(MoveRecord(ply, clock, session.optimum(), session.maximum()))

        clock -= session.optimum() + overhead_ms
        if clock <= 0:
            result.flagged = True
            break
        clock += increment_ms
        if movestogo and mtg == 1:
            clock += initial_ms

    result.final_clock = clock
    result.original_time_adjust = session.original_time_adjust
    return result
