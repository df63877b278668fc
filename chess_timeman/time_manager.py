"""
Time management for the search.

Every time a search is armed, ``TimeManagement.init`` turns the clock snapshot
into two bounds:

- optimum: the time the search should aim to use before stopping on its own
- maximum: the time after which the search must be cut off

Times are integer milliseconds, or nodes when the ``nodestime`` option makes
the node counter stand in for the clock.
"""

import math
from dataclasses import dataclass
from typing import Callable, Union

import chess

from .limits import SearchLimits, now
from .logging_manager import get_logger


@dataclass(frozen=True)
class TimeConstants:
    """Tuned coefficients of the allocation formulas."""
    # Horizon, in hundredths of a move
    sudden_death_centi_mtg: int = 5051
    max_centi_mtg: int = 5000
    short_clock_centi_mtg: float = 5.051

    # Once-per-game scale from the initial time left
    adjust_log_factor: float = 0.3128
    adjust_offset: float = 0.4354

    # Sudden death
    opt_base: float = 0.0032116
    opt_log_factor: float = 0.000321123
    opt_max: float = 0.00508017
    max_base: float = 3.3977
    max_log_factor: float = 3.03950
    max_min: float = 2.94761
    opt_offset: float = 0.0121431
    ply_offset: float = 2.94693
    ply_exponent: float = 0.461073
    opt_time_left_cap: float = 0.213035
    max_scale_cap: float = 6.67704
    max_ply_divisor: float = 11.9847

    # Moves to go
    mtg_opt_base: float = 0.88
    mtg_ply_divisor: float = 116.4
    mtg_time_left_cap: float = 0.88
    mtg_max_base: float = 1.3
    mtg_max_per_move: float = 0.11

    # Hard caps, as fractions of the remaining clock
    optimum_cap: float = 0.20
    maximum_cap: float = 0.30
    maximum_overhead_cap: float = 0.825179

    ponder_divisor: int = 4


DEFAULT_TIME_CONSTANTS = TimeConstants()


def _div(a: int, b: int) -> int:
    """Integer division truncating toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def centi_moves_to_go(movestogo: int, scaled_time: int, constants: TimeConstants = DEFAULT_TIME_CONSTANTS) -> int:
    """
    Moves left in the time control, in hundredths of a move.

    Sudden death assumes a long horizon; under one second (scaled) the horizon
    shrinks with the clock.
    """
    if movestogo:
        centi_mtg = min(movestogo * 100, constants.max_centi_mtg)
    else:
        centi_mtg = constants.sudden_death_centi_mtg
    if scaled_time < 1000:
        centi_mtg = min(centi_mtg, int(scaled_time * constants.short_clock_centi_mtg))
    return centi_mtg


def effective_time_left(my_time: int, my_inc: int, centi_mtg: int, move_overhead: int) -> int:
    """Clock time plus expected increments minus the overhead of the remaining moves, at least 1."""
    return max(1, my_time + _div(my_inc * (centi_mtg - 100) - move_overhead * (200 + centi_mtg), 100))


class TimeManagement:
    """
    Computes the optimum and maximum search time for the side to move.

    One instance lives for a whole game. ``clear()`` must be called when a new
    game starts so that nodes-as-time mode reseeds its node budget.
    """

    def __init__(self, constants: TimeConstants = DEFAULT_TIME_CONSTANTS, logger=None):
        self.constants = constants
        self.logger = logger or get_logger()
        self.start_time = 0
        self.optimum_time = 0
        self.maximum_time = 0
        self.available_nodes = -1
        self.use_nodes_time = False

    def optimum(self) -> int:
        return self.optimum_time

    def maximum(self) -> int:
        return self.maximum_time

    def clear(self):
        """Forget the node budget; the next nodes-as-time init reseeds it."""
        self.available_nodes = -1

    def advance_nodes_time(self, nodes: int):
        """Consume ``nodes`` from the node budget (nodes-as-time mode only)."""
        assert self.use_nodes_time, "advance_nodes_time requires nodestime mode"
        self.available_nodes = max(0, self.available_nodes - nodes)
        self.logger.log_nodes_advanced(nodes, self.available_nodes)

    def elapsed_time(self) -> int:
        """Wall-clock milliseconds since the search was armed."""
        return now() - self.start_time

    def elapsed(self, nodes: Union[int, Callable[[], int]]) -> int:
        """Elapsed search 'time': nodes searched in nodestime mode, else milliseconds."""
        if self.use_nodes_time:
            return nodes() if callable(nodes) else nodes
        return self.elapsed_time()

    def init(self, limits: SearchLimits, us: chess.Color, ply: int, options, original_time_adjust: float) -> float:
        """
        Recompute the optimum and maximum time for a new search.

        ``limits`` is updated in place when nodes are used as time. Returns the
        original time adjustment, derived on the first sudden-death call of a
        game (when the value passed in is negative) and unchanged afterwards.
        """
        c = self.constants
        self.start_time = limits.start_time

        # No clock: the search is untimed, keep the previous bounds
        if limits.time[us] == 0:
            self.use_nodes_time = False
            self.logger.log_untimed()
            return original_time_adjust

        npmsec = int(options["nodestime"])
        self.use_nodes_time = npmsec != 0
        if self.use_nodes_time:
            if self.available_nodes == -1:
                self.available_nodes = npmsec * limits.time[us]

            # From here on the clock is measured in nodes
            limits.time[us] = self.available_nodes
            limits.inc[us] *= npmsec
            limits.npmsec = npmsec
            self.logger.log_nodes_time(self.available_nodes, npmsec)

        scale_factor = npmsec if self.use_nodes_time else 1
        move_overhead = int(options["Move Overhead"])
        my_time = limits.time[us]
        my_inc = limits.inc[us]
        scaled_time = _div(my_time, scale_factor)

        self.logger.log_clock("White" if us == chess.WHITE else "Black", my_time, my_inc, limits.movestogo)

        centi_mtg = centi_moves_to_go(limits.movestogo, scaled_time, c)
        time_left = effective_time_left(my_time, my_inc, centi_mtg, move_overhead)

        if not limits.movestogo:
            if original_time_adjust < 0:
                original_time_adjust = c.adjust_log_factor * math.log10(time_left) - c.adjust_offset
                self.logger.log_original_time_adjust(original_time_adjust)

            # A node budget smaller than the rate scales to zero; treat it as 1ms
            log_time_in_sec = math.log10(max(scaled_time, 1) / 1000.0)
            opt_constant = min(c.opt_base + c.opt_log_factor * log_time_in_sec, c.opt_max)
            max_constant = max(c.max_base + c.max_log_factor * log_time_in_sec, c.max_min)
            time_left_factor = my_time / time_left

            opt_scale = min(c.opt_offset + math.pow(ply + c.ply_offset, c.ply_exponent) * opt_constant,
                            c.opt_time_left_cap * time_left_factor) * original_time_adjust
            max_scale = min(c.max_scale_cap, max_constant + ply / c.max_ply_divisor)
        else:
            moves_to_go = centi_mtg / 100.0
            per_move = (c.mtg_opt_base + ply / c.mtg_ply_divisor) / moves_to_go if moves_to_go else math.inf
            opt_scale = min(per_move, c.mtg_time_left_cap * my_time / time_left)
            max_scale = c.mtg_max_base + c.mtg_max_per_move * moves_to_go

        self.optimum_time = max(1, min(int(c.optimum_cap * my_time), int(opt_scale * time_left)))
        self.maximum_time = max(self.optimum_time,
                                min(int(c.maximum_cap * my_time),
                                    int(min(c.maximum_overhead_cap * my_time - move_overhead,
                                            max_scale * self.optimum_time))))

        ponder = bool(options["Ponder"])
        if ponder:
            self.optimum_time += self.optimum_time // c.ponder_divisor

        self.logger.log_time_bounds(self.optimum_time, self.maximum_time, ponder)
        return original_time_adjust
