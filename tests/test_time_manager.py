#!/usr/bin/env python3

import math
import os
import sys
import unittest

import chess

# Add the parent directory to the path to import chess_timeman
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from chess_timeman.limits import SearchLimits
from chess_timeman.logging_manager import TimeLoggingManager
from chess_timeman.options import OptionsMap
from chess_timeman.time_manager import (
    DEFAULT_TIME_CONSTANTS,
    TimeConstants,
    TimeManagement,
    centi_moves_to_go,
    effective_time_left,
)


def make_options(overhead=10, nodestime=0, ponder=False):
    options = OptionsMap()
    options.set_option("Move Overhead", overhead)
    options.set_option("nodestime", nodestime)
    options.set_option("Ponder", ponder)
    return options


class TestHorizon(unittest.TestCase):
    """Moves-to-go horizon and effective time left"""

    def test_sudden_death_horizon(self):
        self.assertEqual(centi_moves_to_go(0, 60000), 5051)

    def test_moves_to_go_is_capped(self):
        self.assertEqual(centi_moves_to_go(40, 60000), 4000)
        self.assertEqual(centi_moves_to_go(80, 60000), 5000)

    def test_short_clock_shrinks_horizon(self):
        self.assertEqual(centi_moves_to_go(0, 900), int(900 * 5.051))
        self.assertEqual(centi_moves_to_go(0, 1000), 5051)
        # A known horizon shorter than the shrunk one is kept
        self.assertEqual(centi_moves_to_go(5, 900), 500)

    def test_effective_time_left_truncates_toward_zero(self):
        # -(10 * 5251) / 100 = -525.1, which truncates to -525
        self.assertEqual(effective_time_left(60000, 0, 5051, 10), 59475)

    def test_effective_time_left_counts_increments(self):
        self.assertEqual(effective_time_left(60000, 1000, 5051, 0), 60000 + 1000 * 4951 // 100)

    def test_effective_time_left_floor(self):
        self.assertEqual(effective_time_left(100, 0, 5051, 1000), 1)

    def test_shrunk_horizon_reserves_less_overhead(self):
        shrunk = effective_time_left(900, 0, centi_moves_to_go(0, 900), 10)
        uncapped = effective_time_left(900, 0, 5051, 10)
        self.assertEqual(shrunk, 426)
        self.assertEqual(uncapped, 375)


class TestTimeManagement(unittest.TestCase):
    """Optimum/maximum allocation"""

    def setUp(self):
        self.tm = TimeManagement(logger=TimeLoggingManager(quiet=True))

    def allocate(self, time_ms, inc_ms=0, movestogo=0, ply=0, options=None, adjust=-1.0, us=chess.WHITE):
        limits = SearchLimits.for_side(us, time_ms, inc_ms, movestogo)
        adjust = self.tm.init(limits, us, ply, options or make_options(), adjust)
        return limits, adjust

    def test_sudden_death_example(self):
        """One minute sudden death at ply 10"""
        _, adjust = self.allocate(60000, ply=10)

        self.assertAlmostEqual(adjust, 0.3128 * math.log10(59475) - 0.4354, places=9)
        self.assertLessEqual(self.tm.optimum(), 12000)
        self.assertLessEqual(self.tm.maximum(), 18000)
        self.assertGreater(self.tm.optimum(), 1400)
        self.assertLess(self.tm.optimum(), 1700)
        # The ply term saturates the maximum multiplier at this clock
        self.assertEqual(self.tm.maximum(), int(6.67704 * self.tm.optimum()))

    def test_sudden_death_exact_bounds(self):
        """Fresh game, sudden death: exact optimum and maximum"""
        cases = [
            # (time, inc, ply, overhead) -> (optimum, maximum)
            ((60000, 0, 10, 10), (1539, 10275)),
            ((60000, 0, 0, 10), (1155, 7711)),
            ((1000, 0, 0, 10), (3, 10)),
            ((5000, 100, 200, 0), (421, 1500)),
            ((600000, 2000, 80, 10), (42424, 180000)),
            ((500, 0, 10, 10), (1, 3)),
        ]
        for (time_ms, inc_ms, ply, overhead), expected in cases:
            with self.subTest(time_ms=time_ms, inc_ms=inc_ms, ply=ply, overhead=overhead):
                self.allocate(time_ms, inc_ms, ply=ply, options=make_options(overhead))
                self.assertEqual((self.tm.optimum(), self.tm.maximum()), expected)

    def test_short_clock_stays_small(self):
        self.allocate(900, ply=40)
        self.assertLess(self.tm.optimum(), 200)
        self.assertLessEqual(self.tm.optimum(), self.tm.maximum())
        self.assertLessEqual(self.tm.maximum(), 270)

    def test_moves_to_go(self):
        """40 moves in five minutes at ply 20"""
        _, adjust = self.allocate(300000, movestogo=40, ply=20)

        time_left = 300000 - 420
        expected_scale = (0.88 + 20 / 116.4) / 40.0
        self.assertEqual(self.tm.optimum(), int(expected_scale * time_left))
        self.assertEqual(self.tm.maximum(), int((1.3 + 0.11 * 40.0) * self.tm.optimum()))
        # Moves-to-go does not touch the game-wide adjustment
        self.assertEqual(adjust, -1.0)

    def test_last_move_of_period_is_capped(self):
        self.allocate(10000, movestogo=1, ply=40)
        self.assertEqual(self.tm.optimum(), 2000)
        self.assertEqual(self.tm.maximum(), min(3000, int((1.3 + 0.11 * 1.0) * 2000)))

    def test_original_adjust_is_kept(self):
        """A non-negative adjustment is never recomputed"""
        adjust = 0.9
        for time_ms, ply in [(60000, 0), (30000, 20), (5000, 80), (800, 150)]:
            with self.subTest(time_ms=time_ms, ply=ply):
                _, adjust = self.allocate(time_ms, ply=ply, adjust=adjust)
                self.assertEqual(adjust, 0.9)

    def test_original_adjust_scales_optimum(self):
        self.allocate(60000, ply=30, adjust=1.0)
        base = self.tm.optimum()
        self.allocate(60000, ply=30, adjust=0.5)
        self.assertAlmostEqual(self.tm.optimum(), base / 2, delta=1)

    def test_ponder_adds_a_quarter(self):
        for time_ms, movestogo, ply in [(60000, 0, 10), (300000, 40, 20), (5000, 0, 60), (900, 0, 100)]:
            with self.subTest(time_ms=time_ms, movestogo=movestogo, ply=ply):
                self.allocate(time_ms, movestogo=movestogo, ply=ply, adjust=1.0)
                optimum, maximum = self.tm.optimum(), self.tm.maximum()

                self.allocate(time_ms, movestogo=movestogo, ply=ply, adjust=1.0,
                              options=make_options(ponder=True))
                self.assertEqual(self.tm.optimum(), optimum + optimum // 4)
                self.assertEqual(self.tm.maximum(), maximum)

    def test_zero_time_is_untimed(self):
        self.allocate(60000, ply=10)
        optimum, maximum = self.tm.optimum(), self.tm.maximum()

        limits = SearchLimits.for_side(chess.WHITE, 0, start_time=1234)
        adjust = self.tm.init(limits, chess.WHITE, 12, make_options(nodestime=100), -1.0)

        self.assertEqual(adjust, -1.0)
        self.assertFalse(self.tm.use_nodes_time)
        self.assertEqual(self.tm.start_time, 1234)
        self.assertEqual(self.tm.optimum(), optimum)
        self.assertEqual(self.tm.maximum(), maximum)

    def test_uses_side_to_move_clock(self):
        limits = SearchLimits(movestogo=0)
        limits.time[chess.WHITE] = 1000
        limits.time[chess.BLACK] = 600000
        self.tm.init(limits, chess.BLACK, 11, make_options(), 1.0)
        self.assertGreater(self.tm.optimum(), 200)

    def test_bounds_invariants(self):
        """optimum <= maximum, both >= 1, and every hard cap holds"""
        times = [50, 500, 999, 1000, 5000, 60000, 600000, 5400000]
        increments = [0, 100, 2000]
        moves_to_go = [0, 1, 5, 40, 60]
        plies = [0, 10, 80, 200]
        overheads = [0, 10, 100]

        for time_ms in times:
            for inc_ms in increments:
                for movestogo in moves_to_go:
                    for ply in plies:
                        for overhead in overheads:
                            self.allocate(time_ms, inc_ms, movestogo, ply, make_options(overhead))
                            optimum, maximum = self.tm.optimum(), self.tm.maximum()
                            case = (time_ms, inc_ms, movestogo, ply, overhead)

                            self.assertGreaterEqual(optimum, 1, case)
                            self.assertLessEqual(optimum, maximum, case)
                            self.assertLessEqual(optimum, max(1, 0.20 * time_ms), case)
                            self.assertLessEqual(maximum, max(1, 0.30 * time_ms), case)
                            self.assertLessEqual(maximum, max(optimum, 0.825179 * time_ms - overhead), case)

    def test_custom_constants(self):
        constants = TimeConstants(optimum_cap=0.05)
        tm = TimeManagement(constants, logger=TimeLoggingManager(quiet=True))
        limits = SearchLimits.for_side(chess.WHITE, 10000, movestogo=1)
        tm.init(limits, chess.WHITE, 40, make_options(), -1.0)
        self.assertEqual(tm.optimum(), 500)
        self.assertEqual(DEFAULT_TIME_CONSTANTS.optimum_cap, 0.20)


class TestNodesTime(unittest.TestCase):
    """Nodes-as-time mode"""

    def setUp(self):
        self.tm = TimeManagement(logger=TimeLoggingManager(quiet=True))
        self.options = make_options(nodestime=1000)

    def init(self, time_ms, inc_ms=0, ply=0):
        limits = SearchLimits.for_side(chess.WHITE, time_ms, inc_ms)
        self.tm.init(limits, chess.WHITE, ply, self.options, 1.0)
        return limits

    def test_seeds_node_budget(self):
        limits = self.init(60000, inc_ms=100)

        self.assertTrue(self.tm.use_nodes_time)
        self.assertEqual(self.tm.available_nodes, 60000 * 1000)
        self.assertEqual(limits.time[chess.WHITE], 60000 * 1000)
        self.assertEqual(limits.inc[chess.WHITE], 100 * 1000)
        self.assertEqual(limits.npmsec, 1000)

    def test_bounds_are_in_nodes(self):
        self.init(60000, ply=10)
        nodes_optimum = self.tm.optimum()

        wall = TimeManagement(logger=TimeLoggingManager(quiet=True))
        limits = SearchLimits.for_side(chess.WHITE, 60000)
        wall.init(limits, chess.WHITE, 10, make_options(overhead=0), 1.0)

        self.assertGreater(nodes_optimum, 100 * wall.optimum())

    def test_advance_nodes_time(self):
        self.init(60000)
        self.tm.advance_nodes_time(12345)
        self.assertEqual(self.tm.available_nodes, 60000 * 1000 - 12345)

        self.tm.advance_nodes_time(10 ** 12)
        self.assertEqual(self.tm.available_nodes, 0)

    def test_budget_is_not_reseeded(self):
        self.init(60000)
        self.tm.advance_nodes_time(1000)

        limits = self.init(50000)
        self.assertEqual(self.tm.available_nodes, 60000 * 1000 - 1000)
        self.assertEqual(limits.time[chess.WHITE], 60000 * 1000 - 1000)

    def test_clear_reseeds_from_current_clock(self):
        self.init(60000)
        self.tm.advance_nodes_time(5000)
        self.tm.clear()
        self.assertEqual(self.tm.available_nodes, -1)

        self.init(50000)
        self.assertEqual(self.tm.available_nodes, 50000 * 1000)

    def test_elapsed_counts_nodes(self):
        self.init(60000)
        self.assertEqual(self.tm.elapsed(777), 777)
        self.assertEqual(self.tm.elapsed(lambda: 888), 888)

    def test_small_node_budget_does_not_crash(self):
        options = make_options(nodestime=10000)
        limits = SearchLimits.for_side(chess.WHITE, 1)
        self.tm.init(limits, chess.WHITE, 30, options, -1.0)
        self.tm.advance_nodes_time(9999)

        limits = SearchLimits.for_side(chess.WHITE, 1)
        self.tm.init(limits, chess.WHITE, 32, options, -1.0)
        self.assertGreaterEqual(self.tm.optimum(), 1)
        self.assertLessEqual(self.tm.optimum(), self.tm.maximum())

    def test_advance_requires_nodes_time(self):
        tm = TimeManagement(logger=TimeLoggingManager(quiet=True))
        limits = SearchLimits.for_side(chess.WHITE, 60000)
        tm.init(limits, chess.WHITE, 0, make_options(), -1.0)
        with self.assertRaises(AssertionError):
            tm.advance_nodes_time(100)


class TestElapsed(unittest.TestCase):

    def test_elapsed_uses_wall_clock(self):
        tm = TimeManagement(logger=TimeLoggingManager(quiet=True))
        limits = SearchLimits.for_side(chess.WHITE, 60000)
        limits.start_time -= 250
        tm.init(limits, chess.WHITE, 0, make_options(), -1.0)

        self.assertGreaterEqual(tm.elapsed(10 ** 9), 250)
        self.assertLess(tm.elapsed(10 ** 9), 10 ** 9)


if __name__ == "__main__":
    unittest.main()
