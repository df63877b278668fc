import random
from enum import Enum

import chess

from .logging_manager import get_logger

# IMPORTANT: All logging must use self.logger methods, never print() statements.
# This ensures clean UCI protocol communication.


# Search status types
class SearchStatus(Enum):
    COMPLETE = "complete"      # Search completed successfully
    PARTIAL = "partial"        # Search was cut off by a limit


MATE_VALUE = 100000

PIECE_VALUES = {
    chess.PAWN: 100,
    chess.KNIGHT: 320,
    chess.BISHOP: 330,
    chess.ROOK: 500,
    chess.QUEEN: 900,
    chess.KING: 0
}


class Engine:
    """Base class for chess engines"""
    def get_move(self, board, session, limits):
        raise NotImplementedError


class RandomEngine(Engine):
    """Simple random move generator"""
    def get_move(self, board, session, limits):
        session.start_search(limits, board)
        legal_moves = list(board.legal_moves)
        session.finish_search(len(legal_moves), board.turn)
        if legal_moves:
            return random.choice(legal_moves)
        return None


class TimedSearchEngine(Engine):
    """
    Iterative deepening alpha-beta search driven by the time manager.

    A new depth is only started while the elapsed time is below the optimum
    time; a running depth is aborted once the maximum time is exceeded.
    Evaluation is material only, from the side to move's point of view.
    """

    def __init__(self, max_depth=64, default_depth=4, check_frequency=1024, logger=None):
        self.max_depth = max_depth
        self.default_depth = default_depth  # Used when no clock, node or depth limit is given
        self.check_frequency = check_frequency
        self.logger = logger or get_logger()
        self.nodes_searched = 0
        self.completed_depth = 0
        self.search_interrupted = False
        self.best_value = None

    def get_move(self, board, session, limits):
        """
        Search ``board`` under ``limits`` and return the best move found.

        The session is armed before the search and told how many nodes were
        used afterwards.
        """
        us = board.turn
        session.start_search(limits, board)

        self.session = session
        self.limits = limits
        self.nodes_searched = 0
        self.completed_depth = 0
        self.search_interrupted = False
        self.best_value = None

        legal_moves = self._order_moves(board, list(board.legal_moves))
        if not legal_moves:
            session.finish_search(0, us)
            return None

        best_move = legal_moves[0]
        depth_limit = self._depth_limit(limits)

        for depth in range(1, depth_limit + 1):
            value, move, status = self._search_root(board, depth, legal_moves)

            if status == SearchStatus.PARTIAL:
                self.search_interrupted = True
                self.logger.log_hard_stop(depth, session.elapsed(self.nodes_searched), session.maximum())
                break

            best_move = move
            self.best_value = value
            self.completed_depth = depth
            self.logger.log_iteration_complete(depth, session.elapsed(self.nodes_searched), board.san(move), value)

            # Try the previous best move first in the next iteration
            legal_moves.remove(move)
            legal_moves.insert(0, move)

            if abs(value) >= MATE_VALUE - self.max_depth:
                break
            if session.use_time_management() and not limits.infinite:
                elapsed = session.elapsed(self.nodes_searched)
                if elapsed >= session.optimum():
                    self.logger.log_soft_stop(depth, elapsed, session.optimum())
                    break

        session.finish_search(self.nodes_searched, us)
        self.logger.log_search_completion(session.time_manager.elapsed_time(), self.nodes_searched)
        return best_move

    def _depth_limit(self, limits):
        if limits.depth:
            return min(limits.depth, self.max_depth)
        if limits.use_time_management() or limits.movetime or limits.nodes:
            return self.max_depth
        return self.default_depth

    def _out_of_time(self):
        limits = self.limits
        if limits.nodes and self.nodes_searched >= limits.nodes:
            return True
        if limits.movetime and self.session.time_manager.elapsed_time() >= limits.movetime:
            return True
        if limits.infinite:
            return False
        return self.session.should_stop(self.nodes_searched)

    def _search_root(self, board, depth, moves):
        alpha, beta = -MATE_VALUE - 1, MATE_VALUE + 1
        best_move = None
        for move in moves:
            board.push(move)
            value, status = self._negamax(board, depth - 1, -beta, -alpha, 1)
            board.pop()
            if status == SearchStatus.PARTIAL:
                return alpha, best_move, SearchStatus.PARTIAL
            value = -value
            if best_move is None or value > alpha:
                alpha = value
                best_move = move
        return alpha, best_move, SearchStatus.COMPLETE

    def _negamax(self, board, depth, alpha, beta, ply):
        self.nodes_searched += 1
        if self.nodes_searched % self.check_frequency == 0 and self._out_of_time():
            return 0, SearchStatus.PARTIAL

        if board.is_checkmate():
            return -MATE_VALUE + ply, SearchStatus.COMPLETE
        if board.is_stalemate() or board.is_insufficient_material() or board.is_fifty_moves() or board.is_repetition(3):
            return 0, SearchStatus.COMPLETE
        if depth <= 0:
            return self.evaluate(board), SearchStatus.COMPLETE

        for move in self._order_moves(board, list(board.legal_moves)):
            board.push(move)
            value, status = self._negamax(board, depth - 1, -beta, -alpha, ply + 1)
            board.pop()
            if status == SearchStatus.PARTIAL:
                return 0, status
            value = -value
            if value >= beta:
                return beta, SearchStatus.COMPLETE
            if value > alpha:
                alpha = value
        return alpha, SearchStatus.COMPLETE

    def _order_moves(self, board, moves):
        """Captures first, most valuable victim first"""
        def capture_value(move):
            if board.is_en_passant(move):
                return PIECE_VALUES[chess.PAWN]
            victim = board.piece_type_at(move.to_square)
            return PIECE_VALUES[victim] if victim else -1
        return sorted(moves, key=capture_value, reverse=True)

    def evaluate(self, board):
        score = 0
        for piece_type, value in PIECE_VALUES.items():
            score += value * len(board.pieces(piece_type, chess.WHITE))
            score -= value * len(board.pieces(piece_type, chess.BLACK))
        return score if board.turn == chess.WHITE else -score
