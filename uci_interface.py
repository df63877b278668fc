#!/usr/bin/env python3
"""
UCI-compatible interface for the time-managed search engine.
"""

import argparse
import sys
from datetime import datetime

import chess

from chess_timeman.engine import TimedSearchEngine
from chess_timeman.limits import SearchLimits
from chess_timeman.logging_manager import TimeLoggingManager, set_logger
from chess_timeman.options import OptionsMap
from chess_timeman.session import GameSession

# go arguments that take an integer value
GO_INT_TOKENS = {"wtime", "btime", "winc", "binc", "movestogo", "depth", "nodes", "movetime"}


class UCIEngine:
    """UCI-compatible wrapper for the time-managed engine"""

    def __init__(self, config_file=None, log_file="TIMEMAN-LOG.txt", output=None):
        self.board = chess.Board()
        self.log_file = log_file
        self.output = output or sys.stdout
        self.move_number = 0

        options = OptionsMap()
        if config_file:
            options.load_config(config_file)

        # Engine output goes to the log file, stdout is reserved for the protocol
        self.logger = TimeLoggingManager(self.log, quiet=log_file is None)
        set_logger(self.logger)
        self.session = GameSession(options, logger=self.logger)
        self.engine = TimedSearchEngine(logger=self.logger)

    def send(self, line: str):
        print(line, file=self.output, flush=True)

    def log(self, message: str):
        """Log message to file with timestamp"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        log_entry = f"[{timestamp}] {message}"

        try:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(log_entry + "\n")
        except OSError as e:
            # Logging must never break the protocol
            print(f"log write failed: {e}", file=sys.stderr)

    def run(self, input_stream=None):
        """Main UCI loop"""
        input_stream = input_stream or sys.stdin
        for raw_line in input_stream:
            line = raw_line.strip()
            if not line:
                continue
            if line == "quit":
                break
            try:
                self.handle_command(line)
            except Exception as e:
                self.logger.log_error(str(e))
                self.send(f"info string Error: {e}")

    def handle_command(self, line: str):
        if line == "uci":
            self._handle_uci()
        elif line == "isready":
            self.send("readyok")
        elif line == "ucinewgame":
            self.board = chess.Board()
            self.move_number = 0
            self.session.new_game()
        elif line.startswith("position"):
            self._handle_position(line)
        elif line.startswith("go"):
            self._handle_go(line)
        elif line.startswith("setoption"):
            self._handle_setoption(line)
        else:
            self.send(f"info string Unknown command: {line}")

    def _handle_uci(self):
        self.send("id name ChessTimeman")
        self.send("id author Chess Engine Team")
        for option_line in self.session.options.uci_lines():
            self.send(option_line)
        self.send("uciok")

    def _handle_setoption(self, line: str):
        """Handle setoption name <name with spaces> value <value>"""
        parts = line.split()
        if len(parts) < 3 or parts[1] != "name":
            raise ValueError(f"Malformed setoption: {line}")

        if "value" in parts:
            value_index = parts.index("value")
            name = " ".join(parts[2:value_index])
            value = " ".join(parts[value_index + 1:])
        else:
            name = " ".join(parts[2:])
            value = ""

        self.session.options.set_option(name, value)
        self.logger.log_info(f"Option {name} set to {self.session.options[name]}")

    def _handle_position(self, line: str):
        """Handle position command"""
        parts = line.split()
        if len(parts) < 2:
            raise ValueError(f"Malformed position: {line}")

        if "moves" in parts:
            moves_index = parts.index("moves")
            move_tokens = parts[moves_index + 1:]
        else:
            moves_index = len(parts)
            move_tokens = []

        if parts[1] == "startpos":
            board = chess.Board()
        elif parts[1] == "fen":
            board = chess.Board(" ".join(parts[2:moves_index]))
        else:
            raise ValueError(f"Malformed position: {line}")

        for move_str in move_tokens:
            board.push_uci(move_str)
        self.board = board

    def parse_limits(self, line: str) -> SearchLimits:
        """Build search limits from a go command"""
        limits = SearchLimits()
        parts = line.split()[1:]

        i = 0
        while i < len(parts):
            token = parts[i]
            if token in GO_INT_TOKENS:
                if i + 1 >= len(parts):
                    raise ValueError(f"Missing value for {token}")
                value = int(parts[i + 1])
                if token == "wtime":
                    limits.time[chess.WHITE] = value
                elif token == "btime":
                    limits.time[chess.BLACK] = value
                elif token == "winc":
                    limits.inc[chess.WHITE] = value
                elif token == "binc":
                    limits.inc[chess.BLACK] = value
                else:
                    setattr(limits, token, value)
                i += 2
            elif token == "infinite":
                limits.infinite = True
                i += 1
            elif token == "ponder":
                limits.ponder = True
                i += 1
            else:
                raise ValueError(f"Unknown go argument: {token}")
        return limits

    def _handle_go(self, line: str):
        """Handle go command and find best move"""
        limits = self.parse_limits(line)
        us = self.board.turn

        self.move_number += 1
        self.logger.log(f"=== MOVE {self.move_number} ===")
        self.logger.log(f"Board FEN: {self.board.fen()}")

        best_move = self.engine.get_move(self.board, self.session, limits)

        if limits.time[us]:
            self.send(f"info string optimum {self.session.optimum()} maximum {self.session.maximum()}")
        self.send(f"info depth {self.engine.completed_depth} nodes {self.engine.nodes_searched}")

        if best_move is None:
            self.logger.log_error("No legal move, sending null move")
            self.send("bestmove 0000")
            return

        self.logger.log_move_sent(self.board.san(best_move), not self.engine.search_interrupted)
        self.send(f"bestmove {best_move.uci()}")


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="UCI engine with clock-based time management")
    parser.add_argument('--config', type=str, default=None,
                        help='JSON or YAML file with UCI option values')
    parser.add_argument('--log-file', type=str, default="TIMEMAN-LOG.txt",
                        help='File receiving engine log output')
    args = parser.parse_args()

    engine = UCIEngine(config_file=args.config, log_file=args.log_file)
    engine.run()


if __name__ == "__main__":
    main()
