#!/usr/bin/env python3
"""
Unified logging manager for the time manager and its search driver.
Provides consistent logging for both the UCI front end and library use.

IMPORTANT: NEVER use print() statements in the engine code when running under UCI.
All logging must go through this logging manager to avoid polluting the UCI protocol.
The GUI expects clean UCI communication and any unexpected output will cause warnings.
"""

import logging


class TimeLoggingManager:
    """Unified logging manager for time management operations"""

    def __init__(self, log_callback=None, quiet=False, use_python_logging=False):
        """
        Initialize logging manager.

        Args:
            log_callback: Function to call for logging (default: print)
            quiet: If True, suppress all logging
            use_python_logging: If True, use Python logging instead of callback
        """
        self.log_callback = log_callback or print
        self.quiet = quiet
        self.use_python_logging = use_python_logging

        if self.use_python_logging:
            self.logger = logging.getLogger(__name__)

    def log(self, message):
        """Log a message if not quiet"""
        if not self.quiet:
            if self.use_python_logging:
                self.logger.info(message)
            elif self.log_callback:
                self.log_callback(message)

    def log_clock(self, us_name, time_ms, inc_ms, movestogo):
        """Log the clock snapshot the allocator is about to use"""
        if not self.quiet:
            mtg = f"{movestogo} moves to go" if movestogo else "sudden death"
            self.log(f"⏱️ Clock ({us_name}): {time_ms / 1000:.1f}s + {inc_ms / 1000:.1f}s, {mtg}")

    def log_untimed(self):
        """Log that no clock was given and the search is untimed"""
        if not self.quiet:
            self.log("♾️ No clock time given, search is untimed")

    def log_nodes_time(self, available_nodes, npmsec):
        """Log the node budget used as a clock in nodestime mode"""
        if not self.quiet:
            self.log(f"🔢 Nodes as time: {available_nodes} nodes available at {npmsec} nodes/ms")

    def log_original_time_adjust(self, original_time_adjust):
        """Log the once-per-game time scale adjustment"""
        if not self.quiet:
            self.log(f"📐 Original time adjust: {original_time_adjust:.4f}")

    def log_time_bounds(self, optimum, maximum, ponder=False):
        """Log the optimum/maximum time bounds"""
        if not self.quiet:
            suffix = " (ponder)" if ponder else ""
            self.log(f"⏰ Time bounds: optimum {optimum}, maximum {maximum}{suffix}")

    def log_nodes_advanced(self, nodes, available_nodes):
        """Log node budget consumption"""
        if not self.quiet:
            self.log(f"🔢 Nodes used: {nodes}, remaining budget: {available_nodes}")

    def log_iteration_complete(self, depth, elapsed, best_move, best_value):
        """Log the completion of an iteration"""
        if not self.quiet:
            self.log(f"✅ Depth {depth} completed at {elapsed}: {best_move} ({best_value})")

    def log_soft_stop(self, depth, elapsed, optimum):
        """Log when the optimum time stops the iterative deepening"""
        if not self.quiet:
            self.log(f"⏰ Optimum reached after depth {depth} ({elapsed}/{optimum})")

    def log_hard_stop(self, depth, elapsed, maximum):
        """Log when the maximum time aborts an iteration"""
        if not self.quiet:
            self.log(f"🛑 Maximum exceeded during depth {depth} ({elapsed}/{maximum})")

    def log_search_completion(self, elapsed_ms, nodes_searched):
        """Log search completion statistics"""
        if not self.quiet:
            nodes_per_second = nodes_searched * 1000 / elapsed_ms if elapsed_ms > 0 else 0
            self.log(f"⏱️ Search completed in {elapsed_ms}ms")
            self.log(f"🚀 Speed: {nodes_per_second:.0f} nodes/s")

    def log_move_sent(self, move_san, search_completed):
        """Log the move that was sent"""
        if not self.quiet:
            status = "completed" if search_completed else "timeout"
            self.log(f"🎯 Move sent: {move_san} ({status})")

    def log_error(self, error_message):
        """Log an error message"""
        if not self.quiet:
            self.log(f"❌ Error: {error_message}")

    def log_info(self, info_message):
        """Log an info message"""
        if not self.quiet:
            self.log(f"ℹ️  {info_message}")


# Global logging manager instance
_global_logger = None

def get_logger(log_callback=None, quiet=False, use_python_logging=False):
    """Get the global logging manager instance"""
    global _global_logger
    if _global_logger is None:
        _global_logger = TimeLoggingManager(log_callback, quiet, use_python_logging)
    return _global_logger

def set_logger(logger):
    """Set the global logging manager instance"""
    global _global_logger
    _global_logger = logger
