"""Logging entry points for shkit commands and scripts.

Module-level log(), log_command() and add_output_file() delegate to the
process-wide Logger, so callers never thread a logger through by hand.
This module hides itself from stack traces: a FATAL logged through
output.log() traces from the caller, not from here.

Also re-exports the log_lib public API for convenience imports.
"""

# Re-export log_lib public API: one-stop import for commands
from shkit.lib.log_lib import (                      # noqa: F401
    ALL, FatalError, LogConfigError, Logger, LogSettings,
    init_logger, get_logger, reset_logger, strip_ansi, trace,
)
from shkit.lib.log_lib.stack import hide_module

hide_module(__name__)


def log(level, *args):
    """Log a record at `level` through the process-wide logger."""
    return get_logger().log(level, *args)


def log_command(command, *args):
    """Log `command` at RUN level and run it unless dry run is on."""
    return get_logger().log_command(command, *args)


def add_output_file(path, levels=ALL):
    """Send records at `levels` (comma-separated or ALL) to `path` too."""
    return get_logger().add_output_file(path, levels)
