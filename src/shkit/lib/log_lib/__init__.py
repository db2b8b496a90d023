"""
log_lib — leveled, multi-destination logging with stack traces.

A reusable logging library providing:
- Ordered, extensible severity levels (built-in and ad hoc)
- Console routing by severity class plus per-level output files
- Label-padded lines with ANSI styling, stripped for non-tty destinations
- Stack traces on FATAL/QUIT records
- A run-and-log helper for subprocesses
- Function tracing decorator

Public API:
    Logger           — the dispatcher
    LogSettings      — resolved configuration for a Logger
    init_logger      — module-level instance initialization
    get_logger       — access the module-level instance
    LevelRegistry    — level catalog and minimum-level filter
    Formatter        — record rendering
    strip_ansi       — remove ANSI color/style sequences
    DestinationTable — level → destination routing
    parse_output_spec — parse PATH[:LEVELS]
    StackTracer      — call-chain capture
    run_command      — log and run a subprocess
    FatalError       — raised when a FATAL record is emitted
    trace            — function tracing decorator
"""

from .errors import FatalError, LogConfigError, LogError, LogWriteError
from .levels import (
    Level, LevelRegistry, format_level_list,
    INFORMATIONAL, WARNING, FATAL_CLASS, DEFAULT_MIN_LEVEL,
)
from .formatter import Formatter, Record, strip_ansi
from .destinations import (
    ALL, Destination, DestinationTable, OutputSpec,
    parse_level_list, parse_output_spec,
)
from .stack import FixedTracer, StackFrame, StackTracer, hide_module
from .runner import run_command
from .manager import (
    Logger, LogSettings, init_logger, get_logger, reset_logger,
)
from .trace import trace

__all__ = [
    'FatalError', 'LogConfigError', 'LogError', 'LogWriteError',
    'Level', 'LevelRegistry', 'format_level_list',
    'INFORMATIONAL', 'WARNING', 'FATAL_CLASS', 'DEFAULT_MIN_LEVEL',
    'Formatter', 'Record', 'strip_ansi',
    'ALL', 'Destination', 'DestinationTable', 'OutputSpec',
    'parse_level_list', 'parse_output_spec',
    'FixedTracer', 'StackFrame', 'StackTracer', 'hide_module',
    'run_command',
    'Logger', 'LogSettings', 'init_logger', 'get_logger', 'reset_logger',
    'trace',
]
