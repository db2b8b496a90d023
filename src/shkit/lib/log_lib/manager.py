"""
Logger — the dispatcher at the centre of log_lib.

One Logger owns a LevelRegistry, a Formatter, a DestinationTable and a
StackTracer. ``log(level, *args)`` runs the same steps on every call:

    1. normalize the level name, registering it if unseen
    2. drop the record if the level is below the minimum filter
    3. join the arguments into the message (leading numeric status for
       ERROR/FATAL/QUIT when more arguments follow)
    4. render, appending a stack trace for traced levels
    5. write to the console stream for the level's class and to every
       matching output file (styled or plain per destination)
    6. apply the level's action: return 0, return the status, or hand
       the record to the fatal handler

The fatal handler defaults to raising FatalError (a SystemExit), which
unwinds to the CLI's top-level handler or ends the interpreter.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional, TextIO

from .destinations import ALL, Destination, DestinationTable, OutputSpec
from .errors import FatalError, LogConfigError, LogWriteError
from .formatter import Formatter, Record
from .levels import (
    ABORT, DEFAULT_MIN_LEVEL, DEFAULT_STATUS, MAX_STATUS, NONE, Level,
    LevelRegistry,
)
from .runner import run_command
from .stack import StackTracer


@dataclass
class LogSettings:
    """Resolved configuration for a Logger."""
    log_level: str = DEFAULT_MIN_LEVEL
    timestamp: Optional[str] = None
    force_color: bool = False
    dry_run: bool = False
    log_files: List[OutputSpec] = field(default_factory=list)


def raise_fatal(status: int, record: Record) -> None:
    """Default fatal handler: unwind with FatalError."""
    raise FatalError(status, record.text(styled=False))


def _is_status(value) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    # isdigit() alone accepts superscripts and other digits int() rejects
    return isinstance(value, str) and value.isascii() and value.isdigit()


class Logger:
    """Leveled, multi-destination logger.

    Usage::

        log = Logger(min_level='DEBUG')
        log.add_output_file('build.log')
        log.log('INFO', 'Building', target)
        status = log.log('ERROR', 'compile failed')   # -> 1
        log.log('FATAL', 3, 'giving up')              # raises FatalError(3)
    """

    def __init__(
        self,
        min_level: str = DEFAULT_MIN_LEVEL,
        timestamp_format: Optional[str] = None,
        force_color: bool = False,
        dry_run: bool = False,
        stdout: TextIO = None,
        stderr: TextIO = None,
        tracer: Optional[StackTracer] = None,
        on_fatal: Optional[Callable[[int, Record], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.levels = LevelRegistry(min_level)
        self.formatter = Formatter(self.levels)
        self.destinations = DestinationTable(self.levels, stdout=stdout, stderr=stderr)
        self.tracer = tracer if tracer is not None else StackTracer()
        self.on_fatal = on_fatal if on_fatal is not None else raise_fatal
        self.clock = clock if clock is not None else datetime.now
        self.timestamp_format = timestamp_format
        self.force_color = force_color
        self.dry_run = dry_run

    @classmethod
    def from_settings(cls, settings: LogSettings, **kwargs) -> 'Logger':
        """Build a logger from resolved settings, opening its output files."""
        logger = cls(
            min_level=settings.log_level,
            timestamp_format=settings.timestamp,
            force_color=settings.force_color,
            dry_run=settings.dry_run,
            **kwargs,
        )
        for spec in settings.log_files:
            logger.add_output_file(spec.path, spec.levels)
        return logger

    @property
    def min_level(self) -> str:
        return self.levels.min_level

    @min_level.setter
    def min_level(self, name: str) -> None:
        self.levels.min_level = name

    # -- configuration -------------------------------------------------------

    def add_output_file(self, path, levels=ALL,
                        force_format: Optional[bool] = None) -> Optional[Destination]:
        """Register an output file for a comma-separated level list or ALL.

        An unopenable path is reported as a FATAL record. Returns None only
        when a substituted fatal handler lets execution continue.
        """
        if force_format is None:
            force_format = self.force_color
        try:
            return self.destinations.add_output_file(path, levels, force_format)
        except LogConfigError as e:
            self.log('FATAL', str(e))
            return None

    def register_level(self, name: str, label: Optional[str] = None,
                       rank_hint: Optional[int] = None) -> Level:
        level = self.levels.register(name, rank_hint=rank_hint)
        if label is not None and label != level.label:
            self.levels.relabel(level.name, label)
        return level

    # -- dispatch ------------------------------------------------------------

    def is_enabled(self, level: str) -> bool:
        return self.levels.is_enabled(level)

    def log(self, level: str, *args) -> int:
        """Log a record; return its status.

        Returns:
            0 for filtered, informational and warning records; the status
            (default 1) for ERROR and QUIT. FATAL does not return unless the
            fatal handler was substituted.
        """
        try:
            lvl = self.levels.register(level)
        except LogConfigError as e:
            self.log('FATAL', str(e))
            return DEFAULT_STATUS
        if not self.levels.is_enabled(lvl.name):
            return 0

        status = DEFAULT_STATUS
        if lvl.action != NONE and len(args) > 1 and _is_status(args[0]):
            # exit statuses are one byte
            status = max(0, min(int(args[0]), MAX_STATUS))
            args = args[1:]
        message = ' '.join(str(a) for a in args)

        timestamp = None
        if self.timestamp_format:
            timestamp = self.clock().strftime(self.timestamp_format)

        trace = None
        if lvl.traced:
            trace = self.tracer.render(self.tracer.capture()) or None

        record = Record(self.formatter, lvl.name, message, timestamp, trace)
        self._write(record)
        return self._finish(lvl, status, record)

    def _write(self, record: Record) -> None:
        for dest in self.destinations.resolve(record.level):
            text = record.text(styled=dest.wants_style(self.force_color))
            try:
                dest.write(text)
            except (OSError, ValueError) as e:
                raise LogWriteError(
                    DEFAULT_STATUS, f"cannot write to {dest.name}: {e}") from e

    def _finish(self, lvl: Level, status: int, record: Record) -> int:
        if lvl.action == NONE:
            return 0
        if lvl.action == ABORT:
            self.on_fatal(status, record)
        return status

    # -- shorthands ----------------------------------------------------------

    def debug(self, *args) -> int:
        return self.log('DEBUG', *args)

    def info(self, *args) -> int:
        return self.log('INFO', *args)

    def warn(self, *args) -> int:
        return self.log('WARN', *args)

    def error(self, *args) -> int:
        return self.log('ERROR', *args)

    def fatal(self, *args) -> int:
        return self.log('FATAL', *args)

    def quit(self, *args) -> int:
        return self.log('QUIT', *args)

    def log_command(self, command, *args, dry_run: Optional[bool] = None) -> int:
        """Log a command at RUN level, then run it (unless dry run)."""
        return run_command(self, command, *args, dry_run=dry_run)

    def close(self) -> None:
        """Close output files. Console streams are left alone."""
        self.destinations.close()


# =============================================================================
# Module-level instance
# =============================================================================

_logger: Optional[Logger] = None


def init_logger(settings: Optional[LogSettings] = None, **kwargs) -> Logger:
    """Initialize the module-level Logger.

    Call once at program startup after resolving configuration. A previous
    instance has its output files closed.

    Args:
        settings: Resolved LogSettings (defaults when None)
        **kwargs: Passed to Logger (streams, tracer, on_fatal, clock)

    Returns:
        The initialized Logger instance
    """
    global _logger
    if _logger is not None:
        _logger.close()
    _logger = None
    _logger = Logger.from_settings(settings or LogSettings(), **kwargs)
    return _logger


def get_logger() -> Logger:
    """Get the module-level Logger, creating a default if needed."""
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger


def reset_logger() -> None:
    """Close and forget the module-level Logger."""
    global _logger
    if _logger is not None:
        _logger.close()
    _logger = None
