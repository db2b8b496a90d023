"""
Command runner — log a command line at RUN level, then execute it.

The child inherits the parent's stdout/stderr, so its output reaches the
console unmodified and in order. Failure handling is left to the caller:
a nonzero exit is returned, never logged or traced here.
"""

import shlex
import subprocess
import sys
from typing import List, Optional

from .errors import LogConfigError


def build_argv(command, args) -> List[str]:
    """Turn (command, args) into an argv list.

    A single command string with no further arguments is split with
    shell quoting rules, so ``run_command(log, "ls -l /tmp")`` works.

    Raises:
        LogConfigError: If the command string has unbalanced quotes.
    """
    if isinstance(command, (list, tuple)):
        argv = [str(c) for c in command]
    elif not args:
        try:
            argv = shlex.split(str(command))
        except ValueError as e:
            raise LogConfigError(f"cannot parse command {command!r}: {e}") from e
    else:
        argv = [str(command)]
    argv.extend(str(a) for a in args)
    return argv


def run_command(logger, command, *args, dry_run: Optional[bool] = None) -> int:
    """Log and run a command.

    Args:
        logger: The Logger that records the RUN line
        command: Program name, full command string, or argv list
        *args: Further arguments
        dry_run: Override the logger's dry-run flag

    Returns:
        The command's exit status; 0 in dry-run mode; 127 if the program
        was not found and 126 if it could not be executed. A command
        string that cannot be split is reported as a FATAL record.
    """
    try:
        argv = build_argv(command, args)
    except LogConfigError as e:
        return logger.log('FATAL', str(e))
    logger.log('RUN', shlex.join(argv))

    if dry_run is None:
        dry_run = logger.dry_run
    if dry_run or not argv:
        return 0

    # Keep our own buffered output ahead of the child's
    sys.stdout.flush()
    sys.stderr.flush()
    try:
        result = subprocess.run(argv)
    except FileNotFoundError:
        return 127
    except PermissionError:
        return 126
    return result.returncode
