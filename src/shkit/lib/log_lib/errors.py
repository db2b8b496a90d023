"""
Error taxonomy for log_lib.

Filtered records and warnings are not errors. Everything that must end
the process travels as a FatalError, a SystemExit subclass: it unwinds
through ordinary ``except Exception`` blocks to the top-level handler,
and if nothing catches it the interpreter exits with its status.
"""


class LogError(Exception):
    """Base class for recoverable log_lib errors."""


class LogConfigError(LogError):
    """Invalid configuration: bad level name, unopenable output file, etc."""


class FatalError(SystemExit):
    """A FATAL record was emitted; the process should exit with `status`.

    Attributes:
        status: Exit status for the process
        text: The plain rendering of the record (including its trace)
    """

    def __init__(self, status: int = 1, text: str = ''):
        super().__init__(status)
        self.status = status
        self.text = text

    def __str__(self):
        return self.text.rstrip('\n') or f"fatal error (status {self.status})"


class LogWriteError(FatalError):
    """Writing a record to a destination failed."""
