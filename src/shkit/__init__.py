"""shkit — shell toolkit CLI.

Leveled, multi-destination logging for shell scripts and Python tools:
console plus log files, stack traces on fatal errors, and logged
command execution.
"""

from shkit._version import __version__, __app_name__

__all__ = ["__version__", "__app_name__"]
