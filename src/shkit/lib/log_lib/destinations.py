"""
Destination table — where records go.

Two console destinations always exist: standard output receives
informational records, standard error receives warning- and fatal-class
records. Output files are added on demand, each scoped to a set of
levels (or all of them), opened once in append mode and kept open.

Output spec syntax (compact, for CLI flags and config files):
    PATH[:LEVELS]

    Examples:
        build.log                  # every level
        errors.log:ERROR,FATAL     # two levels
        C:\\logs\\run.log:INFO     # Windows drive letter stays in the path
"""

import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, List, Optional, TextIO

from .errors import LogConfigError
from .levels import INFORMATIONAL, LevelRegistry

ALL = 'ALL'

_LEVEL_LIST_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*(,[A-Za-z_][A-Za-z0-9_]*)*$')


@dataclass
class OutputSpec:
    """A parsed PATH[:LEVELS] output spec."""
    path: str
    levels: str = ALL


def parse_output_spec(spec: str) -> OutputSpec:
    """Parse an output spec string into an OutputSpec.

    The last colon-separated segment is taken as the level list only if
    it looks like one (comma-separated identifiers); otherwise the whole
    spec is the path.

    Args:
        spec: Output spec like "app.log" or "app.log:ERROR,FATAL"

    Returns:
        OutputSpec with path and level list
    """
    parts = spec.split(':')

    # Handle Windows drive letters: rejoin 'C' + '\\path' into 'C:\\path'
    if len(parts) > 1 and len(parts[0]) == 1 and parts[0].isalpha():
        parts = [f"{parts[0]}:{parts[1]}"] + parts[2:]

    if len(parts) > 1 and _LEVEL_LIST_RE.match(parts[-1]):
        path = ':'.join(parts[:-1])
        levels = parts[-1]
    else:
        path = ':'.join(parts)
        levels = ALL

    if not path:
        raise LogConfigError(f"output spec has no path: {spec!r}")
    return OutputSpec(path=path, levels=levels)


def parse_level_list(levels) -> Optional[List[str]]:
    """Split a comma-separated level list.

    Returns:
        List of raw level names, or None for the ALL sentinel.
    """
    if levels is None:
        return None
    if isinstance(levels, str):
        names = [name.strip() for name in levels.split(',')]
    else:
        names = [str(name).strip() for name in levels]
    if not names or any(not name for name in names):
        raise LogConfigError(f"invalid level list: {levels!r}")
    if any(name.upper() == ALL for name in names):
        return None
    return names


class Destination:
    """An output stream that accepts records for a set of levels.

    Attributes:
        name: 'stdout', 'stderr' or the file path
        levels: Accepted level names, or None for every level
        force_format: Emit styled text even though the stream is not a tty
        path: File path for file destinations, None for the console
    """

    def __init__(self, name: str, stream: Optional[TextIO] = None,
                 levels: Optional[FrozenSet[str]] = None,
                 force_format: bool = False, path: Optional[Path] = None):
        self.name = name
        self._stream = stream
        self.levels = levels
        self.force_format = force_format
        self.path = path

    @property
    def stream(self) -> TextIO:
        return self._stream

    @property
    def is_file(self) -> bool:
        return self.path is not None

    def accepts(self, level_name: str) -> bool:
        return self.levels is None or level_name in self.levels

    def is_tty(self) -> bool:
        isatty = getattr(self.stream, 'isatty', None)
        try:
            return bool(isatty and isatty())
        except ValueError:  # closed stream
            return False

    def wants_style(self, force: bool = False) -> bool:
        return force or self.force_format or self.is_tty()

    def write(self, text: str) -> None:
        stream = self.stream
        stream.write(text)
        stream.flush()

    def close(self) -> None:
        if self.is_file and not self._stream.closed:
            self._stream.close()

    def __repr__(self):
        levels = ALL if self.levels is None else ','.join(sorted(self.levels))
        return f"Destination({self.name!r}, levels={levels})"


class ConsoleDestination(Destination):
    """stdout/stderr, looked up on ``sys`` at write time unless pinned."""

    @property
    def stream(self) -> TextIO:
        if self._stream is not None:
            return self._stream
        return getattr(sys, self.name)


class DestinationTable:
    """Maps levels to the destinations that should receive them.

    Usage::

        table = DestinationTable(registry)
        table.add_output_file('all.log')
        table.add_output_file('errors.log', 'ERROR,FATAL')
        for dest in table.resolve('FATAL'):
            dest.write(text)
    """

    def __init__(self, registry: LevelRegistry,
                 stdout: Optional[TextIO] = None,
                 stderr: Optional[TextIO] = None):
        self.registry = registry
        self.stdout = ConsoleDestination('stdout', stdout)
        self.stderr = ConsoleDestination('stderr', stderr)
        self._files: List[Destination] = []

    @property
    def files(self) -> List[Destination]:
        return list(self._files)

    def _find_file(self, path: Path) -> Optional[Destination]:
        for dest in self._files:
            if dest.path == path:
                return dest
        return None

    def add_output_file(self, path, levels=ALL,
                        force_format: bool = False) -> Destination:
        """Register a file destination.

        Unknown level names are registered with the level registry. Adding
        a path that is already registered widens its level set instead of
        opening a second handle.

        Raises:
            LogConfigError: If the file cannot be opened for appending.
        """
        names = parse_level_list(levels)
        accepted = None
        if names is not None:
            accepted = frozenset(self.registry.register(n).name for n in names)

        resolved = Path(path).expanduser().resolve()
        existing = self._find_file(resolved)
        if existing is not None:
            if existing.levels is not None:
                existing.levels = None if accepted is None else existing.levels | accepted
            return existing

        try:
            stream = open(resolved, 'a', encoding='utf-8')
        except OSError as e:
            raise LogConfigError(
                f"cannot open log file {path}: {e.strerror or e}") from e
        dest = Destination(str(path), stream, levels=accepted,
                           force_format=force_format, path=resolved)
        self._files.append(dest)
        return dest

    def console_for(self, level_name: str) -> Destination:
        if self.registry.severity_class(level_name) == INFORMATIONAL:
            return self.stdout
        return self.stderr

    def resolve(self, level_name: str) -> List[Destination]:
        """Console stream first, then matching files in registration order."""
        name = self.registry.register(level_name).name
        return [self.console_for(name)] + [d for d in self._files if d.accepts(name)]

    def close(self) -> None:
        for dest in self._files:
            dest.close()
        self._files.clear()
