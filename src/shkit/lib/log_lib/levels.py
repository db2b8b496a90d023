"""
Level registry — the ordered catalog of severity levels.

Levels are values in a mapping keyed by their uppercase name, not a
closed enumeration. The seven built-in levels are pre-seeded with fixed
ranks; any other name becomes a level the first time it is used:

    ←── quieter ──────────────────────────────────────────────── louder ──→
    DEBUG   RUN   INFO   [user levels]   WARN   ERROR   [*ERROR*, *FATAL*]   FATAL   QUIT
     100    200    300     301, 302...    400    500     501, 502...        600     700

The filter rule is simple:

    level.filter_rank >= registry.min_rank  →  record is shown

filter_rank equals rank for every level except RUN, which filters like
INFO so that command echoes stay visible at the default threshold.

Each level also carries a severity class (console routing) and an action
(what the dispatcher does after writing the record):

    class          levels                console   action
    informational  DEBUG RUN INFO, user  stdout    none
    warning        WARN                  stderr    none
    fatal          ERROR, user *ERROR*   stderr    return status
                   and *FATAL* names
    fatal          FATAL                 stderr    trace + abort
    fatal          QUIT                  stderr    trace + return status
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .errors import LogConfigError


# Severity classes
INFORMATIONAL = 'informational'
WARNING = 'warning'
FATAL_CLASS = 'fatal'

# Terminal actions
NONE = 'none'
RETURN = 'return'       # return the exit status to the caller
ABORT = 'abort'         # hand the record to the fatal handler
ADVISORY = 'advisory'   # like ABORT, but only returns the would-be status

DEFAULT_MIN_LEVEL = 'INFO'
DEFAULT_STATUS = 1
MAX_STATUS = 255

# User levels whose name contains one of these are fatal-class, ranked
# just above ERROR
FATAL_NAME_WORDS = ('ERROR', 'FATAL')

# name: (rank, filter_rank, severity, action, traced)
BUILTIN_LEVELS = {
    'DEBUG': (100, 100, INFORMATIONAL, NONE, False),
    'RUN':   (200, 300, INFORMATIONAL, NONE, False),
    'INFO':  (300, 300, INFORMATIONAL, NONE, False),
    'WARN':  (400, 400, WARNING, NONE, False),
    'ERROR': (500, 500, FATAL_CLASS, RETURN, False),
    'FATAL': (600, 600, FATAL_CLASS, ABORT, True),
    'QUIT':  (700, 700, FATAL_CLASS, ADVISORY, True),
}

_NAME_RE = re.compile(r'^[A-Z_][A-Z0-9_]*$')


@dataclass
class Level:
    """A named severity.

    Attributes:
        name: Uppercase identity (e.g. 'INFO', 'FOOBAR')
        rank: Ordinal position used for sorting and as the default filter rank
        label: Display text; the name unless overridden
        severity: INFORMATIONAL, WARNING or FATAL_CLASS
        action: NONE, RETURN, ABORT or ADVISORY
        traced: Whether records at this level get a stack trace appended
        filter_rank: Rank compared against the minimum-level threshold
    """
    name: str
    rank: int
    label: str = ''
    severity: str = INFORMATIONAL
    action: str = NONE
    traced: bool = False
    filter_rank: Optional[int] = None

    def __post_init__(self):
        if not self.label:
            self.label = self.name
        if self.filter_rank is None:
            self.filter_rank = self.rank

    @property
    def builtin(self) -> bool:
        return self.name in BUILTIN_LEVELS


def normalize_name(name) -> str:
    """Uppercase and validate a level name.

    Raises:
        LogConfigError: If the name is empty or not identifier-like.
    """
    text = str(name).strip().upper()
    if not _NAME_RE.match(text):
        raise LogConfigError(f"invalid level name: {name!r}")
    return text


class LevelRegistry:
    """Ordered catalog of levels plus the minimum-level filter.

    The shared label width only ever grows: it is the longest label seen
    since the registry was created, so padding stays consistent for every
    line rendered from now on.
    """

    def __init__(self, min_level: str = DEFAULT_MIN_LEVEL):
        self._levels: Dict[str, Level] = {}
        self._label_width = 0
        for name, (rank, filter_rank, severity, action, traced) in BUILTIN_LEVELS.items():
            self._add(Level(name=name, rank=rank, severity=severity,
                            action=action, traced=traced,
                            filter_rank=filter_rank))
        self._min_rank = 0
        self.min_level = min_level

    def _add(self, level: Level) -> Level:
        self._levels[level.name] = level
        self._label_width = max(self._label_width, len(level.label))
        return level

    def _next_user_rank(self, severity: str) -> int:
        if severity == FATAL_CLASS:
            error = BUILTIN_LEVELS['ERROR'][0]
            fatal = BUILTIN_LEVELS['FATAL'][0]
            return max(lvl.rank for lvl in self._levels.values()
                       if error <= lvl.rank < fatal) + 1
        highest = max(lvl.rank for lvl in self._levels.values()
                      if lvl.severity == INFORMATIONAL)
        return highest + 1

    def register(self, name: str, label: Optional[str] = None,
                 rank_hint: Optional[int] = None,
                 severity: Optional[str] = None) -> Level:
        """Return the level called `name`, creating it if unseen.

        Idempotent: an already-known name is returned unchanged, whatever
        the other arguments say. Without an explicit severity, a new name
        containing ERROR or FATAL is fatal-class (stderr, returns its
        status like ERROR); any other new name is informational.
        """
        key = normalize_name(name)
        existing = self._levels.get(key)
        if existing is not None:
            return existing
        if severity is None:
            severity = (FATAL_CLASS if any(w in key for w in FATAL_NAME_WORDS)
                        else INFORMATIONAL)
        rank = rank_hint if rank_hint is not None else self._next_user_rank(severity)
        action = RETURN if severity == FATAL_CLASS else NONE
        return self._add(Level(name=key, rank=rank, label=label or key,
                               severity=severity, action=action))

    def relabel(self, name: str, label: str) -> Level:
        """Change the display label of a level (registering it if needed)."""
        level = self.register(name)
        level.label = label
        self._label_width = max(self._label_width, len(label))
        return level

    def get(self, name: str) -> Optional[Level]:
        try:
            return self._levels.get(normalize_name(name))
        except LogConfigError:
            return None

    def __contains__(self, name) -> bool:
        return self.get(name) is not None

    def __iter__(self) -> Iterator[Level]:
        return iter(sorted(self._levels.values(), key=lambda lvl: lvl.rank))

    def __len__(self) -> int:
        return len(self._levels)

    def names(self) -> List[str]:
        return [lvl.name for lvl in self]

    @property
    def min_level(self) -> str:
        return self._min_level

    @min_level.setter
    def min_level(self, name: str) -> None:
        level = self._levels.get(normalize_name(name))
        if level is None:
            raise LogConfigError(f"unknown minimum level: {name!r}")
        self._min_level = level.name
        self._min_rank = level.filter_rank

    def is_enabled(self, name: str) -> bool:
        """True when records at `name` pass the minimum-level filter."""
        return self.register(name).filter_rank >= self._min_rank

    def label_width(self) -> int:
        return self._label_width

    def severity_class(self, name: str) -> str:
        return self.register(name).severity


def format_level_list(registry: LevelRegistry) -> str:
    """Format the registered levels for display.

    Returns:
        Formatted string listing every level with rank, class and action.
    """
    lines = ["Available levels:"]
    width = registry.label_width()
    for lvl in registry:
        marker = "*" if lvl.name == registry.min_level else " "
        traced = ", traced" if lvl.traced else ""
        lines.append(f" {marker}{lvl.name:<{width}}  {lvl.rank:>4}  "
                     f"{lvl.severity} ({lvl.action}{traced})")
    return "\n".join(lines)
