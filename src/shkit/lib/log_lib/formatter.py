"""
Record rendering — label padding and ANSI styling.

Every record line has the shape::

    <label padded to the shared width> [<timestamp> ]<message>

The styled variant wraps the label in an ANSI SGR sequence chosen by
level (falling back to the severity class). The plain variant is the
styled one with every SGR sequence removed, so for any record
``strip_ansi(styled) == plain``.
"""

import re
from typing import Dict, Optional, Tuple

from .levels import FATAL_CLASS, INFORMATIONAL, WARNING, LevelRegistry


ANSI_RE = re.compile(r'\x1b\[\d*(?:;\d+)*m')
RESET = '\x1b[0m'

# SGR parameters per built-in level
LEVEL_STYLES: Dict[str, str] = {
    'DEBUG': '2',       # dim
    'RUN':   '36',      # cyan
    'INFO':  '',
    'WARN':  '33',      # yellow
    'ERROR': '31',      # red
    'FATAL': '1;31',    # bold red
    'QUIT':  '35',      # magenta
}

# Fallback for levels without their own entry
CLASS_STYLES: Dict[str, str] = {
    INFORMATIONAL: '',
    WARNING: '33',
    FATAL_CLASS: '31',
}


def strip_ansi(text: str) -> str:
    """Remove ANSI color/style sequences from text.

    Only complete ``ESC [ params m`` sequences are removed, so literal
    brackets survive. Idempotent.
    """
    return ANSI_RE.sub('', text)


def style(text: str, code: str) -> str:
    """Wrap text in an SGR sequence (no-op for an empty code)."""
    if not code:
        return text
    return f"\x1b[{code}m{text}{RESET}"


class Formatter:
    """Renders record lines against a LevelRegistry's shared label width."""

    def __init__(self, registry: LevelRegistry,
                 styles: Optional[Dict[str, str]] = None):
        self.registry = registry
        self.styles = dict(LEVEL_STYLES)
        if styles:
            self.styles.update({k.upper(): v for k, v in styles.items()})

    def style_for(self, level_name: str) -> str:
        level = self.registry.register(level_name)
        if level.name in self.styles:
            return self.styles[level.name]
        return CLASS_STYLES.get(level.severity, '')

    def render_line(self, level_name: str, message: str,
                    timestamp: Optional[str] = None,
                    styled: bool = False) -> str:
        """Render one record line (no trailing newline)."""
        level = self.registry.register(level_name)
        pad = ' ' * (self.registry.label_width() - len(level.label))
        label = level.label
        if styled:
            label = style(label, self.style_for(level.name))
        parts = [label + pad]
        if timestamp:
            parts.append(timestamp)
        parts.append(message)
        line = ' '.join(parts)
        return line if styled else strip_ansi(line)

    def render(self, level_name: str, message: str,
               timestamp: Optional[str] = None) -> Tuple[str, str]:
        """Return (styled_text, plain_text) for a record."""
        return (self.render_line(level_name, message, timestamp, styled=True),
                self.render_line(level_name, message, timestamp, styled=False))

    def strip(self, text: str) -> str:
        return strip_ansi(text)


class Record:
    """A single emitted entry, rendered lazily once per style.

    Attributes:
        level: Level name
        message: Argument-joined message text
        timestamp: Pre-formatted timestamp or None
        trace: Rendered stack-trace block or None
    """

    def __init__(self, formatter: Formatter, level: str, message: str,
                 timestamp: Optional[str] = None, trace: Optional[str] = None):
        self.formatter = formatter
        self.level = level
        self.message = message
        self.timestamp = timestamp
        self.trace = trace
        self._rendered: Dict[bool, str] = {}

    def text(self, styled: bool = False) -> str:
        """Full text for one destination, newline-terminated."""
        if styled not in self._rendered:
            line = self.formatter.render_line(self.level, self.message,
                                              self.timestamp, styled=styled)
            if self.trace:
                line = f"{line}\n{self.trace}"
            self._rendered[styled] = line + "\n"
        return self._rendered[styled]

    @property
    def render_count(self) -> int:
        return len(self._rendered)
