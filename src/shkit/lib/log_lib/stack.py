"""
Stack tracer — call-chain capture for traced (FATAL/QUIT) records.

The capture walks interpreter frames outward from the call site and
drops frames that belong to the logging machinery itself, so the first
rendered line is always the caller of ``log()``. Modules that wrap the
logger (e.g. convenience ``log()`` functions) hide themselves with
hide_module() at import time.
"""

import os
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

_PACKAGE = __name__.rpartition('.')[0]

# Module names (or package prefixes) whose frames never appear in a trace
_HIDDEN_MODULES: Set[str] = {_PACKAGE}


def hide_module(name: str) -> None:
    """Exclude frames from module `name` (and its submodules) from traces."""
    _HIDDEN_MODULES.add(name)


@dataclass(frozen=True)
class StackFrame:
    """One entry of a captured call chain."""
    function: str
    filename: str
    lineno: int

    def render(self, indent: str = '  ') -> str:
        return f"{indent}at {self.function} ({self.filename}:{self.lineno})"


def _is_hidden(module_name: Optional[str], hidden: Set[str]) -> bool:
    if not module_name:
        return False
    return any(module_name == h or module_name.startswith(h + '.') for h in hidden)


class StackTracer:
    """Captures and renders the active call chain.

    Args:
        indent: Prefix for every rendered frame line
        basename: Render only the file's base name instead of its full path
    """

    def __init__(self, indent: str = '  ', basename: bool = False):
        self.indent = indent
        self.basename = basename

    def capture(self) -> List[StackFrame]:
        """Return the call chain, innermost first, minus hidden frames."""
        frames = []
        hidden = set(_HIDDEN_MODULES)
        frame = sys._getframe(1)
        while frame is not None:
            if not _is_hidden(frame.f_globals.get('__name__'), hidden):
                code = frame.f_code
                filename = code.co_filename
                if self.basename:
                    filename = os.path.basename(filename)
                frames.append(StackFrame(code.co_name, filename, frame.f_lineno))
            frame = frame.f_back
        return frames

    def render(self, frames: Sequence[StackFrame]) -> str:
        """One indented line per frame, no trailing newline."""
        return "\n".join(f.render(self.indent) for f in frames)


class FixedTracer(StackTracer):
    """A tracer that always reports the same frames.

    Useful for golden-output tests and for embedding code that wants a
    stable trace (e.g. only the script's own frames).
    """

    def __init__(self, frames: Sequence[StackFrame], indent: str = '  '):
        super().__init__(indent=indent)
        self.frames = list(frames)

    def capture(self) -> List[StackFrame]:
        return list(self.frames)
