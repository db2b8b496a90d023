"""
Function tracing decorator.

Routes call tracing through the module-level Logger at DEBUG level,
so it shows up only when the minimum level is DEBUG.
"""

import functools
import inspect
from pathlib import Path


def _short_repr(value):
    if isinstance(value, Path):
        return f"Path('{value}')"
    if isinstance(value, str) and len(value) > 50:
        return f"'{value[:47]}...'"
    if isinstance(value, (list, tuple)) and len(value) > 3:
        return f"[...{len(value)} items...]"
    return repr(value)


def trace(func):
    """Decorator to trace function calls via the module-level Logger.

    Shows function entry/exit with arguments and return values, and any
    exception raised, when DEBUG records are enabled.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        # Lazy import to avoid circular dependency
        from .manager import get_logger

        log = get_logger()
        if not log.is_enabled('DEBUG'):
            return func(*args, **kwargs)

        module = inspect.getmodule(func)
        module_name = module.__name__ if module else "unknown"
        func_name = func.__name__

        args_repr = [_short_repr(a) for a in args]
        args_repr.extend(f"{key}={_short_repr(value)}" for key, value in kwargs.items())
        log.log('DEBUG', f"[TRACE] >> {module_name}.{func_name}({', '.join(args_repr)})")

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log.log('DEBUG', f"[TRACE] !! {module_name}.{func_name} raised: "
                             f"{type(e).__name__}: {e}")
            raise

        if result is not None:
            log.log('DEBUG', f"[TRACE] << {module_name}.{func_name} returned: "
                             f"{_short_repr(result)}")
        return result

    return wrapper
