"""
Fail-soft wrapper for store operations.
"""

import functools
from typing import Any, Callable

from bookshelf.utils.logging import get_logger

logger = get_logger(__name__)


def fallback(default: Any, event: str) -> Callable:
    """
    Turn any exception raised by the wrapped function into ``default``.

    ``default`` may be a zero-argument callable, for mutable defaults. The
    swallowed error is logged as a warning under ``event``.
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.warning(event, error=str(e), operation=func.__name__)
                return default() if callable(default) else default
        return wrapper
    return decorator
