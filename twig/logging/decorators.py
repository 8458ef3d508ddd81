"""
Decorators for automatic logging of repository operations.

These decorators enable traceability without cluttering business logic.
"""

import functools
import inspect
import time
from datetime import datetime, timezone
from typing import Callable, Any

from ..errors import TwigError
from .logger import get_twig_logger, log_repository_operation


def track_operation(operation_type: str) -> Callable:
    """
    Decorator to track a repository command.

    Logs the start, completion and failure of the wrapped call. Expected
    user-facing failures (``TwigError``) are logged at INFO; anything
    else at ERROR. The exception is always re-raised.

    Args:
        operation_type: Operation name (e.g., "commit", "merge")

    Example:
        >>> @track_operation("commit")
        ... def commit(self, message: str) -> Commit:
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_twig_logger("repository")

            sig = inspect.signature(func)
            bound_args = sig.bind(*args, **kwargs)
            bound_args.apply_defaults()

            operation_id = datetime.now(timezone.utc).timestamp()
            log_repository_operation(
                log,
                operation=operation_type,
                operation_id=operation_id,
                function=func.__name__,
                arguments={
                    k: str(v)[:100]
                    for k, v in bound_args.arguments.items()
                    if k != "self"
                },
            )

            try:
                result = func(*args, **kwargs)
            except TwigError as e:
                log.info(
                    "Operation {operation} rejected: {error}",
                    operation=operation_type,
                    operation_id=operation_id,
                    error=e.message,
                    error_type=type(e).__name__,
                )
                raise
            except Exception as e:
                log.error(
                    "Operation {operation} failed: {error}",
                    operation=operation_type,
                    operation_id=operation_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            log_repository_operation(
                log,
                operation=f"{operation_type}_complete",
                operation_id=operation_id,
                function=func.__name__,
                success=True,
            )
            return result

        return wrapper

    return decorator


def performance_monitor(threshold_ms: float = 1000.0) -> Callable:
    """
    Decorator to monitor function performance.

    Logs warning if execution exceeds threshold.

    Args:
        threshold_ms: Warning threshold in milliseconds

    Example:
        >>> @performance_monitor(threshold_ms=500)
        ... def find_split_point(self, a, b):
        ...     ...
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = get_twig_logger("system")

            start_time = time.time()

            try:
                result = func(*args, **kwargs)
            except Exception:
                elapsed_ms = (time.time() - start_time) * 1000
                log.debug(
                    "Function failed: {function}",
                    function=func.__name__,
                    elapsed_ms=elapsed_ms,
                )
                raise

            elapsed_ms = (time.time() - start_time) * 1000
            if elapsed_ms > threshold_ms:
                log.warning(
                    "Performance threshold exceeded: {function}",
                    function=func.__name__,
                    elapsed_ms=elapsed_ms,
                    threshold_ms=threshold_ms,
                )
            else:
                log.debug(
                    "Function executed: {function}",
                    function=func.__name__,
                    elapsed_ms=elapsed_ms,
                )

            return result

        return wrapper

    return decorator
