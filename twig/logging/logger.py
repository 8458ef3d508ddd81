"""
Logging infrastructure for twig.

Provides structured logging with:
- Component-specific loggers (object store, refs, staging, merge, ...)
- Optional rotating file logs
- Structured repository operation events
"""

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Any
from loguru import logger


class TwigLogger:
    """
    Logger setup for twig with component-specific features.

    Features:
    - Structured logging with context
    - Console handler on stderr
    - Log rotation and retention for file handlers
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        rotation: str = "10 MB",
        retention: str = "1 month",
        level: str = "WARNING",
        format_string: Optional[str] = None,
        enable_file_logging: bool = False,
        enable_console_logging: bool = True,
    ):
        """
        Initialize the twig logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to console
        """
        self.log_dir = log_dir or Path("logs")
        self.rotation = rotation
        self.retention = retention
        self.level = level

        self.format_string = format_string or (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        )

        # Remove default handler
        logger.remove()
        logger.configure(extra={"component": "system"})

        if enable_console_logging:
            logger.add(
                sys.stderr,
                format=self.format_string,
                level=level,
                colorize=True,
            )

        if enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._add_file_handlers()

    def _add_file_handlers(self) -> None:
        """Add the main and error file handlers."""
        logger.add(
            self.log_dir / "twig.log",
            format=self.format_string,
            level=self.level,
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

        # Error log (ERROR and above only)
        logger.add(
            self.log_dir / "errors.log",
            format=self.format_string,
            level="ERROR",
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )


def get_twig_logger(component: str = "system") -> Any:
    """
    Get a component-specific logger.

    Example:
        >>> log = get_twig_logger("object_store")
        >>> log.debug("Stored object {object_id}", object_id="3f2a...")
    """
    return logger.bind(component=component)


def log_repository_operation(
    logger_instance: Any, operation: str, **kwargs: Any
) -> None:
    """
    Log a repository operation event.

    Args:
        logger_instance: Logger to use
        operation: Operation name (e.g., "commit", "merge_complete")
        **kwargs: Additional context
    """
    logger_instance.debug(
        f"Repository operation: {operation}",
        operation=operation,
        timestamp=datetime.now(timezone.utc).isoformat(),
        **kwargs,
    )


def initialize_logging(
    log_dir: Optional[Path] = None, level: str = "WARNING", **kwargs: Any
) -> TwigLogger:
    """
    Initialize the twig logging system.

    This should be called once at application startup.

    Args:
        log_dir: Directory for log files
        level: Default log level
        **kwargs: Additional configuration for TwigLogger

    Returns:
        Configured TwigLogger instance
    """
    return TwigLogger(log_dir=log_dir, level=level, **kwargs)
