"""Logging configuration for l2craft.

Provides configurable logging with:
- File-based logging with rotation
- Console output for real-time debugging
- Performance timing decorators for each pipeline stage

Environment Variables:
    L2CRAFT_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
    L2CRAFT_LOG_FILE: Path to log file (default: ~/.l2craft/l2craft.log)
    L2CRAFT_LOG_MAX_SIZE: Max log file size in MB (default: 10)
    L2CRAFT_LOG_BACKUPS: Number of backup files to keep (default: 5)

Usage:
    from l2craft.utils.logging_config import setup_logging, timed

    setup_logging()  # Call once at startup

    @timed("parse")
    def parse_config(self, text):
        ...

    # Or use context manager for sections:
    with timed_section_sync("validate", subject="change"):
        ...
"""
import asyncio
import functools
import logging
import os
import time
from contextlib import contextmanager, asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Callable, Any

# Performance logger - separate from main logger for easy filtering
perf_logger = logging.getLogger("l2craft.perf")
main_logger = logging.getLogger("l2craft")

_configured = False


def get_log_level(default: str = "INFO") -> int:
    """Get log level from environment."""
    level_str = os.environ.get("L2CRAFT_LOG_LEVEL", default).upper()
    return getattr(logging, level_str, logging.INFO)


def get_log_file(default: Optional[str] = None) -> Path:
    """Get log file path from environment."""
    default_path = default or str(Path.home() / ".l2craft" / "l2craft.log")
    path_str = os.environ.get("L2CRAFT_LOG_FILE", default_path)
    return Path(path_str).expanduser()


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure logging for the application.

    Sets up:
    - Console handler (INFO+ by default, respects L2CRAFT_LOG_LEVEL)
    - File handler with rotation (DEBUG level - captures everything)
    - Performance logger for timing metrics

    Args:
        level: Fallback level when L2CRAFT_LOG_LEVEL is unset
        log_file: Fallback path when L2CRAFT_LOG_FILE is unset
    """
    global _configured
    if _configured:
        return

    log_level = get_log_level(level or "INFO")
    log_path = get_log_file(log_file)
    max_size_mb = int(os.environ.get("L2CRAFT_LOG_MAX_SIZE", "10"))
    backup_count = int(os.environ.get("L2CRAFT_LOG_BACKUPS", "5"))

    # Create log directory if needed
    log_path.parent.mkdir(parents=True, exist_ok=True)

    # Main format: timestamp - logger - level - message
    main_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | %(name)-30s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Performance format: focused on timing
    perf_format = logging.Formatter(
        "%(asctime)s.%(msecs)03d | PERF | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler - stderr, stdout carries command output
    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(main_format)

    # File handler - captures DEBUG and above (everything)
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(main_format)

    # Performance file handler - separate file for easy analysis
    perf_log_file = log_path.parent / "l2craft-perf.log"
    perf_handler = RotatingFileHandler(
        perf_log_file,
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding="utf-8"
    )
    perf_handler.setLevel(logging.DEBUG)
    perf_handler.setFormatter(perf_format)

    # Package logger; module loggers propagate here
    main_logger.setLevel(logging.DEBUG)  # Capture all, handlers filter
    main_logger.addHandler(console_handler)
    main_logger.addHandler(file_handler)

    # Performance records stay out of the main log file
    perf_logger.setLevel(logging.DEBUG)
    perf_logger.propagate = False
    perf_logger.addHandler(perf_handler)
    perf_logger.addHandler(console_handler)

    _configured = True

    main_logger.info(f"Logging initialized: level={logging.getLevelName(log_level)}, file={log_path}")
    perf_logger.info(f"Performance logging to: {perf_log_file}")


def _report(
    operation: str,
    subject: Optional[str],
    start: float,
    error: Optional[BaseException] = None,
    extra: Optional[dict] = None,
) -> None:
    """Log one timing line; successful runs also go to global_stats when enabled."""
    elapsed = (time.perf_counter() - start) * 1000  # ms
    outcome = "OK" if error is None else f"FAIL: {error}"
    msg = f"{operation:20s} | {subject or 'N/A':15s} | {elapsed:8.2f}ms | {outcome}"
    if extra:
        msg += " | " + " | ".join(f"{k}={v}" for k, v in extra.items())

    if error is None:
        global_stats.record(operation, elapsed)
        perf_logger.info(msg)
    else:
        perf_logger.warning(msg)


def timed(operation: str, subject: Optional[str] = None):
    """Decorator to log execution time of sync/async functions.

    Args:
        operation: Name of the stage (e.g., "parse", "analyze", "change")
        subject: Optional label shown next to the timing

    Usage:
        @timed("parse")
        def parse_config(self, text):
            ...

        @timed("call_tool", subject="mcp")
        async def call_tool(name, arguments):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _report(operation, subject, start, error=e)
                raise
            _report(operation, subject, start)
            return result

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> Any:
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _report(operation, subject, start, error=e)
                raise
            _report(operation, subject, start)
            return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator


@asynccontextmanager
async def timed_section(operation: str, subject: Optional[str] = None, **extra):
    """Async context manager for timing code sections.

    Usage:
        async with timed_section("tool:analyze_config", subject="mcp"):
            ...
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, subject, start, error=e, extra=extra)
        raise
    _report(operation, subject, start, extra=extra)


@contextmanager
def timed_section_sync(operation: str, subject: Optional[str] = None, **extra):
    """Sync context manager for timing pipeline stages."""
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        _report(operation, subject, start, error=e, extra=extra)
        raise
    _report(operation, subject, start, extra=extra)


class PerfStats:
    """Collect and report stage timings.

    Usage:
        stats = PerfStats()
        stats.record("parse", 1.5)
        stats.record("parse", 1.2)
        stats.record("generate", 0.3)
        print(stats.summary())
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._data: dict[str, list[float]] = {}

    def record(self, operation: str, duration_ms: float) -> None:
        """Keep a measurement; ignored while disabled."""
        if not self.enabled:
            return
        self._data.setdefault(operation, []).append(duration_ms)

    def count(self, operation: str) -> int:
        """Number of recorded runs of ``operation``."""
        return len(self._data.get(operation, []))

    def summary(self) -> str:
        """One line per stage with count, average, min and max."""
        lines = ["Performance Summary", "=" * 60]

        for op, times in sorted(self._data.items()):
            avg = sum(times) / len(times)
            lines.append(
                f"{op:20s} | count={len(times):4d} | "
                f"avg={avg:8.2f}ms | min={min(times):8.2f}ms | max={max(times):8.2f}ms"
            )

        return "\n".join(lines)

    def clear(self) -> None:
        self._data.clear()


# Fed by every timed stage; off until the CLI --stats flag enables it
global_stats = PerfStats(enabled=False)
