"""
Storage context logger.

Provides logging interface for storage context with automatic [store] prefix.
All storage modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[store]"


def _log_info(message: str) -> None:
    """Log info message with [store] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [store] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [store] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_artifact_written(namespace: str, stored_name: str, size: int) -> None:
    """Log a completed artifact write."""
    _log_success(f"Stored {stored_name} ({size} bytes)")
    _log_debug(f"  Namespace: {namespace}")
