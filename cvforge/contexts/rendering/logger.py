"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[render]"


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(engine: str, html_length: int) -> None:
    """Log start of a render with context."""
    _log_info(f"Printing PDF with {engine}")
    _log_debug(f"  HTML: {html_length} chars")


def log_render_result(result) -> None:
    """
    Log a successful render.

    Args:
        result: RenderResult from PdfRenderer.render()
    """
    _log_success(f"PDF rendered: {len(result.pdf)} bytes ({result.elapsed_s:.2f}s)")
    _log_debug(f"  Page: {result.page_format}, margins {result.margins}")
