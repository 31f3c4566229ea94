"""
Intake context logger.

Provides logging interface for intake context with automatic [intake] prefix.
All intake modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[intake]"


# Wrapper functions with automatic [intake] prefix


def _log_info(message: str) -> None:
    """Log info message with [intake] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [intake] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [intake] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level intake-specific logging helpers


def log_expansion_start(provider_name: str, prompt: str) -> None:
    """Log start of an expansion call."""
    _log_info(f"Expanding prompt with {provider_name}")
    _log_debug(f"  Prompt length: {len(prompt)} chars")


def log_expansion_result(result, elapsed_time: float) -> None:
    """
    Log expansion outcome.

    Args:
        result: ExpansionResult from expand_prompt()
        elapsed_time: Time taken by the call (including failure)
    """
    fragment = result.fragment
    if result.degraded:
        _log_warning(f"Expansion degraded ({elapsed_time:.2f}s): {result.reason}")
        _log_warning("  Using prompt text verbatim as summary")
        return

    _log_info(
        f"Expansion succeeded ({elapsed_time:.2f}s): {len(fragment.experience)} experience, "
        f"{len(fragment.education)} education, {len(fragment.skills)} skills"
    )
    if result.output_tokens is not None:
        _log_debug(f"  Tokens: {result.input_tokens} in / {result.output_tokens} out")
