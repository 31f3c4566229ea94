"""
Shared utilities for CVFORGE.

Common functionality used across contexts:
- Text processing and slugs
- Timestamps
- Settings
- LLM providers
- Logging (loguru sessions and pipeline events)
"""

from cvforge.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
