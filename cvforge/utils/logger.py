"""
Session logging (Tier 1): one loguru configuration per CLI invocation.

A session owns a directory under LOGS_PATH holding `<session>.log` with every
DEBUG record, while the console shows INFO and above. Contexts never call
loguru directly; they go through their own contexts/<context>/logger.py.
"""

import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv
from loguru import logger

from cvforge import __version__
from cvforge.utils.timestamp import now

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"

LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}

RULE = "=" * 80


def new_session_dir(operation: str, logs_root: Optional[Path] = None) -> Path:
    """
    Create `<logs_root>/<operation>_<timestamp>` for one session.

    Example:
        new_session_dir("generate")  # outs/logs/generate_20251114_123456
    """
    session_dir = (logs_root or LOGS_PATH) / f"{operation}_{now()}"
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict[str, str]] = None,
    level_colors: Optional[Dict[str, str]] = None,
) -> Path:
    """
    Route loguru to a session log file and the console.

    Args:
        context_name: Session name, used as the log file stem (e.g., "generate")
        log_dir: Session directory (see new_session_dir)
        extra_provenance: Extra header lines, e.g. {"LLM": "openai/gpt-4o-mini"}
        level_colors: Console color overrides, e.g. {"INFO": "<cyan>"}

    Returns:
        Path to the session log file
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level="INFO", colorize=True)

    log_provenance(extra_provenance)
    return log_file


def provenance_lines(extra_context: Optional[Dict[str, str]] = None) -> List[str]:
    """Header lines identifying how and where this session was started."""
    lines = [
        f"Command: {' '.join(sys.argv)}",
        f"Working directory: {Path.cwd()}",
        f"Python: {sys.version.split()[0]}",
        f"cvforge: {__version__}",
    ]
    lines.extend(f"{key}: {value}" for key, value in (extra_context or {}).items())
    return lines


def log_provenance(extra_context: Optional[Dict[str, str]] = None) -> None:
    """Write the provenance header to the active sinks."""
    logger.info(RULE)
    for line in provenance_lines(extra_context):
        logger.info(line)
    logger.info(RULE)
