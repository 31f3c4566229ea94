"""
Pipeline event logging utilities for CVFORGE (Tier 2 logging).

Appends one JSON object per line to the pipeline events file so generation
outcomes can be audited or tailed across processes. Events are keyed by the
caller's storage namespace, never by the raw caller identity.

For detailed within-context logging (Tier 1), use cvforge.utils.logger instead.

Usage:
    from cvforge.utils.event_logging import log_pipeline_event

    log_pipeline_event(
        event_type="generation_completed",
        namespace="jane-3f2a9c01d4e5b6a7",
        source="pipeline",
        stored_name="1731590000000000000_Jane_Doe.pdf",
    )
"""

import json
import os
import threading
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from cvforge.utils.timestamp import now_exact

load_dotenv()
_events_file_env = os.getenv("PIPELINE_EVENTS_FILE")
PIPELINE_EVENTS_FILE = Path(_events_file_env) if _events_file_env else None

# Serializes appends from concurrent requests in one process
_write_lock = threading.Lock()


def log_pipeline_event(
    event_type: str,
    namespace: str,
    source: str,
    events_file: Optional[Path] = PIPELINE_EVENTS_FILE,
    **extra_fields,
) -> None:
    """
    Log an event to the pipeline event log.

    No-op when no events file is configured (PIPELINE_EVENTS_FILE unset).

    Args:
        event_type: Type of event (e.g., "generation_started", "expansion_degraded")
        namespace: Caller's storage namespace
        source: Event source (e.g., "pipeline", "cli")
        events_file: JSON Lines file to append to
        **extra_fields: Additional event-specific fields

    Example:
        log_pipeline_event(
            event_type="generation_failed",
            namespace="jane-3f2a9c01d4e5b6a7",
            source="pipeline",
            stage="rendering",
            error="Browser launch failed",
        )
    """
    if events_file is None:
        return

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "namespace": namespace,
        "source": source,
        **extra_fields,
    }

    with _write_lock:
        events_file.parent.mkdir(parents=True, exist_ok=True)
        with open(events_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(event, default=str) + "\n")


def get_recent_events(
    n: int = 10,
    namespace: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = PIPELINE_EVENTS_FILE,
) -> list[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        namespace: Filter to only events for this namespace (optional)
        event_type: Filter to only events of this type (optional)
        events_file: JSON Lines file to read

    Returns:
        List of event dicts (most recent last)

    Example:
        # Last 20 degraded expansions
        events = get_recent_events(20, event_type="expansion_degraded")
    """
    if events_file is None or not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if namespace:
        events = [e for e in events if e.get("namespace") == namespace]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
