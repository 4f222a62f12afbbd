"""Event logging for myoudp.

Every component reports what it does as a JSON object printed on its own
line, e.g. ``{"type": "streaming_started", "device": 1}``. An optional
callback receives the same dicts (used by tests and embedding apps).
"""

from __future__ import annotations

import json
import threading
from typing import Any, Callable, Dict, Optional

# Event types printed at sample rate (suppressed in quiet mode)
HIGH_FREQUENCY_EVENTS = frozenset({"orientation", "packet_sent"})

# Suppress high-frequency event logging when True
QUIET_HIGH_FREQUENCY = False

_evt_cb: Optional[Callable[[Dict[str, Any]], None]] = None
_print_lock = threading.Lock()


def set_quiet(quiet: bool) -> None:
    """Enable or disable printing of high-frequency events."""
    global QUIET_HIGH_FREQUENCY
    QUIET_HIGH_FREQUENCY = bool(quiet)


def set_event_callback(callback: Optional[Callable[[Dict[str, Any]], None]]) -> None:
    """Register a callable that receives every emitted event (None to clear)."""
    global _evt_cb
    _evt_cb = callback


def emit_event(event: Dict[str, Any]) -> None:
    """Emit event to the registered callback and optionally print it.

    Args:
        event: Event dictionary with at least a "type" key.
    """
    kind = event.get("type", "")
    if not (QUIET_HIGH_FREQUENCY and kind in HIGH_FREQUENCY_EVENTS):
        line = json.dumps(event)
        with _print_lock:
            print(line, flush=True)

    cb = _evt_cb
    if cb is not None:
        try:
            cb(event)
        except Exception:
            pass
