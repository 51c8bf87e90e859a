from __future__ import annotations

"""Session tracing (Explain Mode).

Enable with the --explain flag or ``explain: true`` in the config. Each state
transition prints one line of compact JSON stamped with the seconds elapsed
since tracing was switched on, so the auto-advance cadence can be read off
the log directly:

    [EXPLAIN] timer_fired :: {"index":3} @+3.00s
"""

import json
import time
from typing import Any, Dict, Optional

_STARTED: Optional[float] = None


def enable(flag: bool = True) -> None:
    global _STARTED
    _STARTED = time.monotonic() if flag else None


def enabled() -> bool:
    return _STARTED is not None


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not enabled():
        return
    stamp = f"@+{time.monotonic() - _STARTED:.2f}s"
    try:
        body = json.dumps(payload or {}, separators=(",", ":"))
    except (TypeError, ValueError):
        # payload not JSON serializable
        print(f"[EXPLAIN] {event} {stamp}")
        return
    print(f"[EXPLAIN] {event} :: {body} {stamp}")
