"""Flash Anzan package initialization.

Exposes the sequence generator and the session state machine so scripts
and notebooks can simply `import flashanzan`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .drills.sequence import generate_numbers, prefix_sums  # noqa: E402
from .app.session_manager import SessionManager  # noqa: E402
from .app.scheduler import LoopScheduler, TkScheduler  # noqa: E402

__all__ = [
    "__version__",
    "generate_numbers",
    "prefix_sums",
    "SessionManager",
    "LoopScheduler",
    "TkScheduler",
]
