"""Edit debouncing for BuildPlan.

Coalesces rapid raw inputs (someone typing into a quantity field) so that
only the value present after an idle period becomes a tracked edit.
Superseded values are dropped, never merged or queued.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional


@dataclass
class PendingEdit:
    key: Hashable
    value: Any
    submitted_at: float


class EditDebouncer:
    """Keeps the latest pending value per field until it has been idle long enough.

    Times are seconds from ``time.monotonic`` unless the caller passes its
    own clock readings.
    """

    def __init__(self, delay_ms: int):
        self.delay = delay_ms / 1000
        self._pending: Dict[Hashable, PendingEdit] = {}

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(self, key: Hashable, value: Any, now: Optional[float] = None) -> None:
        """Store a value for a field, replacing any older pending one and restarting its timer."""
        submitted_at = time.monotonic() if now is None else now
        self._pending.pop(key, None)
        self._pending[key] = PendingEdit(key=key, value=value, submitted_at=submitted_at)

    def due(self, now: Optional[float] = None) -> List[PendingEdit]:
        """Pop every pending edit whose idle period has elapsed, oldest first."""
        now = time.monotonic() if now is None else now
        ready = [edit for edit in self._pending.values() if now - edit.submitted_at >= self.delay]
        for edit in ready:
            del self._pending[edit.key]
        return ready

    def clear(self) -> None:
        self._pending.clear()
