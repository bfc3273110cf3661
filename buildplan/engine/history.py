"""Undo/redo history for BuildPlan.

A linear sequence of immutable snapshots with a cursor. Recording after an
undo discards the redo branch.
"""

from typing import List, Optional, Tuple

import structlog

from buildplan.models.project_plan import ProjectPlan

logger = structlog.get_logger()


class PlanHistory:
    """Owns the snapshot sequence and the current index.

    Index 0 is the prepared plan and serves as the cost baseline.
    The sequence is only written through ``record``, ``undo``, ``redo``
    and ``clear``.
    """

    def __init__(self):
        self._snapshots: List[ProjectPlan] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def index(self) -> int:
        """Current position, -1 when the history is empty."""
        return self._index

    @property
    def snapshots(self) -> Tuple[ProjectPlan, ...]:
        return tuple(self._snapshots)

    @property
    def current(self) -> Optional[ProjectPlan]:
        if self._index < 0:
            return None
        return self._snapshots[self._index]

    @property
    def baseline(self) -> Optional[ProjectPlan]:
        return self._snapshots[0] if self._snapshots else None

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._snapshots) - 1

    def record(self, snapshot: ProjectPlan) -> None:
        """Truncate everything after the cursor, append, and move to the end."""
        dropped = len(self._snapshots) - (self._index + 1)
        del self._snapshots[self._index + 1:]
        self._snapshots.append(snapshot)
        self._index = len(self._snapshots) - 1
        logger.debug(
            "history_recorded",
            index=self._index,
            length=len(self._snapshots),
            dropped_redo=dropped,
        )

    def undo(self) -> Optional[ProjectPlan]:
        """Step back one snapshot. At the start this is a no-op."""
        if self.can_undo:
            self._index -= 1
            logger.info("history_undo", index=self._index, length=len(self._snapshots))
        return self.current

    def redo(self) -> Optional[ProjectPlan]:
        """Step forward one snapshot. At the end this is a no-op."""
        if self.can_redo:
            self._index += 1
            logger.info("history_redo", index=self._index, length=len(self._snapshots))
        return self.current

    def clear(self) -> None:
        self._snapshots = []
        self._index = -1
