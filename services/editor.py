"""
Editing session for the budget structure and the budget wizard's
distribution step.

The editor owns the single mutable reference to the allocation. Slider
drags and preset taps swap it for a new value from the engine; commit
hands it to a save callback and allows only one save in flight.
"""

import structlog

from services import allocation as engine
from services.errors import BudgetError, CommitInProgressError, InvalidAllocationError

log = structlog.get_logger(__name__)


class AllocationEditor:
    def __init__(self, categories, saved: dict[str, float] | None = None):
        self.categories = engine.sort_categories(categories)
        self.allocation = engine.initialize(self.categories, saved or {})
        self.committing = False
        self.closed = False

    @property
    def total(self) -> float:
        return engine.total(self.allocation)

    @property
    def can_commit(self) -> bool:
        """False while the total is off or a save is outstanding."""
        return engine.can_commit(self.allocation) and not self.committing

    def _check_open(self) -> None:
        if self.closed:
            raise BudgetError("Editing session is closed")

    def drag(self, category_id: str, value: float) -> dict[str, float]:
        self._check_open()
        self.allocation = engine.redistribute(self.allocation, category_id, value)
        return self.allocation

    def select_preset(self, values: list[float]) -> dict[str, float]:
        self._check_open()
        self.allocation = engine.apply_preset(self.categories, values)
        return self.allocation

    def pairs(self) -> list[dict]:
        return [
            {"category_id": cid, "percentage": pct}
            for cid, pct in self.allocation.items()
        ]

    def commit(self, save):
        """
        Save the current allocation through `save(pairs)`.

        Raises InvalidAllocationError without calling `save` when the total
        is off, CommitInProgressError if a save is already running, and
        BudgetError once the session has been cancelled.
        Whatever `save` raises propagates; the allocation is kept so the
        user can retry.
        """
        self._check_open()
        if self.committing:
            raise CommitInProgressError("A save is already in progress")
        if not engine.can_commit(self.allocation):
            log.warning("commit_blocked", total=self.total)
            raise InvalidAllocationError(
                f"Percentages must sum to exactly 100% (got {self.total:g}%)"
            )

        self.committing = True
        try:
            return save(self.pairs())
        finally:
            self.committing = False

    def cancel(self) -> None:
        """Drop the in-memory allocation. Nothing is persisted."""
        self.allocation = {}
        self.closed = True
