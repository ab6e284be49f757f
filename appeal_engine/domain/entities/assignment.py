"""Assignment value types — per-decision candidates and the decision result."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from appeal_engine.domain.value_objects.enums import AssignmentOutcome


@dataclass(frozen=True)
class AssignmentCandidate:
    """One available admin as seen by a single assignment decision."""

    admin_id: int
    active_appeals_count: int
    experience_level: int  # 0 when the admin has no record for the category
    success_ratio: float
    last_activity_at: datetime | None


@dataclass(frozen=True)
class AssignmentResult:
    """Outcome of one assign / claim call. The caller persists it on the appeal."""

    ticket_id: int
    outcome: AssignmentOutcome
    admin_id: int | None = None
    degraded: bool = False  # True when store failures, not an empty pool, caused NO_CANDIDATE

    @classmethod
    def assigned(cls, ticket_id: int, admin_id: int) -> AssignmentResult:
        return cls(ticket_id=ticket_id, outcome=AssignmentOutcome.ASSIGNED, admin_id=admin_id)

    @classmethod
    def no_candidate(cls, ticket_id: int, degraded: bool = False) -> AssignmentResult:
        return cls(
            ticket_id=ticket_id,
            outcome=AssignmentOutcome.NO_CANDIDATE,
            degraded=degraded,
        )

    @property
    def is_assigned(self) -> bool:
        return self.outcome == AssignmentOutcome.ASSIGNED
