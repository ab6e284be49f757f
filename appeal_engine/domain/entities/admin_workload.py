"""AdminWorkload entity — live load counters of one administrator."""

from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass
class AdminWorkload:
    admin_id: int
    active_appeals_count: int = 0
    total_appeals_count: int = 0
    is_available: bool = True
    last_activity_at: datetime | None = None
    created_at: datetime | None = None

    def is_stale(self, now: datetime, threshold: timedelta) -> bool:
        """True when the admin has not taken or resolved anything within *threshold*.

        An admin who was never active is stale only once the record itself
        is older than the threshold.
        """
        reference = self.last_activity_at or self.created_at
        if reference is None:
            return False
        return now - reference > threshold
