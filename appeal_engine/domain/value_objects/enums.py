"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class AppealCategory(str, Enum):
    SCHOLARSHIP = "scholarship"
    DORMITORY = "dormitory"
    EVENTS = "events"
    PROPOSAL = "proposal"
    COMPLAINT = "complaint"
    OTHER = "other"


class ResolutionOutcome(str, Enum):
    SUCCESSFUL = "successful"
    UNSUCCESSFUL = "unsuccessful"

    @property
    def is_successful(self) -> bool:
        return self is ResolutionOutcome.SUCCESSFUL


class AssignmentOutcome(str, Enum):
    ASSIGNED = "assigned"
    NO_CANDIDATE = "no_candidate"
