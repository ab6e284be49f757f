"""Domain errors.

Only programmer errors and store failures are exceptions. "Nobody could take
the appeal" is a normal AssignmentResult, never raised.
"""


class AssignmentEngineError(Exception):
    """Base assignment engine error."""


class UnknownAdminError(AssignmentEngineError, LookupError):
    """Raised when an admin id has no workload record."""

    def __init__(self, admin_id: int):
        super().__init__(f"Unknown admin id: {admin_id}")
        self.admin_id = admin_id


class InvalidCategoryError(AssignmentEngineError, ValueError):
    """Raised when a caller passes something that is not an appeal category."""

    def __init__(self, category: object):
        super().__init__(f"Invalid appeal category: {category!r}")
        self.category = category


class TransientStoreError(AssignmentEngineError):
    """Raised by store adapters for retryable failures (timeouts, dropped connections)."""
