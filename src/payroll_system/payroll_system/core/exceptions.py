class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced teacher, loan, student or record does not exist."""


class StaleSnapshotError(DomainError):
    """Raised when data changed between reading a snapshot and committing a write.

    Typical cause: two pay runs for the same teacher and month at the same time.
    """
