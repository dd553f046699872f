class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced identity or schedule does not exist."""


class UnknownTagError(DomainError):
    """Raised when a tag is not registered to any student or instructor."""

    def __init__(self, tag: str):
        super().__init__(f"Tag {tag!r} is not registered")
        self.tag = tag


class InactiveIdentityError(DomainError):
    """Raised when a tag belongs to a student or instructor that is not active."""


class NoActiveScheduleError(DomainError):
    """Raised when no schedule window matches a scan, even with grace periods."""


class AmbiguousScheduleError(DomainError):
    """Raised when several windows start at the same time and none can be preferred."""

    def __init__(self, message: str, schedule_ids: tuple[int, ...] = ()):
        super().__init__(message)
        self.schedule_ids = schedule_ids


class PersistenceConflict(DomainError):
    """Raised when a concurrent write already opened the same attendance slot."""
