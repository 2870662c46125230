class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when required input is missing or malformed."""


class NotFoundError(DomainError):
    """Raised when a class, student, attendance or report id does not resolve."""


class DuplicateError(DomainError):
    """Raised when a unique constraint would be violated."""


class ConcurrentUpdateError(DomainError):
    """Raised when a document changed between read and write."""


class AttendanceLockedError(DomainError):
    """Raised when a locked date's records would be overwritten."""


class NoDataError(DomainError):
    """Raised when a report is requested over a range with no attendance."""
