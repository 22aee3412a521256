class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InputError(ValidationError):
    """Raised when a punch pair cannot be processed (e.g. missing in-time)."""


class NotFoundError(DomainError):
    """Raised when a referenced entity (shift, record, candidate set) does not exist."""


class CalculationError(DomainError):
    """Raised when shift reference data is malformed (e.g. bad HH:MM)."""


class LockTimeoutError(DomainError):
    """Raised when the per-(employee, date) lease could not be acquired in time."""
