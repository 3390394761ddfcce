class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class MissingFieldError(ValidationError):
    """Raised when a required field (e.g. an import row's name/class) is absent."""


class DuplicatePlacement(ValidationError):
    """Raised when one student is given two quiz placements on the same date."""


class NotFoundError(DomainError):
    """Raised when operating on an unknown student or date."""


class ConflictError(DomainError):
    """Raised when a transactional write lost a race; the caller may retry."""


class StorageError(DomainError):
    """Raised when the persistence substrate is unavailable or rejects a write."""
