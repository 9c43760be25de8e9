class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidAmountError(ValidationError):
    """Raised when a monetary input is not a positive amount."""


class NotFoundError(DomainError):
    """Raised when a student, staff member, tenant or record id is unknown."""


class NoFeeRecordError(NotFoundError):
    """Raised when a student has no fee record to adjust or pay against."""


class InvalidStateError(DomainError):
    """Raised when an operation targets a record in a state that forbids it."""


class InconsistentLedgerError(DomainError):
    """Raised when a stored fee total drifts from its adjustment history."""
