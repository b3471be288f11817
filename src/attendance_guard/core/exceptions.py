from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when a submission is malformed or outside the admission window."""


class DuplicateError(DomainError):
    """Raised when attendance was already marked for the day (or too recently)."""


class LocationError(DomainError):
    """Raised when an office submission is outside every registered site."""

    def __init__(self, message: str, distances: Sequence = ()):
        super().__init__(message)
        self.distances = list(distances)


class NotFoundError(DomainError):
    """Raised when the record an operation needs does not exist."""


class AlreadyClosedError(DomainError):
    """Raised when clocking out a record that is already closed."""


class AuthorizationError(DomainError):
    """Raised when a caller touches data belonging to another tenant."""
