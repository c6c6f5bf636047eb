"""
Domain errors raised by the crud layer.

Routers do not translate these one by one; main.py registers a single
handler that maps each class to its ``status_code``.
"""


class LinkingError(Exception):
    """Base exception for all hierarchy and linking failures."""

    status_code = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(LinkingError):
    """A referenced journal, partner, good, tax code or link does not exist."""

    status_code = 404


class ConflictError(LinkingError):
    """A unique constraint rejected a create (includes 'already exists')."""

    status_code = 409


class InvariantViolationError(LinkingError):
    """
    The stored data breaks a structural invariant.

    Raised when leaf-pruning deletion stops making progress, when a closure
    query hits the depth bound, or when a two-way link cannot be found after a
    lost creation race. Never recovered automatically.
    """

    status_code = 500


class ValidationError(LinkingError):
    """Malformed identifiers or a disallowed reference."""

    status_code = 422
