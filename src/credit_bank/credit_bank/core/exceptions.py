class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced session, record or user does not exist."""


class ExpiredError(DomainError):
    """Raised when an attendance session is no longer scannable."""


class ClassMismatchError(DomainError):
    """Raised when a session token is redeemed for a different class."""


class DuplicateError(DomainError):
    """Raised when a uniqueness rule would be violated."""
