class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400
    kind = "domain_error"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400
    kind = "validation_error"


class AuthenticationError(DomainError):
    """Raised when the caller cannot be identified."""

    status_code = 401
    kind = "authentication_error"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    kind = "authorization_error"


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    status_code = 404
    kind = "not_found"


class ConflictError(DomainError):
    """Raised on uniqueness violations (names, slugs, mentor assignment)."""

    status_code = 409
    kind = "conflict"


class ExportError(DomainError):
    """Raised when an exporter did not leave its file on disk."""

    status_code = 500
    kind = "export_failed"


class UnsupportedFormatError(DomainError):
    """Raised for report formats that are recognised but not implemented."""

    status_code = 501
    kind = "unsupported_format"


class DependencyError(DomainError):
    """Raised when an external collaborator (storage, identity, email) fails."""

    status_code = 502
    kind = "dependency_failure"
