"""
Portal-wide exception hierarchy.

Services raise these; blueprints map them to HTTP status codes, so callers
never need to import exception classes from service modules.

Usage:
    from portal.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Specification", resource_id=spec_id)
    raise ValidationError("Title and content are required")
"""


class NotFoundError(Exception):
    """Raised when a requested record does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Contact", "Update").
        resource_id: The id that was looked up. Included in logs, not in HTTP response.
        message: Overrides the client-facing "<resource> not found" text.
    """

    def __init__(self, resource: str, resource_id: str | None = None, message: str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        self._public_message = message
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)

    @property
    def public_message(self) -> str:
        """Message safe to return to clients (no id echo)."""
        return self._public_message or f"{self.resource} not found"


class ValidationError(Exception):
    """Raised when input is missing or malformed. Maps to HTTP 400.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class BackendError(Exception):
    """Raised when the hosted backend (auth, storage) rejects or fails a call.

    The message is for logs only; routes answer with a generic 500.

    Args:
        operation: What was attempted (e.g. "storage.upload").
        status_code: HTTP status from the backend, None on network failure.
        detail: Backend error text.
    """

    def __init__(self, operation: str, status_code: int | None = None, detail: str | None = None) -> None:
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        msg = f"{operation} failed"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
