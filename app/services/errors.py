"""Domain errors raised by the service layer and mapped to HTTP responses."""


class HydrationError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class UnauthorizedError(HydrationError):
    """Identity does not own or target the resource."""

    status_code = 403


class NotAuthenticatedError(UnauthorizedError):
    """No authenticated identity."""

    status_code = 401


class NotFoundError(HydrationError):
    """Friend code, friendship, intake or profile absent."""

    status_code = 404


class InvalidOperationError(HydrationError):
    """Self-friending or malformed input."""

    status_code = 400


class ConflictError(HydrationError):
    """Duplicate request, already friends, or already processed."""

    status_code = 409


class ResourceExhaustedError(HydrationError):
    """Bounded internal retries ran out."""

    status_code = 503
