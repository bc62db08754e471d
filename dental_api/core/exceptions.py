"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class BadRequestException(AppException):
    """Bad request exception."""

    def __init__(self, message: str = "Bad request"):
        """Initialize with 400 status code."""
        super().__init__(message, status_code=400)


class SchedulingConflictException(BadRequestException):
    """Requested interval overlaps an active appointment.

    ``party`` is either ``"patient"`` or ``"practitioner"``.
    """

    def __init__(self, party: str, message: str | None = None):
        """Initialize with the conflicting party."""
        self.party = party
        if message is None:
            if party == "patient":
                message = "The patient already has another appointment at that time"
            else:
                message = "The practitioner already has another appointment at that time"
        super().__init__(message)


class InvalidTransitionException(BadRequestException):
    """Appointment status change not allowed by the lifecycle."""

    def __init__(self, current: str, target: str):
        """Initialize with the source and target statuses."""
        self.current = current
        self.target = target
        super().__init__(f"Cannot change appointment status from '{current}' to '{target}'")
