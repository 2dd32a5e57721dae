"""
Error taxonomy for the job tracker core.

Every error carries the HTTP status it maps to at the API boundary and a short
label used as the `error` field of the JSON response.
"""


class JobTrackerError(Exception):
    """Base error raised by the job tracker services."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, component: str = "jobtracker"):
        super().__init__(message)
        self.message = message
        self.component = component

    def __str__(self) -> str:
        return f"[{self.component}] {self.message}"


class ValidationError(JobTrackerError):
    """Malformed or incomplete application payload."""

    status_code = 400
    error = "Invalid application"


class ConflictError(JobTrackerError):
    """Candidate is an identity-duplicate of a stored application."""

    status_code = 409
    error = "Duplicate application"


class NotFoundError(JobTrackerError):
    """No application with the requested id."""

    status_code = 404
    error = "Application not found"


class StoreUnavailableError(JobTrackerError):
    """The MongoDB store cannot be reached."""

    status_code = 503
    error = "Store unavailable"
