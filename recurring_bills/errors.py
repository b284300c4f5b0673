"""Exception types shared by the recurring bills modules."""

from typing import Optional


class BillsError(Exception):
    """Base class for recurring bills errors."""


class ConfigError(BillsError):
    """Raised when the environment holds an unusable setting."""


class ValidationError(BillsError):
    """Raised when user input is rejected before any network call.

    Attributes:
        field: Name of the offending form field, if one can be singled out.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ApiError(BillsError):
    """Raised when a call to the bills API fails.

    Attributes:
        status_code: HTTP status returned by the API, or None when the
            request never got a response (connection error, timeout).
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthorizationError(ApiError):
    """Raised when the bearer credential is missing or rejected."""


class BillNotFoundError(ApiError):
    """Raised when a bill id is unknown locally or to the API."""

    def __init__(self, bill_id: str, status_code: Optional[int] = None):
        super().__init__(f"Recurring bill not found: {bill_id}", status_code)
        self.bill_id = bill_id
