# app/core/errors.py
"""
Domain error types.

Every error carries a stable ``code`` and the HTTP status the API answers
with, so route handlers can raise them directly and a single exception
handler in app.main turns them into JSON responses.
"""


class PayrollError(Exception):
    """Base class for errors surfaced to API callers."""

    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": None}


class ValidationError(PayrollError):
    """
    Malformed or out-of-range input.

    Carries every violation found, never just the first one.

    Args:
        violations: List of (field, message) pairs
        message: Summary message for the whole failure
    """

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, violations: list[tuple[str, str]], message: str = "Invalid input data"):
        super().__init__(message)
        self.violations = list(violations)

    def __str__(self) -> str:
        joined = "; ".join(f"{field}: {msg}" for field, msg in self.violations)
        return f"{self.message} ({joined})" if joined else self.message

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "details": [{"field": field, "message": msg} for field, msg in self.violations],
        }


class NotFoundError(PayrollError):
    """Referenced employee or payroll period does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class DuplicateError(PayrollError):
    """An employee with the same id is already registered."""

    code = "DUPLICATE"
    status_code = 409


class AlreadyClosedError(PayrollError):
    """Mutation attempted on an approved payroll batch."""

    code = "ALREADY_CLOSED"
    status_code = 400


class StorageError(PayrollError):
    """General error type for problems loading or writing data files."""

    code = "STORAGE_ERROR"
    status_code = 500
