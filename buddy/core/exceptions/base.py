from typing import Any


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: Any = None, message: str | None = None):
        if message is None:
            message = f"{resource} not found"
            if identifier:
                message = f"{resource} with id={identifier} not found"
        super().__init__(message=message, status_code=404)


class DuplicateError(AppException):
    """Duplicate resource."""

    def __init__(self, resource: str, field: str, value: Any):
        message = f"{resource} with {field}={value} already exists"
        super().__init__(message=message, status_code=409, details={"field": field, "value": value})


class DuplicateTermError(DuplicateError):
    """A fee term already exists for the year and semester."""

    def __init__(self, year: int, semester: int):
        super().__init__("Fee term", "year/semester", f"{year}-{semester}")
        self.year = year
        self.semester = semester


class TermNotFoundError(NotFoundError):
    """No fee term for the year and semester."""

    def __init__(self, year: int, semester: int):
        super().__init__("Fee term", message=f"Fee term {year}-{semester} not found")
        self.year = year
        self.semester = semester


class ConnectionFailureError(AppException):
    """Ledger store unreachable or the operation ran past its deadline."""

    def __init__(self, message: str = "Ledger store is unavailable"):
        super().__init__(message=message, status_code=503)


class PartialFailureError(AppException):
    """A multi-step operation applied some of its steps and then failed."""

    def __init__(self, operation: str, completed: list[Any], remaining: list[Any]):
        message = (
            f"{operation} stopped after {len(completed)} of "
            f"{len(completed) + len(remaining)} steps"
        )
        super().__init__(
            message=message,
            status_code=500,
            details={"completed": list(completed), "remaining": list(remaining)},
        )
        self.completed = list(completed)
        self.remaining = list(remaining)
