"""
Error taxonomy shared by the import pipeline and the admin endpoints

app/core/errors.py
"""
from typing import Optional


class RequestError(Exception):
    """Malformed top-level request. Aborts the whole call."""

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(RequestError):
    status_code = 404


class ValidationError(Exception):
    """A single record failed normalization."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.index = index


class PersistenceError(Exception):
    """The backing store rejected a write."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def validation_message(error) -> str:
    """First problem of a pydantic ValidationError as 'field: message'"""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid record")
    return f"{location}: {message}" if location else message
