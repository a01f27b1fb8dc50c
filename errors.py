"""Errors raised by the directory engines and mapped to HTTP responses in main."""
from typing import Dict, List, Optional


class DirectoryError(Exception):
    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DirectoryError):
    status_code = 422
    default_message = "The given data was invalid"

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)


class NotFound(DirectoryError):
    status_code = 404
    default_message = "Resource not found"


class Unauthorized(DirectoryError):
    status_code = 401
    default_message = "You must be logged in to do that"


class Forbidden(DirectoryError):
    status_code = 403
    default_message = "You are not allowed to do that"
