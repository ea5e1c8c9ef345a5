"""
Domain errors. Every failure a caller has to react to differently has its own
class with a stable ``code``; the API layer renders them, services only raise.
"""
from typing import Optional


class CoinTraceError(Exception):
    code = "error"
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "detail": self.message}


class ValidationError(CoinTraceError):
    """Missing or malformed input the user can correct."""
    code = "validation_error"
    status_code = 400


class ParseError(ValidationError):
    """An amount expression token that is not a finite positive number."""
    code = "parse_error"

    def __init__(self, token: Optional[str], message: Optional[str] = None):
        if message is None:
            message = f"Invalid amount: {token}"
        super().__init__(message)
        self.token = token

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["token"] = self.token
        return data


class NotFound(CoinTraceError):
    code = "not_found"
    status_code = 404


class NotAuthorized(CoinTraceError):
    code = "not_authorized"
    status_code = 403


class AlreadyExists(CoinTraceError):
    code = "already_exists"
    status_code = 409


class SelfReferenceError(CoinTraceError):
    """The shop owner was targeted as a staff member."""
    code = "self_reference"
    status_code = 400
