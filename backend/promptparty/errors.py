from typing import Any

from flask import jsonify


class PromptPartyError(Exception):
    """Base class for errors surfaced to the caller of a game command."""

    status_code = 500
    code = 'internal_error'

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {
            'code': self.code,
            'message': self.message,
            'details': self.details if self.details is not None else {},
        }
        # Older clients read "error"
        payload['error'] = self.message
        return payload


class NotFound(PromptPartyError):
    status_code = 404
    code = 'not_found'


class InvalidInput(PromptPartyError):
    status_code = 400
    code = 'invalid_input'


class Conflict(PromptPartyError):
    status_code = 409
    code = 'conflict'


class InternalError(PromptPartyError):
    status_code = 500
    code = 'internal_error'


def error_response(exc: PromptPartyError):
    return jsonify(exc.to_dict()), exc.status_code


def require(value, field: str) -> str:
    """Return value if it is a non-empty string, else raise InvalidInput."""
    if not isinstance(value, str) or not value:
        raise InvalidInput(f'{field} must be non-empty', {'field': field})
    return value
