"""
Application errors raised by the services.

Each error carries the HTTP status the API answers with, so services stay
free of FastAPI imports and the handler in main.py needs no lookup table.
"""
from fastapi import status


class WordcraftException(Exception):
    """Base class. Anything not covered by a subclass is a server error."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ValidationError(WordcraftException):
    """Input that is well-formed but not acceptable: bad codes, empty names, closed sessions."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(WordcraftException):
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(WordcraftException):
    """The caller is known but may not do this, e.g. a non-admin on an admin route."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(WordcraftException):
    """Missing rows, and rows owned by another user."""
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(WordcraftException):
    """Duplicates: a word already in a dictionary or list, a taken name or email."""
    status_code = status.HTTP_409_CONFLICT


class ExternalServiceError(WordcraftException):
    """A dictionary, speech, translation or image provider failed or is not configured."""
    status_code = status.HTTP_502_BAD_GATEWAY
