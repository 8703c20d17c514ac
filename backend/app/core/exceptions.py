# backend/app/core/exceptions.py
"""Error taxonomy for the analysis pipeline and the operations built on it."""

from fastapi import status


class NodeCheckError(Exception):
    """Base class; status_code is what the API layer reports."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthenticated(NodeCheckError):
    status_code = status.HTTP_401_UNAUTHORIZED


class BadRequest(NodeCheckError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(NodeCheckError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidManifest(NodeCheckError):
    """Manifest text could not be parsed."""


class ProviderError(NodeCheckError):
    """A hosting provider call (list, read, commit) failed."""


class UnsupportedProvider(NodeCheckError):
    status_code = status.HTTP_400_BAD_REQUEST
