"""
Error taxonomy for the redirection service.

Every capability (storage, key generation) raises only its own closed set of
exceptions, and every exception carries exactly one client-visible outcome:
an HTTP status code plus a message. Handlers never inspect raw backend
errors; they let these exceptions propagate and the application-level
exception handler renders them.

Visit dispatch failures are the exception to the rule: ``DispatchError`` is
never shown to clients, so it is not a ``ServiceError``.
"""

from typing import Tuple

from fastapi import status


class ServiceError(Exception):
    """Base class for every error that maps to a client-visible response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, detail: str = None):
        super().__init__(message)
        self.detail = message if detail is None else detail

    def to_response(self) -> Tuple[int, str]:
        """Return the (status code, message) pair sent to the client."""
        return self.status_code, self.detail


class BadRequestError(ServiceError):
    """The request body could not be read or decoded."""

    status_code = status.HTTP_400_BAD_REQUEST


# Storage ---------------------------------------------------------------

class StorageError(ServiceError):
    """Base class for storage capability errors."""


class KeyNotFoundError(StorageError):
    """No mapping exists for the key. Authoritative, not a cache miss."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Key not found: {key}", detail=key)


class StorageUnimplementedError(StorageError):
    """The backend does not support the requested feature."""

    status_code = status.HTTP_501_NOT_IMPLEMENTED

    def __init__(self):
        super().__init__("Unimplemented error")


class StorageUnavailableError(StorageError):
    """The backend could not be reached (connection, timeout, pool exhausted)."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str):
        super().__init__(f"Connection with storage failed: {message}", detail=message)


class StorageUnknownError(StorageError):
    """Any other condition reported by the storage backend."""

    def __init__(self, message: str):
        super().__init__(f"Unknown storage error: {message}", detail=message)


# Key generation --------------------------------------------------------

class KeyGenerationError(ServiceError):
    """Base class for key generation capability errors."""


class KeyGeneratorConnectionError(KeyGenerationError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self):
        super().__init__("Connection error")


class GeneratorNotFoundError(KeyGenerationError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self):
        super().__init__("Generator not found")


class KeyGeneratorPermissionError(KeyGenerationError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self):
        super().__init__("Permission denied")


class KeyGeneratorBadRequestError(KeyGenerationError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self):
        super().__init__("Bad request generating key")


class KeyGeneratorUnknownError(KeyGenerationError):
    def __init__(self, message: str):
        super().__init__(f"Generator unknown error: {message}", detail=message)


# Event dispatch --------------------------------------------------------

class DispatchError(Exception):
    """A visit event could not be handed to the transport."""
