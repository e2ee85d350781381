"""Storage error taxonomy and translation of provider failures.

Every failure leaving the library is a :class:`StorageError`. Provider
exceptions (Azure SDK errors, httpx errors, or anything a custom backend
raises) are inspected for an HTTP status and mapped onto a small set of
codes.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any


class StorageErrorCode(str, Enum):
    """Error codes exposed to callers."""

    BAD_ARGUMENT = "BadArgument"
    FORBIDDEN = "Forbidden"
    INTERNAL = "Internal"


class StorageError(Exception):
    """Error raised by every storage operation."""

    codes = StorageErrorCode

    def __init__(self, message: str, code: StorageErrorCode):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    @classmethod
    def bad_argument(cls, message: str) -> "StorageError":
        return cls(message, StorageErrorCode.BAD_ARGUMENT)


class BackendError(Exception):
    """Provider-neutral failure for backends that don't ship their own errors."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: int | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


CONTAINER_ALREADY_EXISTS = "ContainerAlreadyExists"


def _int_attr(obj: Any, *names: str) -> int | None:
    for name in names:
        value = getattr(obj, name, None)
        # bool is an int subclass but never a status
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def status_of(error: BaseException) -> int | None:
    """Find the HTTP status attached to a provider error, if any."""
    status = _int_attr(error, "status_code", "status")
    if status is not None:
        return status
    response = getattr(error, "response", None)
    if response is not None:
        return _int_attr(response, "status_code", "status")
    return None


def is_not_found(error: BaseException) -> bool:
    return status_of(error) == 404


def is_already_exists(error: BaseException) -> bool:
    error_code = getattr(error, "error_code", None)
    if error_code:
        return error_code == CONTAINER_ALREADY_EXISTS
    return status_of(error) == 409


def translate_backend_error(error: BaseException) -> StorageError:
    """Map a provider failure to a :class:`StorageError`.

    Args:
        error: Exception raised by the provider or transport

    Returns:
        StorageError with ``Forbidden`` for 403 and ``Internal`` otherwise
    """
    if isinstance(error, StorageError):
        return error

    status = status_of(error)
    if status == 403:
        return StorageError(
            "access to storage was denied by the provider (status 403)",
            StorageErrorCode.FORBIDDEN,
        )
    if status is not None:
        return StorageError(
            f"unexpected error from storage provider, status code: {status}",
            StorageErrorCode.INTERNAL,
        )
    return StorageError(
        "unknown error from storage provider", StorageErrorCode.INTERNAL
    )


@contextmanager
def wrap_provider_errors() -> Iterator[None]:
    """Re-raise any provider exception as a translated StorageError."""
    try:
        yield
    except StorageError:
        raise
    except Exception as error:
        raise translate_backend_error(error) from error
