from __future__ import annotations

# pointhub/errors.py
from enum import Enum


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    STORAGE_IO = "STORAGE_IO"
    ALREADY_EXISTS = "ALREADY_EXISTS"


class StoreError(Exception):
    """所有存储层错误的基类；str(e) 即对外的错误信息。"""

    kind: ErrorKind = ErrorKind.STORAGE_IO

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFoundError(StoreError):
    kind = ErrorKind.NOT_FOUND


class InvalidArgumentError(StoreError):
    kind = ErrorKind.INVALID_ARGUMENT


class StorageError(StoreError):
    kind = ErrorKind.STORAGE_IO


class AlreadyExistsError(StoreError):
    kind = ErrorKind.ALREADY_EXISTS


HTTP_STATUS = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.STORAGE_IO: 500,
    ErrorKind.ALREADY_EXISTS: 409,
}
