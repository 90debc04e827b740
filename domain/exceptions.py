# domain/exceptions.py
from __future__ import annotations

from typing import Iterable, Optional


class ReqflowError(Exception):
    pass


class ValidationError(ReqflowError):
    pass


class ConfigurationError(ReqflowError):
    pass


class UnresolvedVariableError(ConfigurationError):
    def __init__(self, names: Iterable[str], where: str = "") -> None:
        self.names = sorted(set(names))
        location = f" in {where}" if where else ""
        super().__init__(f"Unresolved variables{location}: {', '.join(self.names)}")


class AttachmentError(ConfigurationError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot read attachment {path}: {reason}")


class TransportError(ReqflowError):
    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


class ApplicationError(ReqflowError):
    """Response with status >= 400. History is written for it; extraction is not."""

    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"Status code: {status}")


class SerializationError(ReqflowError):
    pass


class StorageError(ReqflowError):
    pass


class NotFoundError(StorageError):
    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class ContextConflictError(StorageError):
    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Context was modified concurrently: expected version {expected}, found {actual}")
