# application/outcome.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from application.ports.http_client import FetchResult
from domain.exceptions import (
    ApplicationError,
    ConfigurationError,
    SerializationError,
    StorageError,
    TransportError,
)

KIND_APPLICATION = "application"
KIND_TRANSPORT = "transport"
KIND_CONFIGURATION = "configuration"
KIND_SERIALIZATION = "serialization"
KIND_STORAGE = "storage"
KIND_UNKNOWN = "unknown"


def error_kind(exc: BaseException) -> str:
    if isinstance(exc, ApplicationError):
        return KIND_APPLICATION
    if isinstance(exc, TransportError):
        return KIND_TRANSPORT
    if isinstance(exc, ConfigurationError):
        return KIND_CONFIGURATION
    if isinstance(exc, SerializationError):
        return KIND_SERIALIZATION
    if isinstance(exc, StorageError):
        return KIND_STORAGE
    return KIND_UNKNOWN


@dataclass(frozen=True)
class StepOutcome:
    """
    Result of one action invocation.

    `fetch_result` is set whenever a response was received, including
    responses with status >= 400.
    """
    ok: bool
    action_name: str
    url: Optional[str] = None
    fetch_result: Optional[FetchResult] = None
    extracted: Dict[str, Optional[str]] = field(default_factory=dict)
    bound: Dict[str, str] = field(default_factory=dict)
    history_id: Optional[int] = None
    history_error: Optional[str] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def status(self) -> Optional[int]:
        return self.fetch_result.status if self.fetch_result else None

    @property
    def response(self) -> Optional[str]:
        return self.fetch_result.response if self.fetch_result else None

    @classmethod
    def from_error(cls, action_name: str, exc: BaseException) -> "StepOutcome":
        return cls(ok=False, action_name=action_name, error_kind=error_kind(exc), error_message=str(exc))
