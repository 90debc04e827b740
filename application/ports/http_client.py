# application/ports/http_client.py
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

BODY_RAW = "raw"
BODY_FORM = "form"
BODY_MULTIPART = "multipart"


@dataclass(frozen=True)
class FilePart:
    name: str
    filename: str
    content: bytes


@dataclass(frozen=True)
class EncodedBody:
    """
    Request payload after content-type selection.

    kind=raw       -> `raw` is sent verbatim (or nothing when None)
    kind=form      -> `fields` are sent url-encoded
    kind=multipart -> `fields` are text parts, `files` are file parts
    """
    kind: str = BODY_RAW
    raw: Optional[str] = None
    fields: List[Tuple[str, str]] = field(default_factory=list)
    files: List[FilePart] = field(default_factory=list)


@dataclass(frozen=True)
class FetchResult:
    response: str
    status: int
    duration: float  # seconds


class HttpClientPort(ABC):
    @abstractmethod
    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        body: Optional[EncodedBody] = None,
    ) -> FetchResult:
        """Raise TransportError when no response could be obtained."""
        ...
