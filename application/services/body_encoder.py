# application/services/body_encoder.py
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from application.ports.http_client import (
    BODY_FORM,
    BODY_MULTIPART,
    BODY_RAW,
    EncodedBody,
    FilePart,
)
from domain.exceptions import AttachmentError, SerializationError
from domain.project import APPLICATION_JSON, CONTENT_TYPE, FORM_DATA, URL_ENCODED, header_value
from domain.string_map import ensure_string_map

FILE_PREFIX = "@"


@dataclass(frozen=True)
class EncodedRequest:
    headers: Dict[str, str]
    body: EncodedBody
    content_type: str


def media_type(headers: Dict[str, str]) -> str:
    value = header_value(headers, CONTENT_TYPE)
    if not value:
        return APPLICATION_JSON
    return value.split(";", 1)[0].strip().lower()


class BodyEncoder:
    """
    Picks the payload encoding from the Content-Type header.

    - application/x-www-form-urlencoded: JSON object body -> form pairs
    - multipart/form-data: JSON object body -> text parts, "@path" values -> file parts
    - anything else: body sent verbatim
    """

    def encode(self, headers: Dict[str, str], body: Optional[str]) -> EncodedRequest:
        ctype = media_type(headers)

        if ctype == URL_ENCODED:
            fields = self._fields(body, ctype)
            return EncodedRequest(headers=dict(headers), body=EncodedBody(kind=BODY_FORM, fields=fields), content_type=ctype)

        if ctype == FORM_DATA:
            texts: List[Tuple[str, str]] = []
            files: List[FilePart] = []
            for name, value in self._fields(body, ctype):
                if value.startswith(FILE_PREFIX):
                    files.append(self._read_file(name, value[len(FILE_PREFIX):]))
                else:
                    texts.append((name, value))
            # the client must generate the header itself to add the boundary
            stripped = {k: v for k, v in headers.items() if k.lower() != CONTENT_TYPE.lower()}
            return EncodedRequest(
                headers=stripped,
                body=EncodedBody(kind=BODY_MULTIPART, fields=texts, files=files),
                content_type=ctype,
            )

        return EncodedRequest(headers=dict(headers), body=EncodedBody(kind=BODY_RAW, raw=body), content_type=ctype)

    def _fields(self, body: Optional[str], ctype: str) -> List[Tuple[str, str]]:
        if body is None:
            raise SerializationError(f"A body is required for {ctype}")
        try:
            data = json.loads(body)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Body for {ctype} must be a JSON object: {e}") from e
        return list(ensure_string_map(data, f"{ctype} body").items())

    def _read_file(self, name: str, path: str) -> FilePart:
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            raise AttachmentError(path, e.strerror or str(e)) from e
        return FilePart(name=name, filename=Path(path).name, content=content)
