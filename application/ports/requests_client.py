# application/ports/requests_client.py
from __future__ import annotations

import time
from typing import Dict, Optional

import requests

from application.ports.http_client import (
    BODY_FORM,
    BODY_MULTIPART,
    EncodedBody,
    FetchResult,
    HttpClientPort,
)
from domain.exceptions import TransportError


class RequestsHttpClient(HttpClientPort):
    def __init__(self, base_headers: Optional[Dict[str, str]] = None, timeout_sec: float = 20):
        self._session = requests.Session()
        self._base_headers = base_headers or {}
        self._timeout = timeout_sec

    def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        body: Optional[EncodedBody] = None,
    ) -> FetchResult:
        merged = dict(self._base_headers)
        if headers:
            merged.update(headers)

        kwargs = self._body_kwargs(body or EncodedBody())

        start = time.perf_counter()
        try:
            resp = self._session.request(
                method=method.upper(),
                url=url,
                headers=merged,
                params=params or None,
                timeout=self._timeout,
                **kwargs,
            )
            # .text reads the whole body, so the duration covers it
            text = resp.text
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}", cause=e) from e
        duration = time.perf_counter() - start

        return FetchResult(response=text, status=resp.status_code, duration=duration)

    def _body_kwargs(self, body: EncodedBody) -> Dict[str, object]:
        if body.kind == BODY_FORM:
            return {"data": list(body.fields)}
        if body.kind == BODY_MULTIPART:
            files = [(name, (None, value)) for name, value in body.fields]
            files += [(f.name, (f.filename, f.content)) for f in body.files]
            return {"files": files}
        if body.raw is None:
            return {}
        return {"data": body.raw.encode("utf-8")}
