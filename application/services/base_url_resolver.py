# application/services/base_url_resolver.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BaseUrlResolver:
    base_url: Optional[str] = None

    def resolve_url(self, url: str) -> str:
        if not self.base_url or url.startswith("http://") or url.startswith("https://"):
            return url
        return self.base_url.rstrip("/") + "/" + url.lstrip("/")
