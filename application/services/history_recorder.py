# application/services/history_recorder.py
from __future__ import annotations

from typing import Dict, List, Optional

from application.ports.http_client import FetchResult
from application.ports.storage import StoragePort
from domain.exceptions import ValidationError
from domain.history import HistoryRecord

DEFAULT_PAGE_SIZE = 20


class HistoryRecorder:
    """Append-only: one record per request that produced a response."""

    def __init__(self, storage: StoragePort):
        self._storage = storage

    def record(
        self,
        action_name: str,
        url: str,
        headers: Dict[str, str],
        body: Optional[str],
        fetch_result: FetchResult,
    ) -> HistoryRecord:
        return self._storage.insert_history(
            HistoryRecord(
                action_name=action_name,
                url=url,
                body=body,
                headers=dict(headers),
                response=fetch_result.response,
                status_code=fetch_result.status,
                duration=fetch_result.duration,
            )
        )

    def list(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> List[HistoryRecord]:
        if page < 1:
            raise ValidationError(f"page must be >= 1, got {page}")
        if page_size < 1:
            raise ValidationError(f"page_size must be >= 1, got {page_size}")
        return self._storage.list_history(offset=(page - 1) * page_size, limit=page_size)
