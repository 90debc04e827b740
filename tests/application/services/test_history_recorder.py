# tests/application/services/test_history_recorder.py
import pytest

from application.ports.http_client import FetchResult
from application.services.history_recorder import HistoryRecorder
from domain.exceptions import ValidationError
from infrastructure.storage.in_memory_storage import InMemoryStorage


def _record(recorder: HistoryRecorder, name: str, status: int = 200):
    return recorder.record(
        action_name=name,
        url=f"https://api.test/{name}",
        headers={"Accept": "application/json"},
        body=None,
        fetch_result=FetchResult(response='{"ok": true}', status=status, duration=0.2),
    )


class TestHistoryRecorder:
    def test_record_copies_request_and_response(self):
        recorder = HistoryRecorder(InMemoryStorage())
        record = _record(recorder, "login", status=401)
        assert record.id == 1
        assert record.timestamp is not None
        assert record.status_code == 401
        assert record.response == '{"ok": true}'
        assert record.duration == 0.2
        assert record.url == "https://api.test/login"

    def test_list_is_newest_first_and_paged(self):
        recorder = HistoryRecorder(InMemoryStorage())
        for i in range(5):
            _record(recorder, f"a{i}")

        page1 = recorder.list(page=1, page_size=2)
        page3 = recorder.list(page=3, page_size=2)

        assert [r.action_name for r in page1] == ["a4", "a3"]
        assert [r.action_name for r in page3] == ["a0"]
        assert recorder.list(page=4, page_size=2) == []

    @pytest.mark.parametrize("page,page_size", [(0, 20), (1, 0)])
    def test_invalid_paging_rejected(self, page, page_size):
        with pytest.raises(ValidationError):
            HistoryRecorder(InMemoryStorage()).list(page, page_size)
