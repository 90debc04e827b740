# tests/domain/test_test_suite.py
import pytest

from domain.exceptions import ValidationError
from domain.history import HistoryRecord
from domain.test_suite import TARGET_EXTRACTED, TARGET_RESPONSE, TestSuiteInstance


class TestTestSuiteInstance:
    def test_default_target_is_extracted(self):
        instance = TestSuiteInstance(test_suite_name="smoke", flow_name="login", expect="abc")
        assert instance.target == TARGET_EXTRACTED

    def test_response_target_accepted(self):
        instance = TestSuiteInstance(test_suite_name="smoke", flow_name="login", expect="ok", target=TARGET_RESPONSE)
        assert instance.target == TARGET_RESPONSE

    def test_unknown_target_rejected(self):
        with pytest.raises(ValidationError):
            TestSuiteInstance(test_suite_name="smoke", flow_name="login", expect="ok", target="status")


def test_history_summary_without_timestamp():
    record = HistoryRecord(
        action_name="login",
        url="https://api.test/login",
        body=None,
        headers={},
        response="{}",
        status_code=200,
        duration=0.1234,
    )
    assert record.summary() == "None | login | 200 | 0.123s"
