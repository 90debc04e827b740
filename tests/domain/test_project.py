# tests/domain/test_project.py
import pytest

from domain.exceptions import ConfigurationError, ValidationError
from domain.project import ALLOWED_VERBS, Action, Project, header_value


class TestAction:
    @pytest.mark.parametrize("verb", ALLOWED_VERBS)
    def test_accepts_supported_verbs(self, verb):
        action = Action(name="a", project_name="p", verb=verb, url="/x")
        assert action.verb == verb

    @pytest.mark.parametrize("verb", ["PATCH", "get", "HEAD", ""])
    def test_rejects_other_verbs(self, verb):
        with pytest.raises(ConfigurationError):
            Action(name="a", project_name="p", verb=verb, url="/x")

    def test_empty_name_rejected(self):
        with pytest.raises(ValidationError):
            Action(name=" ", project_name="p", verb="GET", url="/x")

    def test_with_examples_returns_new_action(self):
        action = Action(name="a", project_name="p", verb="POST", url="/x")
        updated = action.with_examples('{"q": 1}', '{"ok": true}')
        assert updated.body_example == '{"q": 1}'
        assert updated.response_example == '{"ok": true}'
        assert action.body_example is None


class TestProject:
    def test_base_url_per_env(self):
        project = Project(name="shop", test_url="https://t", prod_url="https://p")
        assert project.base_url() == "https://t"
        assert project.base_url("prod") == "https://p"

    def test_unknown_env_raises(self):
        with pytest.raises(ConfigurationError):
            Project(name="shop").base_url("staging")

    def test_with_conf_replaces_conf(self):
        project = Project(name="shop", conf={"a": "1"})
        assert project.with_conf({"b": "2"}).conf == {"b": "2"}
        assert project.conf == {"a": "1"}


def test_header_value_lookup():
    headers = {"Content-Type": "application/json"}
    assert header_value(headers, "content-type") == "application/json"
    assert header_value(headers, "Accept") is None
