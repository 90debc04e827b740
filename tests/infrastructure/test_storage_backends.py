# tests/infrastructure/test_storage_backends.py
"""Behaviour shared by every StoragePort implementation."""
from datetime import datetime

import pytest

from domain.context import Context
from domain.exceptions import NotFoundError, ValidationError
from domain.flow import Flow, RunActionArgs
from domain.history import HistoryRecord
from domain.project import Action, Project
from domain.test_suite import TARGET_RESPONSE, TestSuite, TestSuiteInstance
from infrastructure.storage.in_memory_storage import InMemoryStorage
from infrastructure.storage.sqlalchemy_storage import SqlAlchemyStorage


@pytest.fixture(params=["memory", "sqlite"])
def storage(request, tmp_path):
    if request.param == "memory":
        return InMemoryStorage()
    return SqlAlchemyStorage.from_url(f"sqlite:///{tmp_path / 'reqflow.db'}")


def _history(name: str, status: int = 200) -> HistoryRecord:
    return HistoryRecord(
        action_name=name,
        url=f"https://api.test/{name}",
        body='{"a": "1"}',
        headers={"Accept": "application/json"},
        response="ok",
        status_code=status,
        duration=0.25,
    )


class TestProjectsAndActions:
    def test_project_round_trip(self, storage):
        project = Project(name="shop", test_url="https://t", prod_url="https://p", conf={"tenant": "acme"})
        storage.put_project(project)
        assert storage.get_project("shop") == project

    def test_missing_project(self, storage):
        with pytest.raises(NotFoundError):
            storage.get_project("nope")

    def test_upsert_action_replaces(self, storage):
        storage.put_project(Project(name="shop"))
        action = Action(name="login", project_name="shop", verb="POST", url="/login", headers={"X-A": "1"})
        storage.upsert_action(action)
        storage.upsert_action(action.with_examples("{}", '{"token": "t"}'))

        stored = storage.get_action("login")
        assert stored.response_example == '{"token": "t"}'
        assert stored.headers == {"X-A": "1"}
        assert len(storage.list_actions("shop")) == 1

    def test_same_action_name_in_two_projects(self, storage):
        for name in ("a", "b"):
            storage.put_project(Project(name=name))
            storage.upsert_action(Action(name="ping", project_name=name, verb="GET", url=f"/{name}"))

        assert storage.get_action("ping", "b").url == "/b"
        with pytest.raises(ValidationError):
            storage.get_action("ping")

    def test_missing_action(self, storage):
        with pytest.raises(NotFoundError):
            storage.get_action("nope")


class TestHistory:
    def test_insert_assigns_id_and_timestamp(self, storage):
        stored = storage.insert_history(_history("login"))
        assert stored.id is not None
        assert isinstance(stored.timestamp, datetime)
        assert stored.headers == {"Accept": "application/json"}

    def test_list_newest_first_with_offset(self, storage):
        for name in ("a", "b", "c"):
            storage.insert_history(_history(name))
        assert [r.action_name for r in storage.list_history(0, 2)] == ["c", "b"]
        assert [r.action_name for r in storage.list_history(2, 2)] == ["a"]


class TestContext:
    def test_default_context_is_empty(self, storage):
        assert storage.get_context() == Context()

    def test_put_replaces_context(self, storage):
        storage.put_context(Context(values={"a": "1"}, version=1))
        storage.put_context(Context(values={"b": "2"}, version=2))
        assert storage.get_context() == Context(values={"b": "2"}, version=2)


class TestFlowsAndSuites:
    def test_flow_round_trip(self, storage):
        flow = Flow(name="f", steps=[RunActionArgs(action_name="login", extract={"token": "auth"})])
        storage.put_flow(flow)
        assert storage.get_flow("f") == flow

    def test_missing_flow(self, storage):
        with pytest.raises(NotFoundError):
            storage.get_flow("nope")

    def test_suite_and_instances_in_order(self, storage):
        storage.put_test_suite(TestSuite(name="smoke"))
        storage.add_test_suite_instance(TestSuiteInstance(test_suite_name="smoke", flow_name="f1", expect="x"))
        storage.add_test_suite_instance(
            TestSuiteInstance(test_suite_name="smoke", flow_name="f2", expect="y", target=TARGET_RESPONSE)
        )

        suite = storage.get_test_suite("smoke")
        instances = storage.list_test_suite_instances("smoke")

        assert suite.created_at is not None
        assert [i.flow_name for i in instances] == ["f1", "f2"]
        assert instances[1].target == TARGET_RESPONSE
        assert [s.name for s in storage.list_test_suites()] == ["smoke"]

    def test_put_existing_suite_keeps_created_at(self, storage):
        storage.put_test_suite(TestSuite(name="smoke"))
        first = storage.get_test_suite("smoke").created_at
        storage.put_test_suite(TestSuite(name="smoke"))
        assert storage.get_test_suite("smoke").created_at == first
