from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Tuple

from application.ports.storage import StoragePort
from domain.context import Context
from domain.exceptions import NotFoundError, ValidationError
from domain.flow import Flow
from domain.history import HistoryRecord
from domain.project import Action, Project
from domain.test_suite import TestSuite, TestSuiteInstance


class InMemoryStorage(StoragePort):
    def __init__(self) -> None:
        self._projects: Dict[str, Project] = {}
        self._actions: Dict[Tuple[str, str], Action] = {}
        self._history: List[HistoryRecord] = []
        self._context = Context()
        self._flows: Dict[str, Flow] = {}
        self._suites: Dict[str, TestSuite] = {}
        self._instances: List[TestSuiteInstance] = []
        self._lock = Lock()

    def get_project(self, name: str) -> Project:
        with self._lock:
            project = self._projects.get(name)
        if project is None:
            raise NotFoundError("Project", name)
        return project

    def put_project(self, project: Project) -> None:
        with self._lock:
            self._projects[project.name] = project

    def get_action(self, name: str, project_name: Optional[str] = None) -> Action:
        with self._lock:
            matches = [
                a for (p, n), a in self._actions.items()
                if n == name and (project_name is None or p == project_name)
            ]
        if not matches:
            raise NotFoundError("Action", name if project_name is None else f"{project_name}/{name}")
        if len(matches) > 1:
            raise ValidationError(f"Action {name} exists in several projects; specify the project")
        return matches[0]

    def list_actions(self, project_name: Optional[str] = None) -> List[Action]:
        with self._lock:
            return [a for (p, _), a in self._actions.items() if project_name is None or p == project_name]

    def upsert_action(self, action: Action) -> None:
        with self._lock:
            self._actions[(action.project_name, action.name)] = action

    def insert_history(self, record: HistoryRecord) -> HistoryRecord:
        with self._lock:
            stored = replace(record, id=len(self._history) + 1, timestamp=datetime.now(timezone.utc))
            self._history.append(stored)
            return stored

    def list_history(self, offset: int, limit: int) -> List[HistoryRecord]:
        with self._lock:
            newest_first = list(reversed(self._history))
        return newest_first[offset : offset + limit]

    def get_context(self) -> Context:
        with self._lock:
            return Context(values=dict(self._context.values), version=self._context.version)

    def put_context(self, context: Context) -> None:
        with self._lock:
            self._context = Context(values=dict(context.values), version=context.version)

    def get_flow(self, name: str) -> Flow:
        with self._lock:
            flow = self._flows.get(name)
        if flow is None:
            raise NotFoundError("Flow", name)
        return flow

    def put_flow(self, flow: Flow) -> None:
        with self._lock:
            self._flows[flow.name] = flow

    def get_test_suite(self, name: str) -> TestSuite:
        with self._lock:
            suite = self._suites.get(name)
        if suite is None:
            raise NotFoundError("TestSuite", name)
        return suite

    def put_test_suite(self, suite: TestSuite) -> None:
        with self._lock:
            existing = self._suites.get(suite.name)
            created_at = suite.created_at or (existing.created_at if existing else None) or datetime.now(timezone.utc)
            self._suites[suite.name] = replace(suite, created_at=created_at)

    def list_test_suites(self) -> List[TestSuite]:
        with self._lock:
            return list(self._suites.values())

    def list_test_suite_instances(self, test_suite_name: str) -> List[TestSuiteInstance]:
        with self._lock:
            return [i for i in self._instances if i.test_suite_name == test_suite_name]

    def add_test_suite_instance(self, instance: TestSuiteInstance) -> None:
        with self._lock:
            self._instances.append(instance)
