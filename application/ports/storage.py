# application/ports/storage.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from domain.context import Context
from domain.flow import Flow
from domain.history import HistoryRecord
from domain.project import Action, Project
from domain.test_suite import TestSuite, TestSuiteInstance


class StoragePort(ABC):
    """
    Persistence used by the engine.

    Lookups of missing entities raise NotFoundError; any backend failure is a
    StorageError. Malformed persisted JSON surfaces as SerializationError.
    """

    # projects
    @abstractmethod
    def get_project(self, name: str) -> Project:
        ...

    @abstractmethod
    def put_project(self, project: Project) -> None:
        ...

    # actions
    @abstractmethod
    def get_action(self, name: str, project_name: Optional[str] = None) -> Action:
        ...

    @abstractmethod
    def list_actions(self, project_name: Optional[str] = None) -> List[Action]:
        ...

    @abstractmethod
    def upsert_action(self, action: Action) -> None:
        ...

    # history
    @abstractmethod
    def insert_history(self, record: HistoryRecord) -> HistoryRecord:
        """Return the stored record with its id and timestamp assigned."""
        ...

    @abstractmethod
    def list_history(self, offset: int, limit: int) -> List[HistoryRecord]:
        """Most recent first."""
        ...

    # context
    @abstractmethod
    def get_context(self) -> Context:
        ...

    @abstractmethod
    def put_context(self, context: Context) -> None:
        ...

    # flows
    @abstractmethod
    def get_flow(self, name: str) -> Flow:
        ...

    @abstractmethod
    def put_flow(self, flow: Flow) -> None:
        ...

    # test suites
    @abstractmethod
    def get_test_suite(self, name: str) -> TestSuite:
        ...

    @abstractmethod
    def put_test_suite(self, suite: TestSuite) -> None:
        ...

    @abstractmethod
    def list_test_suites(self) -> List[TestSuite]:
        ...

    @abstractmethod
    def list_test_suite_instances(self, test_suite_name: str) -> List[TestSuiteInstance]:
        ...

    @abstractmethod
    def add_test_suite_instance(self, instance: TestSuiteInstance) -> None:
        ...
