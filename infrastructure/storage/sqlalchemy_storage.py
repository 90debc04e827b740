# infrastructure/storage/sqlalchemy_storage.py
"""
Relational storage on SQLAlchemy (SQLite by default).

Maps/JSON columns are stored as text and parsed strictly on the way out, so a
hand-edited database with malformed headers/conf/context fails loudly.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List, Optional

import sqlalchemy as sa
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from application.ports.storage import StoragePort
from domain.context import Context
from domain.exceptions import NotFoundError, StorageError, ValidationError
from domain.flow import Flow
from domain.history import HistoryRecord
from domain.project import Action, Project
from domain.string_map import dump_string_map, parse_string_map
from domain.test_suite import TestSuite, TestSuiteInstance
from infrastructure.storage.tables import (
    CONTEXT_ROW_ID,
    ActionRow,
    Base,
    ContextRow,
    FlowRow,
    HistoryRow,
    ProjectRow,
    TestSuiteInstanceRow,
    TestSuiteRow,
)


def create_storage_engine(url: str) -> sa.Engine:
    if url.startswith("sqlite") and (url in ("sqlite://", "sqlite:///:memory:") or ":memory:" in url):
        # one shared connection, otherwise each checkout sees an empty database
        return sa.create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    return sa.create_engine(url)


class SqlAlchemyStorage(StoragePort):
    def __init__(self, engine: sa.Engine, create_schema: bool = True):
        self._engine = engine
        self._sessions = sessionmaker(engine, expire_on_commit=False)
        if create_schema:
            try:
                Base.metadata.create_all(engine)
            except SQLAlchemyError as e:
                raise StorageError(f"Cannot create schema: {e}") from e

    @classmethod
    def from_url(cls, url: str) -> "SqlAlchemyStorage":
        return cls(create_storage_engine(url))

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with self._sessions.begin() as session:
                yield session
        except SQLAlchemyError as e:
            raise StorageError(f"Storage failure: {e}") from e

    # ---- projects --------------------------------------------------------

    def get_project(self, name: str) -> Project:
        with self._transaction() as session:
            row = session.get(ProjectRow, name)
            if row is None:
                raise NotFoundError("Project", name)
            return Project(
                name=row.name,
                test_url=row.test_url,
                prod_url=row.prod_url,
                conf=parse_string_map(row.conf, f"conf of project {row.name}"),
            )

    def put_project(self, project: Project) -> None:
        with self._transaction() as session:
            session.merge(
                ProjectRow(
                    name=project.name,
                    test_url=project.test_url,
                    prod_url=project.prod_url,
                    conf=dump_string_map(project.conf),
                )
            )

    # ---- actions ---------------------------------------------------------

    def get_action(self, name: str, project_name: Optional[str] = None) -> Action:
        with self._transaction() as session:
            stmt = sa.select(ActionRow).where(ActionRow.name == name)
            if project_name is not None:
                stmt = stmt.where(ActionRow.project_name == project_name)
            rows = session.scalars(stmt).all()
            if not rows:
                raise NotFoundError("Action", name if project_name is None else f"{project_name}/{name}")
            if len(rows) > 1:
                raise ValidationError(f"Action {name} exists in several projects; specify the project")
            return self._to_action(rows[0])

    def list_actions(self, project_name: Optional[str] = None) -> List[Action]:
        with self._transaction() as session:
            stmt = sa.select(ActionRow).order_by(ActionRow.project_name, ActionRow.name)
            if project_name is not None:
                stmt = stmt.where(ActionRow.project_name == project_name)
            return [self._to_action(row) for row in session.scalars(stmt)]

    def upsert_action(self, action: Action) -> None:
        with self._transaction() as session:
            session.merge(
                ActionRow(
                    project_name=action.project_name,
                    name=action.name,
                    verb=action.verb,
                    url=action.url,
                    static_body=action.static_body,
                    headers=dump_string_map(action.headers),
                    body_example=action.body_example,
                    response_example=action.response_example,
                )
            )

    def _to_action(self, row: ActionRow) -> Action:
        return Action(
            name=row.name,
            project_name=row.project_name,
            verb=row.verb,
            url=row.url,
            static_body=row.static_body,
            headers=parse_string_map(row.headers, f"headers of action {row.name}"),
            body_example=row.body_example,
            response_example=row.response_example,
        )

    # ---- history ---------------------------------------------------------

    def insert_history(self, record: HistoryRecord) -> HistoryRecord:
        with self._transaction() as session:
            row = HistoryRow(
                action_name=record.action_name,
                url=record.url,
                body=record.body,
                headers=dump_string_map(record.headers),
                response=record.response,
                status_code=record.status_code,
                duration=record.duration,
            )
            session.add(row)
            session.flush()
            session.refresh(row)
            return self._to_history(row)

    def list_history(self, offset: int, limit: int) -> List[HistoryRecord]:
        with self._transaction() as session:
            stmt = sa.select(HistoryRow).order_by(HistoryRow.id.desc()).offset(offset).limit(limit)
            return [self._to_history(row) for row in session.scalars(stmt)]

    def _to_history(self, row: HistoryRow) -> HistoryRecord:
        return HistoryRecord(
            id=row.id,
            action_name=row.action_name,
            url=row.url,
            body=row.body,
            headers=parse_string_map(row.headers, f"headers of history {row.id}"),
            response=row.response,
            status_code=row.status_code,
            duration=row.duration,
            timestamp=row.timestamp,
        )

    # ---- context ---------------------------------------------------------

    def get_context(self) -> Context:
        with self._transaction() as session:
            row = session.get(ContextRow, CONTEXT_ROW_ID)
            if row is None:
                return Context()
            return Context(values=parse_string_map(row.value, "context"), version=row.version)

    def put_context(self, context: Context) -> None:
        with self._transaction() as session:
            session.merge(
                ContextRow(id=CONTEXT_ROW_ID, value=dump_string_map(context.values), version=context.version)
            )

    # ---- flows -----------------------------------------------------------

    def get_flow(self, name: str) -> Flow:
        with self._transaction() as session:
            row = session.get(FlowRow, name)
            if row is None:
                raise NotFoundError("Flow", name)
            return Flow.from_json(row.name, row.run_action_args)

    def put_flow(self, flow: Flow) -> None:
        with self._transaction() as session:
            session.merge(FlowRow(name=flow.name, run_action_args=flow.dump_steps()))

    # ---- test suites -----------------------------------------------------

    def get_test_suite(self, name: str) -> TestSuite:
        with self._transaction() as session:
            row = session.get(TestSuiteRow, name)
            if row is None:
                raise NotFoundError("TestSuite", name)
            return TestSuite(name=row.name, created_at=row.created_at)

    def put_test_suite(self, suite: TestSuite) -> None:
        with self._transaction() as session:
            if session.get(TestSuiteRow, suite.name) is None:
                row = TestSuiteRow(name=suite.name)
                if suite.created_at is not None:
                    row.created_at = suite.created_at
                session.add(row)

    def list_test_suites(self) -> List[TestSuite]:
        with self._transaction() as session:
            rows = session.scalars(sa.select(TestSuiteRow).order_by(TestSuiteRow.name))
            return [TestSuite(name=row.name, created_at=row.created_at) for row in rows]

    def list_test_suite_instances(self, test_suite_name: str) -> List[TestSuiteInstance]:
        with self._transaction() as session:
            stmt = (
                sa.select(TestSuiteInstanceRow)
                .where(TestSuiteInstanceRow.test_suite_name == test_suite_name)
                .order_by(TestSuiteInstanceRow.id)
            )
            return [
                TestSuiteInstance(
                    test_suite_name=row.test_suite_name,
                    flow_name=row.flow_name,
                    expect=row.expect,
                    target=row.target,
                )
                for row in session.scalars(stmt)
            ]

    def add_test_suite_instance(self, instance: TestSuiteInstance) -> None:
        with self._transaction() as session:
            session.add(
                TestSuiteInstanceRow(
                    test_suite_name=instance.test_suite_name,
                    flow_name=instance.flow_name,
                    expect=instance.expect,
                    target=instance.target,
                )
            )
