# application/workbench.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Tuple

from application.executor.action_runner import ActionRunner
from application.executor.flow_engine import FlowEngine, FlowReport
from application.executor.suite_evaluator import SuiteEvaluator, SuiteReport
from application.outcome import StepOutcome
from application.ports.http_client import HttpClientPort
from application.ports.logger import LoggerPort
from application.ports.printer import NullPrinter, PrinterPort
from application.ports.storage import StoragePort
from application.services.action_resolver import ActionResolver
from application.services.body_encoder import BodyEncoder
from application.services.context_store import ContextStore
from application.services.execution_deps import ExecutionDeps
from application.services.extractor import Extractor
from application.services.history_recorder import DEFAULT_PAGE_SIZE, HistoryRecorder
from application.services.template_renderer import TemplateRenderer
from domain.context import Context
from domain.exceptions import NotFoundError, ValidationError
from domain.flow import Flow, RunActionArgs
from domain.history import HistoryRecord
from domain.project import CONTENT_TYPE, URL_ENCODED, Action, Project
from domain.test_suite import TARGET_EXTRACTED, TestSuite, TestSuiteInstance


@dataclass(frozen=True)
class ProjectInfo:
    project: Project
    actions: List[Action]


class Workbench:
    """
    Entry point for outer layers (API, scripts).

    Wires the engine around one storage backend and one HTTP client.
    """

    def __init__(
        self,
        storage: StoragePort,
        http_client: HttpClientPort,
        logger: LoggerPort,
        printer: Optional[PrinterPort] = None,
        continue_on_error: bool = False,
        check_context_version: bool = False,
    ):
        self._storage = storage
        self._check_context_version = check_context_version
        self._deps = ExecutionDeps(logger=logger, printer=printer or NullPrinter())
        self._context = ContextStore(storage)
        self._history = HistoryRecorder(storage)
        self._runner = ActionRunner(
            storage=storage,
            http_client=http_client,
            resolver=ActionResolver(TemplateRenderer()),
            encoder=BodyEncoder(),
            recorder=self._history,
            extractor=Extractor(),
        )
        self._flows = FlowEngine(
            self._runner,
            self._context,
            continue_on_error=continue_on_error,
            check_context_version=check_context_version,
        )
        self._suites = SuiteEvaluator(storage, self._flows)

    @property
    def deps(self) -> ExecutionDeps:
        return self._deps

    # ---- execution -------------------------------------------------------

    def run_action(self, name: str, overrides: Optional[RunActionArgs] = None) -> StepOutcome:
        args = replace(overrides, action_name=name) if overrides else RunActionArgs(action_name=name)
        deps = self._deps.with_logger(self._deps.logger.bind(action=name))
        deps.logger.info("action.start", project=args.project_name)

        current = self._context.load_current()
        ctx = dict(current.values)
        outcome = self._runner.run(args, ctx, deps)
        if outcome.ok and args.extract is not None:
            expected = current.version if self._check_context_version else None
            saved = self._context.save(ctx, expected_version=expected)
            deps.logger.info("context.saved", version=saved.version, keys=sorted(saved.values))

        deps.logger.info("action.end", ok=outcome.ok, status=outcome.status)
        return outcome

    def run_flow(self, name: str, continue_on_error: Optional[bool] = None) -> FlowReport:
        flow = self._storage.get_flow(name)
        return self._flows.execute(flow, self._deps, continue_on_error=continue_on_error)

    def run_test_suite(self, name: str) -> SuiteReport:
        return self._suites.evaluate(name, self._deps)

    def list_history(self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> List[HistoryRecord]:
        return self._history.list(page, page_size)

    # ---- context ---------------------------------------------------------

    def current_context(self) -> Context:
        return self._context.load_current()

    def clear_context(self) -> Context:
        return self._context.clear()

    # ---- management ------------------------------------------------------

    def create_project(
        self,
        name: str,
        test_url: Optional[str] = None,
        prod_url: Optional[str] = None,
        conf: Optional[Dict[str, str]] = None,
    ) -> Project:
        if self._exists(lambda: self._storage.get_project(name)):
            raise ValidationError(f"Project already exists: {name}")
        project = Project(name=name, test_url=test_url, prod_url=prod_url, conf=dict(conf or {}))
        self._storage.put_project(project)
        self._deps.logger.info("project.created", project=name)
        return project

    def update_project_conf(self, name: str, conf: Dict[str, str]) -> Project:
        project = self._storage.get_project(name).with_conf(conf)
        self._storage.put_project(project)
        self._deps.logger.info("project.conf_updated", project=name, keys=sorted(conf))
        return project

    def project_info(self, name: str) -> ProjectInfo:
        project = self._storage.get_project(name)
        return ProjectInfo(project=project, actions=self._storage.list_actions(name))

    def add_action(
        self,
        project_name: str,
        name: str,
        verb: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        static_body: Optional[str] = None,
        form: bool = False,
    ) -> Action:
        self._storage.get_project(project_name)
        action_headers = dict(headers or {})
        if form:
            action_headers[CONTENT_TYPE] = URL_ENCODED
        action = Action(
            name=name,
            project_name=project_name,
            verb=verb,
            url=url,
            static_body=static_body,
            headers=action_headers,
        )
        self._storage.upsert_action(action)
        self._deps.logger.info("action.saved", project=project_name, action=name, verb=verb)
        return action

    def list_actions(self, project_name: Optional[str] = None) -> List[Action]:
        return self._storage.list_actions(project_name)

    def save_flow(self, name: str, steps: List[RunActionArgs]) -> Flow:
        flow = Flow(name=name, steps=list(steps))
        self._storage.put_flow(flow)
        self._deps.logger.info("flow.saved", flow=name, steps=len(flow.steps))
        return flow

    def create_test_suite(self, name: str, instances: Optional[List[Tuple[str, str]]] = None) -> TestSuite:
        suite = TestSuite(name=name)
        self._storage.put_test_suite(suite)
        for flow_name, expect in instances or []:
            self.add_test_suite_instance(name, flow_name, expect)
        return self._storage.get_test_suite(name)

    def add_test_suite_instance(
        self,
        suite_name: str,
        flow_name: str,
        expect: str,
        target: str = TARGET_EXTRACTED,
    ) -> TestSuiteInstance:
        self._storage.get_test_suite(suite_name)
        instance = TestSuiteInstance(test_suite_name=suite_name, flow_name=flow_name, expect=expect, target=target)
        self._storage.add_test_suite_instance(instance)
        return instance

    def _exists(self, lookup) -> bool:
        try:
            lookup()
        except NotFoundError:
            return False
        return True
