# infrastructure/definitions/base_loader.py
"""
Workspace definition files: projects with their actions, flows and test suites.

    projects:
      - name: shop
        test_url: https://api.test
        conf: {tenant: acme}
        actions:
          - name: login
            verb: POST
            url: /login
            body: '{"u": "a"}'
    flows:
      - name: checkout
        steps:
          - action_name: login
            extract: {token: auth}
    test_suites:
      - name: smoke
        instances:
          - {flow: checkout, expect: abc123}
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from domain.exceptions import ConfigurationError, ReqflowError
from domain.flow import Flow, RunActionArgs
from domain.project import CONTENT_TYPE, URL_ENCODED, Action, Project
from domain.string_map import ensure_string_map
from domain.test_suite import TARGET_EXTRACTED, TestSuite, TestSuiteInstance


class DefinitionLoadError(ConfigurationError):
    pass


@dataclass(frozen=True)
class WorkspaceDefinition:
    projects: List[Project] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)
    flows: List[Flow] = field(default_factory=list)
    suites: List[Tuple[TestSuite, List[TestSuiteInstance]]] = field(default_factory=list)


class DefinitionLoaderBase(ABC):
    def load_from_file(self, path: Union[str, Path]) -> WorkspaceDefinition:
        p = Path(path)
        if not p.exists():
            raise DefinitionLoadError(f"Definition file not found: {path}")

        data = self._load_file(p)
        if data is None:
            raise DefinitionLoadError(f"Definition file is empty: {path}")
        if not isinstance(data, dict):
            raise DefinitionLoadError(f"Definition file is invalid: {path}")

        return self.load_from_dict(data)

    @abstractmethod
    def _load_file(self, path: Path) -> Any:
        ...

    def load_from_dict(self, data: Dict[str, Any]) -> WorkspaceDefinition:
        try:
            projects: List[Project] = []
            actions: List[Action] = []
            for item in self._list(data, "projects"):
                project = self._load_project(item)
                projects.append(project)
                actions.extend(self._load_action(a, project.name) for a in self._list(item, "actions"))

            flows = [self._load_flow(f) for f in self._list(data, "flows")]
            suites = [self._load_suite(s) for s in self._list(data, "test_suites")]
        except DefinitionLoadError:
            raise
        except ReqflowError as e:
            raise DefinitionLoadError(str(e)) from e

        return WorkspaceDefinition(projects=projects, actions=actions, flows=flows, suites=suites)

    def _list(self, data: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
        items = data.get(key) or []
        if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
            raise DefinitionLoadError(f"'{key}' must be a list of objects")
        return items

    def _load_project(self, data: Dict[str, Any]) -> Project:
        return Project(
            name=data.get("name", ""),
            test_url=data.get("test_url"),
            prod_url=data.get("prod_url"),
            conf=ensure_string_map(data.get("conf") or {}, "conf"),
        )

    def _load_action(self, data: Dict[str, Any], project_name: str) -> Action:
        headers = ensure_string_map(data.get("headers") or {}, "headers")
        if data.get("form"):
            headers[CONTENT_TYPE] = URL_ENCODED
        body = data.get("body")
        if body is not None and not isinstance(body, str):
            body = json.dumps(body, ensure_ascii=False)
        return Action(
            name=data.get("name", ""),
            project_name=project_name,
            verb=str(data.get("verb", "GET")),
            url=data.get("url", ""),
            static_body=body,
            headers=headers,
        )

    def _load_flow(self, data: Dict[str, Any]) -> Flow:
        return Flow(
            name=data.get("name", ""),
            steps=[RunActionArgs.from_dict(step) for step in self._list(data, "steps")],
        )

    def _load_suite(self, data: Dict[str, Any]) -> Tuple[TestSuite, List[TestSuiteInstance]]:
        suite = TestSuite(name=data.get("name", ""))
        if not suite.name:
            raise DefinitionLoadError("test suite name must not be empty")
        instances = [
            TestSuiteInstance(
                test_suite_name=suite.name,
                flow_name=i.get("flow", ""),
                expect=self._expect(i.get("expect", "")),
                target=i.get("target", TARGET_EXTRACTED),
            )
            for i in self._list(data, "instances")
        ]
        return suite, instances

    @staticmethod
    def _expect(value: Any) -> str:
        # scalars compare the way extraction renders them: true, 1.0, null
        if isinstance(value, str):
            return value
        if value is None or isinstance(value, (bool, int, float)):
            return json.dumps(value)
        raise DefinitionLoadError(f"expect must be a scalar, got {type(value).__name__}")
