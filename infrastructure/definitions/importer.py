# infrastructure/definitions/importer.py
from __future__ import annotations

from dataclasses import dataclass

from application.ports.storage import StoragePort
from domain.exceptions import NotFoundError
from domain.project import Action
from infrastructure.definitions.base_loader import WorkspaceDefinition


@dataclass(frozen=True)
class ImportSummary:
    projects: int
    actions: int
    flows: int
    suites: int
    instances: int


class DefinitionImporter:
    """
    Writes a loaded definition to storage.

    Re-importing the same file is harmless: recorded body and response
    examples and existing suite instances are kept.
    """

    def __init__(self, storage: StoragePort):
        self._storage = storage

    def apply(self, definition: WorkspaceDefinition) -> ImportSummary:
        for project in definition.projects:
            self._storage.put_project(project)
        for action in definition.actions:
            self._storage.upsert_action(self._keep_examples(action))
        for flow in definition.flows:
            self._storage.put_flow(flow)

        added = 0
        for suite, instances in definition.suites:
            self._storage.put_test_suite(suite)
            existing = self._storage.list_test_suite_instances(suite.name)
            for instance in instances:
                if instance in existing:
                    continue
                self._storage.add_test_suite_instance(instance)
                added += 1

        return ImportSummary(
            projects=len(definition.projects),
            actions=len(definition.actions),
            flows=len(definition.flows),
            suites=len(definition.suites),
            instances=added,
        )

    def _keep_examples(self, action: Action) -> Action:
        try:
            stored = self._storage.get_action(action.name, action.project_name)
        except NotFoundError:
            return action
        return action.with_examples(stored.body_example, stored.response_example)
