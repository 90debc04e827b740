from __future__ import annotations

import json
from pathlib import Path

import pytest

from domain.project import URL_ENCODED
from domain.test_suite import TARGET_RESPONSE
from infrastructure.definitions import (
    DefinitionImporter,
    DefinitionLoadError,
    DefinitionLoaderRegistry,
    JsonDefinitionLoader,
    YamlDefinitionLoader,
)
from infrastructure.storage.in_memory_storage import InMemoryStorage

WORKSPACE_YAML = """
projects:
  - name: shop
    test_url: https://api.test
    conf:
      tenant: acme
    actions:
      - name: login
        verb: POST
        url: /login
        body:
          user: ann
      - name: signin
        verb: POST
        url: /signin
        form: true
flows:
  - name: checkout
    steps:
      - action_name: login
        extract:
          token: auth
      - action_name: signin
test_suites:
  - name: smoke
    instances:
      - flow: checkout
        expect: abc123
      - flow: checkout
        expect: ok
        target: response
"""


def _write(tmp_path: Path, name: str, text: str) -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_yaml_loader_reads_workspace(tmp_path: Path) -> None:
    # Arrange
    path = _write(tmp_path, "workspace.yaml", WORKSPACE_YAML)

    # Act
    definition = YamlDefinitionLoader().load_from_file(path)

    # Assert
    assert [p.name for p in definition.projects] == ["shop"]
    assert definition.projects[0].conf == {"tenant": "acme"}
    login, signin = definition.actions
    assert json.loads(login.static_body) == {"user": "ann"}
    assert signin.headers == {"Content-Type": URL_ENCODED}
    flow = definition.flows[0]
    assert [s.action_name for s in flow.steps] == ["login", "signin"]
    assert flow.steps[0].extract == {"token": "auth"}
    suite, instances = definition.suites[0]
    assert suite.name == "smoke"
    assert instances[1].target == TARGET_RESPONSE


def test_json_loader_reads_same_shape(tmp_path: Path) -> None:
    data = {
        "projects": [{"name": "shop", "actions": [{"name": "ping", "verb": "GET", "url": "/ping"}]}],
        "flows": [{"name": "f", "steps": [{"action_name": "ping"}]}],
    }
    path = _write(tmp_path, "workspace.json", json.dumps(data))

    definition = JsonDefinitionLoader().load_from_file(path)

    assert definition.actions[0].project_name == "shop"
    assert definition.suites == []


def test_registry_picks_loader_by_extension() -> None:
    registry = DefinitionLoaderRegistry()
    assert isinstance(registry.get_loader(Path("a.yml")), YamlDefinitionLoader)
    assert isinstance(registry.get_loader(Path("a.JSON")), JsonDefinitionLoader)
    with pytest.raises(DefinitionLoadError):
        registry.get_loader(Path("a.toml"))


@pytest.mark.parametrize(
    "text",
    [
        "",
        "- just\n- a list\n",
        "projects: [unclosed",
        "projects:\n  - name: shop\n    actions:\n      - {name: x, verb: PATCH, url: /x}\n",
        "flows:\n  - name: f\n    steps:\n      - {body: x}\n",
        "projects: not-a-list\n",
    ],
)
def test_invalid_definitions_rejected(tmp_path: Path, text: str) -> None:
    path = _write(tmp_path, "bad.yaml", text)
    with pytest.raises(DefinitionLoadError):
        YamlDefinitionLoader().load_from_file(path)


def test_missing_file_rejected(tmp_path: Path) -> None:
    with pytest.raises(DefinitionLoadError):
        JsonDefinitionLoader().load_from_file(tmp_path / "none.json")


def test_importer_writes_everything_once(tmp_path: Path) -> None:
    # Arrange
    definition = YamlDefinitionLoader().load_from_file(_write(tmp_path, "workspace.yaml", WORKSPACE_YAML))
    storage = InMemoryStorage()
    importer = DefinitionImporter(storage)

    # Act
    first = importer.apply(definition)
    second = importer.apply(definition)

    # Assert
    assert (first.projects, first.actions, first.flows, first.suites, first.instances) == (1, 2, 1, 1, 2)
    assert second.instances == 0
    assert storage.get_action("signin").headers == {"Content-Type": URL_ENCODED}
    assert len(storage.get_flow("checkout").steps) == 2
    assert len(storage.list_test_suite_instances("smoke")) == 2


def test_reimport_keeps_recorded_examples(tmp_path: Path) -> None:
    # Arrange
    definition = YamlDefinitionLoader().load_from_file(_write(tmp_path, "workspace.yaml", WORKSPACE_YAML))
    storage = InMemoryStorage()
    importer = DefinitionImporter(storage)
    importer.apply(definition)
    storage.upsert_action(storage.get_action("login", "shop").with_examples('{"user": "ann"}', '{"token": "abc123"}'))

    # Act
    importer.apply(definition)

    # Assert
    login = storage.get_action("login", "shop")
    assert login.body_example == '{"user": "ann"}'
    assert login.response_example == '{"token": "abc123"}'


@pytest.mark.parametrize(
    "raw,expected",
    [("abc123", "abc123"), ("true", "true"), ("1.0", "1.0"), ("42", "42"), ("null", "null"), ("'yes'", "yes")],
)
def test_suite_expect_scalars_match_extracted_text(tmp_path: Path, raw: str, expected: str) -> None:
    text = f"test_suites:\n  - name: s\n    instances:\n      - {{flow: f, expect: {raw}}}\n"

    definition = YamlDefinitionLoader().load_from_file(_write(tmp_path, "suite.yaml", text))

    _, instances = definition.suites[0]
    assert instances[0].expect == expected


def test_suite_expect_must_be_scalar(tmp_path: Path) -> None:
    text = "test_suites:\n  - name: s\n    instances:\n      - {flow: f, expect: [1, 2]}\n"
    with pytest.raises(DefinitionLoadError):
        YamlDefinitionLoader().load_from_file(_write(tmp_path, "suite.yaml", text))
