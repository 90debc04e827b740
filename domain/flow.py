# domain/flow.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from domain.exceptions import SerializationError, ValidationError
from domain.string_map import ensure_string_map

ExtractionSpec = Dict[str, Optional[str]]


class FlowState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class RunActionArgs:
    """
    Arguments of one action invocation.

    Used for one-shot runs and, serialized, as the steps of a flow.
    There is no verb: it always comes from the stored action.
    """
    action_name: str
    project_name: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    query: Dict[str, str] = field(default_factory=dict)
    extract: Optional[ExtractionSpec] = None
    env: str = "test"
    form: bool = False
    multipart: bool = False

    def __post_init__(self) -> None:
        if not self.action_name:
            raise ValidationError("action_name must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action_name": self.action_name,
            "project_name": self.project_name,
            "headers": dict(self.headers),
            "body": self.body,
            "query": dict(self.query),
            "extract": dict(self.extract) if self.extract is not None else None,
            "env": self.env,
            "form": self.form,
            "multipart": self.multipart,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "RunActionArgs":
        if not isinstance(data, dict):
            raise SerializationError(f"run arguments must be an object, got {type(data).__name__}")
        if not isinstance(data.get("action_name"), str):
            raise SerializationError("run arguments require a string action_name")

        extract = data.get("extract")
        if extract is not None:
            if not isinstance(extract, dict) or not all(
                isinstance(k, str) and (v is None or isinstance(v, str)) for k, v in extract.items()
            ):
                raise SerializationError("extract must map patterns to optional names")
            extract = dict(extract)

        body = data.get("body")
        if body is not None and not isinstance(body, str):
            # bodies given as JSON objects are kept as their JSON text
            body = json.dumps(body, ensure_ascii=False)

        for flag in ("form", "multipart"):
            if data.get(flag) is not None and not isinstance(data[flag], bool):
                raise SerializationError(f"{flag} must be a boolean, got {data[flag]!r}")

        return cls(
            action_name=data["action_name"],
            project_name=data.get("project_name"),
            headers=ensure_string_map(data.get("headers") or {}, "headers"),
            body=body,
            query=ensure_string_map(data.get("query") or {}, "query"),
            extract=extract,
            env=data.get("env") or "test",
            form=data.get("form") or False,
            multipart=data.get("multipart") or False,
        )


@dataclass(frozen=True)
class Flow:
    name: str
    steps: List[RunActionArgs] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Flow name must not be empty")

    def dump_steps(self) -> str:
        return json.dumps([s.to_dict() for s in self.steps], ensure_ascii=False)

    @classmethod
    def from_json(cls, name: str, raw: str) -> "Flow":
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SerializationError(f"Malformed steps for flow {name}: {e}") from e
        if not isinstance(data, list):
            raise SerializationError(f"Steps of flow {name} must be a JSON array")
        return cls(name=name, steps=[RunActionArgs.from_dict(item) for item in data])
