# domain/project.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from domain.exceptions import ConfigurationError, ValidationError

ALLOWED_VERBS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")

CONTENT_TYPE = "Content-Type"
APPLICATION_JSON = "application/json"
URL_ENCODED = "application/x-www-form-urlencoded"
FORM_DATA = "multipart/form-data"


def header_value(headers: Dict[str, str], name: str) -> Optional[str]:
    lowered = name.lower()
    for key, value in headers.items():
        if key.lower() == lowered:
            return value
    return None


@dataclass(frozen=True)
class Project:
    name: str
    test_url: Optional[str] = None
    prod_url: Optional[str] = None
    conf: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Project name must not be empty")

    def base_url(self, env: str = "test") -> Optional[str]:
        if env == "prod":
            return self.prod_url
        if env == "test":
            return self.test_url
        raise ConfigurationError(f"Unknown environment: {env}")

    def with_conf(self, conf: Dict[str, str]) -> "Project":
        return replace(self, conf=dict(conf))


@dataclass(frozen=True)
class Action:
    name: str
    project_name: str
    verb: str
    url: str
    static_body: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    body_example: Optional[str] = None
    response_example: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValidationError("Action name must not be empty")
        if self.verb not in ALLOWED_VERBS:
            raise ConfigurationError(
                f"Unsupported verb: {self.verb} (expected one of {', '.join(ALLOWED_VERBS)})"
            )

    def with_examples(self, body: Optional[str], response: Optional[str]) -> "Action":
        return replace(self, body_example=body, response_example=response)
