# domain/string_map.py
"""
Flat string -> string maps persisted as JSON objects.

Headers, project conf and the context all use this shape. Parsing is strict:
anything other than a JSON object of string values is a SerializationError.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from domain.exceptions import SerializationError

StringMap = Dict[str, str]


def parse_string_map(raw: Optional[str], what: str) -> StringMap:
    if raw is None or raw == "":
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SerializationError(f"Malformed JSON for {what}: {e}") from e
    return ensure_string_map(data, what)


def ensure_string_map(data: Any, what: str) -> StringMap:
    if not isinstance(data, dict):
        raise SerializationError(f"{what} must be a JSON object, got {type(data).__name__}")
    bad = sorted(k for k, v in data.items() if not isinstance(k, str) or not isinstance(v, str))
    if bad:
        raise SerializationError(f"{what} must map strings to strings; invalid keys: {', '.join(map(str, bad))}")
    return dict(data)


def dump_string_map(data: StringMap) -> str:
    return json.dumps(data, ensure_ascii=False, sort_keys=True)
