# application/services/extractor.py
"""
Value extraction from JSON responses.

Patterns are a small path language, not JSONPath:

    token               top-level field
    $.data.token        optional "$" root
    items[0].id         array index
    items.0.id          array index as a segment
    $['odd key'].value  bracketed key

No wildcards, filters, slices or recursive descent.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

from domain.flow import ExtractionSpec

Token = Union[str, int]

_MISSING = object()


class PatternError(ValueError):
    pass


def parse_pattern(pattern: str) -> List[Token]:
    p = pattern.strip()
    if p.startswith("$"):
        p = p[1:]
        if p.startswith("."):
            p = p[1:]
    tokens: List[Token] = []
    i = 0
    n = len(p)
    expect_segment = bool(p)

    while i < n:
        c = p[i]
        if c == "[":
            end = p.find("]", i)
            if end < 0:
                raise PatternError(f"unclosed bracket in {pattern!r}")
            inner = p[i + 1 : end].strip()
            if len(inner) >= 2 and inner[0] == inner[-1] and inner[0] in "'\"":
                tokens.append(inner[1:-1])
            elif inner.isdigit():
                tokens.append(int(inner))
            else:
                raise PatternError(f"unsupported index {inner!r} in {pattern!r}")
            i = end + 1
            expect_segment = False
        elif c == ".":
            if expect_segment:
                raise PatternError(f"empty segment in {pattern!r}")
            i += 1
            expect_segment = True
            if i == n:
                raise PatternError(f"trailing dot in {pattern!r}")
        else:
            end = i
            while end < n and p[end] not in ".[":
                end += 1
            name = p[i:end]
            if any(ch in name for ch in "]*?"):
                raise PatternError(f"unsupported segment {name!r} in {pattern!r}")
            tokens.append(name)
            i = end
            expect_segment = False

    return tokens


def _step(cur: Any, token: Token) -> Any:
    if isinstance(token, int):
        if isinstance(cur, list) and token < len(cur):
            return cur[token]
        return _MISSING
    if isinstance(cur, dict):
        return cur.get(token, _MISSING)
    if isinstance(cur, list) and token.isdigit():
        idx = int(token)
        return cur[idx] if idx < len(cur) else _MISSING
    return _MISSING


def flatten(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, indent=2, ensure_ascii=False)


class Extractor:
    def extract(self, response_body: str, pattern: str) -> Optional[str]:
        try:
            doc = json.loads(response_body)
            tokens = parse_pattern(pattern)
        except (ValueError, TypeError):
            # JSONDecodeError and PatternError are both ValueErrors
            return None

        cur: Any = doc
        for token in tokens:
            cur = _step(cur, token)
            if cur is _MISSING:
                return None

        text = flatten(cur)
        # empty string is treated as not found so it never binds a blank value
        return text or None

    def extract_all(self, response_body: str, spec: ExtractionSpec) -> Dict[str, Optional[str]]:
        return {pattern: self.extract(response_body, pattern) for pattern in spec}
