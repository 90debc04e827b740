from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from domain.exceptions import ConfigurationError, UnresolvedVariableError

OPEN = "{{"
CLOSE = "}}"


class TemplateRenderError(ConfigurationError):
    pass


@dataclass(frozen=True)
class RenderSources:
    """
    Values available to placeholders. `context` wins over `conf`.
    """
    context: Dict[str, str]
    conf: Dict[str, str] = field(default_factory=dict)

    def lookup(self, name: str) -> Optional[str]:
        if name in self.context:
            return self.context[name]
        return self.conf.get(name)


class TemplateRenderer:
    """
    Expands {{name}} placeholders.
    - whitespace inside the braces is ignored: {{ token }}
    - a name missing from every source is an error, never an empty string
    """

    def render(self, s: Optional[str], src: RenderSources, where: str = "") -> Optional[str]:
        if s is None:
            return None
        missing: Set[str] = set()
        out = self._render(s, src, missing)
        if missing:
            raise UnresolvedVariableError(missing, where)
        return out

    def render_map(self, d: Dict[str, str], src: RenderSources, where: str = "") -> Dict[str, str]:
        missing: Set[str] = set()
        out: Dict[str, str] = {}
        for k, v in d.items():
            out[self._render(k, src, missing)] = self._render(v, src, missing)
        if missing:
            raise UnresolvedVariableError(missing, where)
        return out

    def _render(self, s: str, src: RenderSources, missing: Set[str]) -> str:
        if OPEN not in s:
            return s

        result = ""
        i = 0
        while i < len(s):
            start = s.find(OPEN, i)
            if start < 0:
                result += s[i:]
                break
            result += s[i:start]
            end = s.find(CLOSE, start + 2)
            if end < 0:
                raise TemplateRenderError(f"unclosed template: {s}")
            name = s[start + 2 : end].strip()
            if not name:
                raise TemplateRenderError(f"empty placeholder in: {s}")

            value = src.lookup(name)
            if value is None:
                missing.add(name)
                # keep the literal so the error message can point at it
                result += s[start : end + 2]
            else:
                result += value
            i = end + 2

        return result
