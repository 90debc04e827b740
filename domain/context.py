# domain/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class Context:
    """
    The current context: bind-name -> extracted value.

    There is one live context per environment. `version` increases on every
    save and lets writers detect a concurrent update.
    """
    values: Dict[str, str] = field(default_factory=dict)
    version: int = 0
