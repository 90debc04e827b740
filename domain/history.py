# domain/history.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


@dataclass(frozen=True)
class HistoryRecord:
    action_name: str
    url: str
    body: Optional[str]
    headers: Dict[str, str]
    response: Optional[str]
    status_code: int
    duration: float
    id: Optional[int] = None
    timestamp: Optional[datetime] = None

    def summary(self) -> str:
        ts = self.timestamp.strftime("%Y-%m-%d %H:%M:%S") if self.timestamp else "None"
        return f"{ts} | {self.action_name} | {self.status_code} | {self.duration:.3f}s"
