from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SweepResult:
    deleted_count: int
    timestamp: datetime


@dataclass(frozen=True)
class SessionStats:
    total: int
    active: int
    expired: int
    timestamp: datetime
