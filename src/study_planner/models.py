"""Data classes for the planning domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class TimeOfDay:
    hour: int
    minute: int

    @property
    def total_minutes(self) -> int:
        return self.hour * 60 + self.minute


@dataclass(frozen=True)
class DayWindow:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class BreakSpec:
    title: str
    start_hour: int
    end_hour: int


@dataclass(frozen=True)
class BreakInterval:
    title: str
    start: datetime
    end: datetime


@dataclass(frozen=True)
class FreeSlot:
    start: datetime
    end: datetime


@dataclass
class PlanItem:
    title: str
    start: datetime
    end: datetime
    subject: Optional[str] = None  # None for breaks
    completed: bool = False
    id: Optional[int] = None

    @property
    def is_study(self) -> bool:
        return self.subject is not None

    @property
    def minutes(self) -> int:
        return max(0, round((self.end - self.start).total_seconds() / 60))


@dataclass
class StudyPlan:
    id: int
    owner: str
    created_at: str
    items: list[PlanItem] = field(default_factory=list)


@dataclass(frozen=True)
class PlanError:
    kind: str  # "format" | "validation"
    message: str


@dataclass
class PlanResult:
    items: list[PlanItem] = field(default_factory=list)
    error: Optional[PlanError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
