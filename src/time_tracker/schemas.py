from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .models import TaskEntity
from .utils import parse_day, parse_number

# Raw numeric input as typed by the user: a JSON number or free text.
RawNumber = Optional[Union[float, str]]

# Fields below are named "date"; this alias keeps annotations unambiguous.
Day = date

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# PUBLIC_INTERFACE
class TaskDocument(BaseModel):
    """
    Serialized task as stored in the local blob and in the external collection.

    Field names on the wire are camelCase (plannedTime, actualTime, createdAt).
    Unknown fields are ignored and missing optional fields take their defaults,
    so older and newer documents load without migration.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    text: str
    planned_time: float = Field(default=0, alias="plannedTime")
    actual_time: float = Field(default=0, alias="actualTime")
    completed: bool = False
    date: Optional[Day] = None
    created_at: datetime = Field(default=EPOCH, alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        """Legacy documents carry numeric ids; ids are opaque strings."""
        if v is None or v == "":
            return None
        return str(v)

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        s = v.strip()
        if not s:
            raise ValueError("text must not be empty")
        return s

    @field_validator("planned_time", "actual_time", mode="before")
    @classmethod
    def default_time(cls, v: Any) -> float:
        """Unreadable times load as 0; the store then clamps them to the profile floor."""
        value = parse_number(v)
        return 0.0 if value is None else value

    @field_validator("completed", mode="before")
    @classmethod
    def default_completed(cls, v: Any) -> Any:
        return False if v is None or v == "" else v

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Optional[Day]:
        """Empty and unreadable days both mean "today"."""
        return parse_day(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def default_created_at(cls, v: Any) -> Any:
        return EPOCH if v is None or v == "" else v

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @field_serializer("date")
    def serialize_date(self, v: Optional[Day]) -> Optional[str]:
        return v.isoformat() if v else None

    # PUBLIC_INTERFACE
    @classmethod
    def from_entity(cls, entity: TaskEntity) -> "TaskDocument":
        """Build a document from an in-memory record."""
        return cls(
            id=entity["id"],
            text=entity["text"],
            planned_time=entity["planned_time"],
            actual_time=entity["actual_time"],
            completed=entity["completed"],
            date=entity["date"],
            created_at=entity["created_at"],
        )

    # PUBLIC_INTERFACE
    def to_entity(self, task_id: str) -> TaskEntity:
        """Return an in-memory record using task_id as its identifier."""
        return {
            "id": task_id,
            "text": self.text,
            "planned_time": float(self.planned_time),
            "actual_time": float(self.actual_time),
            "completed": self.completed,
            "date": self.date,
            "created_at": self.created_at,
        }

    # PUBLIC_INTERFACE
    def to_wire(self, include_id: bool = True) -> Dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        exclude = None if include_id else {"id"}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for adding a task.

    Values are passed to the store as typed; blank text is ignored by the store
    and unreadable times fall back to the profile default.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "Write report",
                "planned_time": 30,
                "date": "2025-02-01",
            }
        }
    )

    text: str = Field(..., description="Task label; blank text is ignored")
    planned_time: RawNumber = Field(default=None, description="Planned effort in the profile unit")
    date: Optional[str] = Field(default=None, description="ISO day the task is for; defaults to today")


class TextUpdate(BaseModel):
    text: str = Field(..., description="New task label; blank text is ignored")


class TimeUpdate(BaseModel):
    value: RawNumber = Field(default=None, description="New time value; unreadable input uses the floor")


class SessionTime(BaseModel):
    amount: RawNumber = Field(default=None, description="Time to add to the logged total; must be positive")


class StepRequest(BaseModel):
    direction: Literal["up", "down"] = Field(..., description="Stepper direction")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task record.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "4c1d0a6e9f8b4f6c8a1e2b3c4d5e6f70",
                "text": "Write report",
                "planned_time": 30,
                "actual_time": 25,
                "completed": False,
                "date": "2025-02-01",
                "created_at": "2025-02-01T09:15:30.123456Z",
            }
        }
    )

    id: str = Field(..., description="Opaque task identifier")
    text: str = Field(..., description="Task label")
    planned_time: float = Field(..., description="Planned effort")
    actual_time: float = Field(..., description="Logged effort")
    completed: bool = Field(..., description="Completion flag")
    date: Optional[Day] = Field(default=None, description="Day the task is for; null means today")
    created_at: datetime = Field(..., description="Creation timestamp")


class MutationOut(BaseModel):
    """
    Envelope for mutation responses.
    """
    accepted: bool = Field(..., description="False when the request was silently ignored")
    task: Optional[TaskOut] = Field(default=None, description="Resulting record, when immediately known")


class AnalyticsOut(BaseModel):
    total_count: int
    completed_count: int
    pending_count: int
    total_planned: float
    total_actual: float
    completion_rate: int
    efficiency: int
    efficiency_policy: str
    progress: int
    tier: str


class FilterCountsOut(BaseModel):
    all: int
    active: int
    completed: int


class BoardOut(BaseModel):
    """
    Everything needed to draw the tracker: the filtered task list for the
    current bucket, the carryover and scheduled sections and the analytics panel.
    """
    profile: str
    unit: str
    filter: str
    tasks: List[TaskOut]
    carryover: List[TaskOut]
    scheduled: List[TaskOut]
    counts: FilterCountsOut
    analytics: AnalyticsOut
