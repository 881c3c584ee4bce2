"""Action model, request schemas and the record returned by the store."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel
from sqlmodel import Field, SQLModel


class ActionStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    done = "done"


class ActionPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


# Presentation labels used by the bundled client. The API accepts any origin.
ORIGIN_LABELS = {
    "retour_experience": "Retour d'expérience (REX)",
    "cartographie_risques": "Cartographie des risques",
    "audit": "Audit",
    "incident": "Incident / Non-conformité",
    "autre": "Autre",
}


def utc_now_iso() -> str:
    """Current instant as an ISO-8601 UTC string with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Action(SQLModel, table=True):
    """Action database table."""
    __tablename__ = "actions"
    __table_args__ = {"sqlite_autoincrement": True}

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str = Field(default="")
    origin: str = Field(index=True)
    status: str = Field(default=ActionStatus.todo.value, index=True)
    priority: str = Field(default=ActionPriority.medium.value)
    due_date: Optional[str] = Field(default=None)
    created_at: str = Field(default_factory=utc_now_iso, index=True)


class ActionRead(BaseModel):
    """A persisted action, serialized with camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    title: str
    description: str
    origin: str
    status: str
    priority: str
    due_date: Optional[str] = None
    created_at: str


class _ActionInput(BaseModel):
    """Base for request bodies: keeps string values only, trimmed."""
    model_config = ConfigDict(alias_generator=to_camel, extra="ignore")

    due_date: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def keep_trimmed_strings(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {key: value.strip() for key, value in data.items() if isinstance(value, str)}

    @field_validator("due_date")
    @classmethod
    def blank_due_date(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class ActionCreate(_ActionInput):
    """Schema for creating an action. Empty optional fields fall back to defaults."""
    title: str = ""
    description: str = ""
    origin: str = ""
    status: str = ""
    priority: str = ""


class ActionPatch(_ActionInput):
    """Schema for a partial update.

    Its members are exactly the fields a client may change; ``id`` and
    ``created_at`` are not among them. Only members that were explicitly set
    are applied. An empty ``dueDate`` clears the due date.
    """
    title: Optional[str] = None
    description: Optional[str] = None
    origin: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None

    def changes(self) -> dict[str, Optional[str]]:
        """Return the explicitly set fields keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class ActionFilter(BaseModel):
    """Listing filters. Absent or empty values impose no constraint."""
    status: Optional[str] = None
    origin: Optional[str] = None
    search: Optional[str] = None


class ActionResponse(BaseModel):
    action: ActionRead


class ActionListResponse(BaseModel):
    actions: list[ActionRead]
