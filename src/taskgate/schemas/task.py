"""Pydantic schemas for tasks.

Learn: Separate schemas for create/patch/read keeps the API clean.
- TaskCreate: what you POST to create a task
- TaskPatch: what you PATCH to modify a task (sparse, tri-state fields)
- TaskRead: what the API returns (camelCase timestamps)

TaskPatch must tell three states apart for every field:
  absent           → leave the field alone
  present, null    → clear it (only description is nullable)
  present, value   → replace it
Pydantic records which fields the client actually sent in
model_fields_set, so changes() returns exactly the present fields and an
explicit null survives as None instead of disappearing.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from taskgate.db.models import TITLE_MAX_LENGTH


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    completed: bool = False


class TaskPatch(BaseModel):
    """Partial update — only fields present in the request are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = None
    completed: Optional[bool] = None

    @model_validator(mode="after")
    def reject_null_for_required_fields(self):
        for name in ("title", "completed"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields the client sent, explicit nulls included."""
        return self.model_dump(exclude_unset=True)


class TaskRead(BaseModel):
    id: int
    owner_id: int = Field(serialization_alias="ownerId")
    title: str
    description: Optional[str]
    completed: bool
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    model_config = {"from_attributes": True}

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive values; every timestamp is stored in UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
