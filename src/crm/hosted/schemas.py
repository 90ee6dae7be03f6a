"""Pydantic schemas for the hosted backend -- response envelopes, tasks, discounts.

The hosted backend names fields in its own style (``Id``, ``Name``,
``due_date``); records are parsed through aliases so the rest of the
package works with snake_case attributes.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ── Envelope ────────────────────────────────────────────────────────────────


class RecordResult(BaseModel):
    """Outcome for a single record of a create/update/delete call."""

    model_config = ConfigDict(extra="allow")

    success: bool
    message: str | None = None
    data: dict[str, Any] | None = None


class Envelope(BaseModel):
    """Every hosted backend response: a success flag plus data or per-record results."""

    model_config = ConfigDict(extra="allow")

    success: bool
    message: str | None = None
    data: Any = None
    results: list[RecordResult] | None = None


def field_list(names: list[str]) -> list[dict[str, dict[str, str]]]:
    """The ``fields`` selector the backend expects for a list of column names."""
    return [{"field": {"Name": name}} for name in names]


def where_clause(field_name: str, operator: str, *values: Any) -> dict[str, Any]:
    return {"FieldName": field_name, "Operator": operator, "Values": list(values)}


# ── Tasks ───────────────────────────────────────────────────────────────────


class TaskStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Task(BaseModel):
    """A task record from the ``task`` table."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(validation_alias="Id")
    name: str | None = Field(default=None, validation_alias="Name")
    title: str | None = None
    description: str | None = None
    due_date: date | None = None
    priority: str | None = None
    status: str | None = None
    created_at: datetime | None = None


class TaskCreate(BaseModel):
    """Payload for creating a task. New tasks always start active."""

    title: str = Field(min_length=1)
    description: str = ""
    due_date: date | None = None
    priority: str = "medium"


class TaskUpdate(BaseModel):
    """Partial task update; only supplied fields are sent."""

    title: str | None = None
    description: str | None = None
    due_date: date | None = None
    priority: str | None = None
    status: TaskStatus | None = None


# ── Discounts ───────────────────────────────────────────────────────────────


class Discount(BaseModel):
    """A discount record from the ``app_discount`` table."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(validation_alias="Id")
    name: str | None = Field(default=None, validation_alias="Name")
    title: str | None = None
    description: str | None = None
    code: str | None = None
    discount: float | str | None = None
    expiry_date: date | None = None
    category: str | None = None
    url: str | None = None
