# src/todo_sync/tasks/task_models.py

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

from .errors import MalformedDataError, MalformedExternalData

# Earliest marker that starts a composed suffix: " [type]", " (priority)" or " - note".
_SUFFIX_MARKER = re.compile(r" \[| \(| - ")


class TaskFilter(StrEnum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise ValueError(f"unknown filter: {raw!r} (use all, active or completed)") from None

    def matches(self, task: Task) -> bool:
        if self is TaskFilter.ACTIVE:
            return not task.completed
        if self is TaskFilter.COMPLETED:
            return task.completed
        return True


def utc_timestamp() -> str:
    """ISO-8601 UTC with milliseconds and a trailing Z, e.g. 2024-05-01T10:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


TaskId = int | float


def parse_task_id(raw: Any) -> TaskId | None:
    """
    Coerce a stored or typed id ("1715000000000", 17.5, ...) into a TaskId.

    Whole numbers become int; legacy ids with a fractional disambiguator stay float.
    """
    # bool is an int subclass; reject it explicitly.
    if raw is None or isinstance(raw, bool):
        return None
    try:
        val = float(str(raw).strip()) if not isinstance(raw, (int, float)) else float(raw)
    except ValueError:
        return None
    if not math.isfinite(val):
        return None
    return int(val) if val.is_integer() else val


@dataclass(slots=True)
class Task:
    id: TaskId
    text: str
    completed: bool
    created_at: str

    # Foreign key of the review task this one was imported from.
    external_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at,
        }
        if self.external_key is not None:
            data["externalKey"] = self.external_key
        return data

    @classmethod
    def from_dict(cls, raw: Any) -> Task:
        if not isinstance(raw, dict):
            raise MalformedDataError(f"task record must be an object, got {type(raw).__name__}")

        task_id = parse_task_id(raw.get("id"))
        if task_id is None:
            raise MalformedDataError(f"task record has invalid id: {raw.get('id')!r}")

        text = raw.get("text")
        if not isinstance(text, str) or not text.strip():
            raise MalformedDataError(f"task {task_id} has empty text")

        ext = raw.get("externalKey")
        return cls(
            id=task_id,
            text=text,
            # Only a JSON true counts; strings such as "false" do not complete a task.
            completed=raw.get("completed") is True,
            created_at=str(raw.get("createdAt") or ""),
            external_key=str(ext) if ext is not None else None,
        )


@dataclass(frozen=True, slots=True)
class TaskStats:
    total: int
    completed: int
    pending: int


def _opt_str(raw: dict[str, Any], key: str) -> str | None:
    val = raw.get(key)
    if val is None:
        return None
    s = str(val).strip()
    return s or None


@dataclass(slots=True)
class ExternalTask:
    """
    A record from the review-task collection.

    The shape belongs to an external producer: it is parsed here only to derive
    the composed text and the identity; export patches the raw record instead.
    """

    name: str
    id: Any = None
    type: str | None = None
    priority: str | None = None
    note: str | None = None
    completed: bool | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> ExternalTask:
        if not isinstance(raw, dict):
            raise MalformedExternalData(
                f"review task must be an object, got {type(raw).__name__}"
            )
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            raise MalformedExternalData(f"review task has no usable name: {raw!r}")

        completed = raw.get("completed")
        return cls(
            name=name.strip(),
            id=raw.get("id"),
            type=_opt_str(raw, "type"),
            priority=_opt_str(raw, "priority"),
            note=_opt_str(raw, "note"),
            completed=None if completed is None else completed is True,
        )

    @property
    def has_id(self) -> bool:
        return self.id is not None and str(self.id).strip() != ""

    def composed_text(self) -> str:
        return compose_text(self.name, type_=self.type, priority=self.priority, note=self.note)

    def external_key(self) -> str:
        """
        Stable identity of this record.

        Records carrying an id are keyed by it. Records without one get a composite
        key built from name/type/priority, so repeated imports recognise them.
        """
        if self.has_id:
            return f"id:{self.id}"
        return f"name:{self.name}|{self.type or ''}|{self.priority or ''}"


def compose_text(
    name: str,
    *,
    type_: str | None = None,
    priority: str | None = None,
    note: str | None = None,
) -> str:
    """Build "<name>[ [<type>]][ (<priority>)][ - <note>]"."""
    text = name
    if type_:
        text += f" [{type_}]"
    if priority:
        text += f" ({priority})"
    if note:
        text += f" - {note}"
    return text


def base_name(text: str) -> str:
    """Inverse of compose_text: everything before the first suffix marker."""
    m = _SUFFIX_MARKER.search(text)
    return (text[: m.start()] if m else text).strip()
