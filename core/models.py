from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ParentRef:
    id: int
    project_id: Optional[int] = None  # as embedded in the child's record


@dataclass
class Task:
    id: int
    project_id: int
    parent: Optional[ParentRef] = None
    data: Dict[str, Any] = field(default_factory=dict)  # raw API record

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> "Task":
        """Build a Task from a /tasks record.

        The API ships parents as ``related_tasks.parenttask`` (a list); only the
        first entry counts as the parent.
        """
        related = record.get("related_tasks") or {}
        parents = related.get("parenttask") or []
        parent = None
        if parents:
            first = parents[0]
            parent = ParentRef(id=int(first["id"]), project_id=first.get("project_id"))
        return cls(
            id=int(record["id"]),
            project_id=int(record.get("project_id") or 0),
            parent=parent,
            data=dict(record),
        )

    @property
    def parent_id(self) -> Optional[int]:
        return self.parent.id if self.parent else None

    @property
    def title(self) -> str:
        return self.data.get("title") or ""

    @property
    def done(self) -> bool:
        return bool(self.data.get("done"))

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def merged(self, fields: Dict[str, Any]) -> "Task":
        return Task.from_api({**self.data, **fields})


@dataclass
class User:
    id: int
    username: str
    name: str = ""
    language: Optional[str] = None

    @classmethod
    def from_api(cls, record: Dict[str, Any]) -> "User":
        settings = record.get("settings") or {}
        return cls(
            id=int(record["id"]),
            username=record.get("username") or "",
            name=record.get("name") or "",
            language=settings.get("language") or None,
        )


@dataclass
class Project:
    id: int
    title: str
    hex_color: Optional[str] = None


# ---- drop targets ----

@dataclass(frozen=True)
class RowTarget:
    """Drop onto another task's row: reparent under that task."""
    task_id: int


@dataclass(frozen=True)
class TableTarget:
    """Drop onto the empty table area: detach from any parent."""


@dataclass(frozen=True)
class ProjectTarget:
    """Drop onto a project entry: move the tasks to that project."""
    project_id: int
