from __future__ import annotations
from typing import Any, Callable, Dict, Optional
from core.models import Task, User


class TaskStore:
    """Per-view cache of task records keyed by id, plus the current user.

    Nothing is evicted; the store is cleared wholesale after any structural
    change (parent, relation or project) because depths anywhere in the tree
    may be stale after one edge moves.
    """
    def __init__(self, user_loader: Optional[Callable[[], User]] = None):
        self._tasks: Dict[int, Task] = {}
        self._user: Optional[User] = None
        self._user_loader = user_loader

    def get(self, task_id: int) -> Optional[Task]:
        return self._tasks.get(task_id)

    def put(self, task_id: int, task: Task):
        self._tasks[task_id] = task

    def patch(self, task_id: int, fields: Dict[str, Any]) -> bool:
        """Shallow-merge fields into a cached task. Returns False if it is not cached."""
        task = self._tasks.get(task_id)
        if task is None:
            return False
        self._tasks[task_id] = task.merged(fields)
        return True

    def clear(self):
        self._tasks.clear()

    def reset(self):
        """Drop tasks and the cached user."""
        self._tasks.clear()
        self._user = None

    def current_user(self) -> Optional[User]:
        if self._user is None and self._user_loader is not None:
            self._user = self._user_loader()
        return self._user

    def __contains__(self, task_id: int) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)
