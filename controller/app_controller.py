import datetime as dt
from typing import Any, Dict, Iterable, List, Optional, Sequence
from core.logs import get_logger
from core.models import Project, Task, User
from services.drag import DragRelationCoordinator
from services.fetcher import BatchFetcher
from services.hierarchy import HierarchyResolver
from services.reorder import ReorderResult, RowReorderer
from services.watcher import ChangeWatcher
from storage.cache import TaskStore
from storage.vikunja import VikunjaClient

log = get_logger("controller")

DATE_FIELDS = ("start_date", "due_date", "end_date")
ZERO_DATE = "0001-01-01T00:00:00Z"


class AppController:
    """Wires the task cache and ordering services to the UI.

    Every project view gets its own cache and services (see `view()`); only
    the current user and the change watcher are shared between views.
    """
    def __init__(self, client: VikunjaClient):
        self.client = client
        self.watcher = ChangeWatcher()
        self.views: Dict[int, "ProjectView"] = {}
        self._user: Optional[User] = None

    def current_user(self) -> Optional[User]:
        if self._user is None:
            self._user = User.from_api(self.client.get_user())
        return self._user

    # ---- projects / views ----
    def list_projects(self) -> List[Project]:
        return [
            Project(id=p["id"], title=p.get("title", ""), hex_color=p.get("hex_color") or None)
            for p in self.client.list_projects()
            if p.get("id", 0) > 0 and not p.get("is_archived")
        ]

    def list_project_tasks(self, project_id: int) -> List[Task]:
        return [Task.from_api(r) for r in self.client.list_project_tasks(project_id)]

    def view(self, project_id: int) -> "ProjectView":
        if project_id not in self.views:
            self.views[project_id] = ProjectView(self, project_id)
        return self.views[project_id]


class ProjectView:
    """Cache, ordering services and edit operations of one project table."""
    def __init__(self, controller: AppController, project_id: int):
        self.client = controller.client
        self.watcher = controller.watcher
        self.project_id = project_id
        self.store = TaskStore(user_loader=controller.current_user)
        self.fetcher = BatchFetcher(self.client, self.store)
        self.resolver = HierarchyResolver(self.fetcher)
        self.reorderer = RowReorderer(self.resolver)
        self.coordinator = DragRelationCoordinator(
            self.client, self.store, self.fetcher, self.resolver, self.reorderer,
            project_id, watcher=self.watcher,
        )

    def open_view(self, rows: Sequence[Any], tasks: Iterable[Task] = ()) -> ReorderResult:
        """(Re)load the view: start from an empty cache, then order the rows.

        `tasks` are records already listed for the rows; they are cached as-is
        so only ids missing from them (parents elsewhere) are fetched.
        """
        with self.watcher.paused():
            self.store.clear()
            for task in tasks:
                self.store.put(task.id, task)
            self.fetcher.resolve([r.task_id for r in rows])
            return self.reorderer.reorder(rows)

    def get_task(self, task_id: int) -> Optional[Task]:
        return self.fetcher.resolve_one(task_id)

    # ---- edits ----
    def add_task(self, title: str) -> Task:
        title = title.strip()
        if not title:
            raise ValueError("Task title must not be empty")
        created = Task.from_api(self.client.create_task(self.project_id, title))
        self.store.put(created.id, created)
        return created

    def update_task(self, task_id: int, **fields) -> Task:
        """Send the full record with fields applied; the API replaces the task wholesale."""
        task = self.fetcher.resolve_one(task_id)
        payload: Dict[str, Any] = {**task.data, **fields} if task else dict(fields)
        updated = Task.from_api(self.client.update_task(task_id, payload))
        if not self.store.patch(task_id, updated.data):
            self.store.put(task_id, updated)
        return updated

    def bulk_update(self, task_ids: Sequence[int], **fields):
        ids = list(dict.fromkeys(task_ids))
        if not ids:
            return
        log.debug("bulk update of %s: %s", ids, fields)
        self.client.bulk_update(ids, fields)
        for task_id in ids:
            self.store.patch(task_id, fields)

    def rename_task(self, task_id: int, title: str) -> Task:
        title = title.strip()
        if not title:
            raise ValueError("Task title must not be empty")
        return self.update_task(task_id, title=title)

    def set_done(self, task_ids: Sequence[int], done: bool) -> List[int]:
        """Mark tasks done/undone one by one; returns the ids actually changed."""
        now = dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        changed = []
        for task, task_id in zip(self.fetcher.resolve(task_ids), task_ids):
            if task is None or (done and task.done):
                continue
            self.update_task(task_id, done=done, done_at=now if done else ZERO_DATE)
            changed.append(task_id)
        return changed

    def set_priority(self, task_ids: Sequence[int], priority: int):
        if not 0 <= priority <= 5:
            raise ValueError(f"Invalid priority: {priority}")
        self.bulk_update(task_ids, priority=priority)

    def set_progress(self, task_ids: Sequence[int], percent: int):
        # stored as a fraction of 1
        if not 0 <= percent <= 100:
            raise ValueError(f"Progress must be between 0 and 100, got {percent}")
        self.bulk_update(task_ids, percent_done=percent / 100)

    def set_date(self, task_ids: Sequence[int], field: str, value: Optional[dt.datetime]):
        if field not in DATE_FIELDS:
            raise ValueError(f"Unknown date field: {field}")
        if value is None:
            iso = ZERO_DATE
        else:
            iso = value.astimezone(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        self.bulk_update(task_ids, **{field: iso})


def parse_date(text: str) -> Optional[dt.datetime]:
    """Parse a date typed by the user ("YYYY-MM-DD" or "YYYY-MM-DD HH:MM", local time).

    Blank input means "no date". Raises ValueError for anything else.
    """
    text = text.strip()
    if not text:
        return None
    value = dt.datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.astimezone()
    return value
