from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import nullcontext
from enum import Enum
from typing import Any, List, Optional, Sequence, Tuple, Union
from core.config import MAX_WORKERS
from core.exceptions import VikunjaError
from core.logs import get_logger
from core.models import ProjectTarget, RowTarget, TableTarget, Task
from services.fetcher import BatchFetcher
from services.hierarchy import HierarchyResolver
from services.reorder import ReorderResult, RowReorderer
from services.watcher import ChangeWatcher
from storage.cache import TaskStore
from storage.vikunja import VikunjaClient

log = get_logger("services.drag")

DropTarget = Union[RowTarget, TableTarget, ProjectTarget]


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    COMMITTING = "committing"


class DragRelationCoordinator:
    """Turns a drag of the bulk selection into parent/project changes.

    One coordinator per project view. A drop never rolls back: whatever the
    server ended up with is re-read and re-ordered afterwards.
    """
    def __init__(
        self,
        client: VikunjaClient,
        store: TaskStore,
        fetcher: BatchFetcher,
        resolver: HierarchyResolver,
        reorderer: RowReorderer,
        project_id: int,
        watcher: Optional[ChangeWatcher] = None,
        max_workers: int = MAX_WORKERS,
    ):
        self.client = client
        self.store = store
        self.fetcher = fetcher
        self.resolver = resolver
        self.reorderer = reorderer
        self.project_id = project_id
        self.watcher = watcher
        self.max_workers = max_workers
        self.state = DragState.IDLE
        self.dragged: Tuple[int, ...] = ()

    # ---- gesture ----
    def begin(self, origin_task_id: int, selection: Sequence[int]) -> bool:
        """Start dragging the whole selection; only allowed from a selected row."""
        if self.state is not DragState.IDLE or origin_task_id not in selection:
            return False
        self.dragged = tuple(dict.fromkeys(selection))
        self.state = DragState.DRAGGING
        log.debug("drag started with %s", self.dragged)
        return True

    def cancel(self):
        if self.state is DragState.DRAGGING:
            self.state = DragState.IDLE
            self.dragged = ()

    def can_drop(self, target: DropTarget) -> bool:
        if self.state is not DragState.DRAGGING:
            return False
        if isinstance(target, RowTarget):
            if not target.task_id or target.task_id in self.dragged:
                return False
            # a task may not end up below one of its own descendants
            chain = self.resolver.ancestor_chain(target.task_id)
            return not any(task_id in chain for task_id in self.dragged)
        if isinstance(target, TableTarget):
            return True
        if isinstance(target, ProjectTarget):
            return target.project_id > 0 and target.project_id != self.project_id
        return False

    def top_level(self, task_ids: Sequence[int]) -> List[int]:
        """Drop ids that descend from another id in the same list."""
        dragged = set(task_ids)
        result = []
        for task_id in task_ids:
            ancestors = self.resolver.ancestor_chain(task_id)
            if not dragged.intersection(ancestors):
                result.append(task_id)
        return result

    def drop(self, target: DropTarget, rows: Sequence[Any]) -> Optional[ReorderResult]:
        """Commit the drag onto target and return the refreshed row order.

        Returns None when there was no drag in progress or the target is invalid;
        nothing is sent to the server in that case.
        """
        if self.state is not DragState.DRAGGING:
            return None
        if not self.can_drop(target):
            log.debug("rejected drop of %s onto %s", self.dragged, target)
            self.cancel()
            return None

        self.state = DragState.COMMITTING
        paused = self.watcher.paused() if self.watcher else nullcontext()
        try:
            with paused:
                ids = self.top_level(self.dragged)
                tasks = [t for t in self.fetcher.resolve(ids) if t is not None]
                log.info("moving %s onto %s", [t.id for t in tasks], target)
                self._commit(tasks, target)

                remaining = list(rows)
                # Only the top-level tasks change project. Selected descendants
                # of a moved task keep their own project_id and stay in this view.
                if isinstance(target, ProjectTarget):
                    gone = {t.id for t in tasks}
                    remaining = [r for r in remaining if r.task_id not in gone]
                return self._settle(remaining)
        finally:
            self.state = DragState.IDLE
            self.dragged = ()

    # ---- internals ----
    def _commit(self, tasks: List[Task], target: DropTarget):
        if not tasks:
            return
        workers = max(1, min(self.max_workers, len(tasks)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(self._move_one, task, target): task.id for task in tasks}
            for future in as_completed(futures):
                try:
                    future.result()
                except VikunjaError as e:
                    log.warning("moving task %s failed: %s", futures[future], e)

    def _move_one(self, task: Task, target: DropTarget):
        # detach first so the task never has two parents at once
        if task.parent is not None:
            self.client.remove_relation(task.id, task.parent.id)
        if isinstance(target, RowTarget):
            self.client.add_relation(task.id, target.task_id)
        elif isinstance(target, ProjectTarget):
            payload = {k: v for k, v in task.data.items() if k != "related_tasks"}
            self.client.update_task(task.id, {**payload, "project_id": target.project_id})

    def _settle(self, rows: List[Any]) -> ReorderResult:
        self.store.clear()
        self.fetcher.resolve([r.task_id for r in rows])
        return self.reorderer.reorder(rows)
