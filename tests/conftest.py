"""Shared test helpers: an in-memory Vikunja stand-in that records every call."""

import threading
from dataclasses import dataclass

from core.exceptions import VikunjaError


def record(task_id, project_id=9, parent=None, parent_project=None, **fields):
    """A /tasks record shaped like the API's, parent given as an id."""
    related = {}
    if parent is not None:
        related["parenttask"] = [{
            "id": parent,
            "project_id": parent_project if parent_project is not None else project_id,
        }]
    return {"id": task_id, "project_id": project_id, "title": f"Task {task_id}",
            "related_tasks": related, **fields}


class FakeVikunja:
    """Minimal backend honouring the calls the services make."""

    def __init__(self, records=(), page_limit=None):
        self.records = {r["id"]: dict(r) for r in records}
        self.page_limit = page_limit
        self.calls = []
        self.fail_on = set()  # (method, task_id)
        self._lock = threading.Lock()

    def _log(self, *call):
        with self._lock:
            self.calls.append(call)
        if call[:2] in self.fail_on:
            raise VikunjaError(f"{call[0]} failed", status_code=400)

    def calls_to(self, method):
        return [c for c in self.calls if c[0] == method]

    def set_parent(self, task_id, parent_id):
        rec = self.records[task_id]
        if parent_id is None:
            rec["related_tasks"] = {}
        else:
            parent = self.records[parent_id]
            rec["related_tasks"] = {"parenttask": [{"id": parent_id, "project_id": parent["project_id"]}]}

    # ---- client API ----
    def list_tasks_by_ids(self, task_ids):
        task_ids = list(task_ids)
        self._log("list_tasks_by_ids", tuple(task_ids))
        found = [dict(self.records[i]) for i in task_ids if i in self.records]
        if self.page_limit is not None:
            found = found[:self.page_limit]
        return found

    def get_user(self):
        self._log("get_user")
        return {"id": 1, "username": "alice", "name": "Alice", "settings": {"language": "de-DE"}}

    def add_relation(self, task_id, other_task_id, kind="parenttask"):
        self._log("add_relation", task_id, other_task_id)
        self.set_parent(task_id, other_task_id)

    def remove_relation(self, task_id, other_task_id, kind="parenttask"):
        self._log("remove_relation", task_id, other_task_id)
        self.set_parent(task_id, None)

    def update_task(self, task_id, fields):
        self._log("update_task", task_id)
        self.records[task_id].update(fields)
        return dict(self.records[task_id])

    def bulk_update(self, task_ids, fields):
        self._log("bulk_update", tuple(task_ids))
        for i in task_ids:
            self.records[i].update(fields)

    def create_task(self, project_id, title, **fields):
        self._log("create_task", project_id)
        new_id = max(self.records, default=0) + 1
        self.records[new_id] = record(new_id, project_id=project_id, title=title)
        return dict(self.records[new_id])


@dataclass(eq=False)
class FakeRow:
    task_id: int
    depth: int = -1


def ids_of(rows):
    return [r.task_id for r in rows]

