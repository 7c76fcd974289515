from typing import List, Optional, Sequence
from core.logs import get_logger
from core.models import Task
from storage.cache import TaskStore
from storage.vikunja import VikunjaClient

log = get_logger("services.fetcher")


class BatchFetcher:
    """Resolves task ids to records, going to the API only for ids not cached."""
    def __init__(self, client: VikunjaClient, store: TaskStore):
        self.client = client
        self.store = store

    def resolve(self, ids: Sequence[int]) -> List[Optional[Task]]:
        """Return one entry per requested id (None for ids the API never returned)."""
        missing = list(dict.fromkeys(i for i in ids if i not in self.store))
        if missing:
            self._fetch(missing)
        return [self.store.get(i) for i in ids]

    def resolve_one(self, task_id: int) -> Optional[Task]:
        return self.resolve([task_id])[0]

    def _fetch(self, task_ids: List[int]):
        # The API caps how many records one call returns, so keep asking for
        # whatever is still outstanding until a round makes no progress.
        remaining = list(task_ids)
        rounds = 0
        while remaining:
            rounds += 1
            records = self.client.list_tasks_by_ids(remaining)
            fetched = set()
            for record in records:
                task = Task.from_api(record)
                self.store.put(task.id, task)
                fetched.add(task.id)
            progress = [i for i in remaining if i in fetched]
            remaining = [i for i in remaining if i not in fetched]
            log.debug("fetch round %d: %d resolved, %d outstanding", rounds, len(progress), len(remaining))
            if not progress:
                break
        if remaining:
            log.debug("unresolvable task ids: %s", remaining)
