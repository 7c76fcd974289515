from typing import Iterable, List, Set
from services.fetcher import BatchFetcher


class HierarchyResolver:
    """Walks the single-parent relation to compute ancestors and indent depth.

    Both walks keep a visited set so cyclic data from the server terminates.
    """
    def __init__(self, fetcher: BatchFetcher):
        self.fetcher = fetcher

    def ancestor_chain(self, task_id: int) -> List[int]:
        """Ancestor ids, closest first."""
        chain: List[int] = []
        visited = {task_id}
        task = self.fetcher.resolve_one(task_id)
        while task is not None and task.parent is not None:
            parent_id = task.parent.id
            if parent_id in visited:
                break
            visited.add(parent_id)
            chain.append(parent_id)
            task = self.fetcher.resolve_one(parent_id)
        return chain

    def depth(self, task_id: int) -> int:
        """Number of ancestors in the task's own project, 0 for top-level tasks."""
        base = self.fetcher.resolve_one(task_id)
        if base is None:
            return 0
        level = 0
        visited = {task_id}
        task = base
        while task is not None and task.parent is not None:
            parent = task.parent
            if parent.id in visited:
                break
            project_id = parent.project_id
            if project_id is None:
                parent_task = self.fetcher.resolve_one(parent.id)
                project_id = parent_task.project_id if parent_task else None
            if project_id != base.project_id:
                break
            visited.add(parent.id)
            level += 1
            task = self.fetcher.resolve_one(parent.id)
        return level

    def prefetch(self, task_ids: Iterable[int]):
        """Load the given tasks and all their ancestors, one batch per tree level."""
        seen: Set[int] = set()
        frontier = list(dict.fromkeys(task_ids))
        while frontier:
            seen.update(frontier)
            tasks = self.fetcher.resolve(frontier)
            frontier = list(dict.fromkeys(
                t.parent.id for t in tasks
                if t is not None and t.parent is not None and t.parent.id not in seen
            ))
