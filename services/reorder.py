from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence
from core.logs import get_logger
from services.hierarchy import HierarchyResolver

log = get_logger("services.reorder")


@dataclass
class ReorderResult:
    rows: List[Any]                                  # new top-to-bottom order
    moved: List[Any] = field(default_factory=list)   # rows whose index changed


class RowReorderer:
    """Places every child row directly below its parent row and stamps depths.

    A row is anything with a ``task_id`` attribute and a writable ``depth``.
    """
    def __init__(self, resolver: HierarchyResolver):
        self.resolver = resolver

    def reorder(self, rows: Sequence[Any]) -> ReorderResult:
        original = list(rows)
        if not original:
            return ReorderResult(rows=[])

        fetcher = self.resolver.fetcher
        self.resolver.prefetch(row.task_id for row in original)
        levels = [(row, self.resolver.depth(row.task_id)) for row in original]

        by_task: Dict[int, Any] = {}
        for row in original:
            by_task.setdefault(row.task_id, row)

        # Shallow rows settle first; within a level go bottom-up so that
        # repeated "insert right after parent" keeps siblings in input order.
        order = list(original)
        for row, level in sorted(reversed(levels), key=lambda pair: pair[1]):
            if level > 0:
                task = fetcher.resolve_one(row.task_id)
                parent_row = by_task.get(task.parent_id) if task else None
                if parent_row is not None and parent_row is not row:
                    order.remove(row)
                    order.insert(order.index(parent_row) + 1, row)
            row.depth = level

        moved = [row for i, row in enumerate(order) if original[i] is not row]
        if moved:
            log.debug("reordered %d of %d rows", len(moved), len(order))
        return ReorderResult(rows=order, moved=moved)
