"""Unit tests for HierarchyResolver."""

from services.fetcher import BatchFetcher
from services.hierarchy import HierarchyResolver
from storage.cache import TaskStore
from conftest import FakeVikunja, record


def make_resolver(*records):
    backend = FakeVikunja(records)
    return HierarchyResolver(BatchFetcher(backend, TaskStore())), backend


class TestDepth:

    def test_chain_depths(self):
        resolver, _ = make_resolver(record(1), record(2, parent=1), record(3, parent=2))
        assert resolver.depth(1) == 0
        assert resolver.depth(2) == 1
        assert resolver.depth(3) == 2

    def test_cross_project_parent_is_not_hierarchy(self):
        resolver, _ = make_resolver(
            record(1), record(2, parent=1, project_id=4), record(3, parent=2, parent_project=4),
        )
        assert resolver.depth(3) == 0

    def test_cross_project_grandparent_stops_count(self):
        resolver, _ = make_resolver(
            record(1, project_id=4), record(2, parent=1, parent_project=4), record(3, parent=2),
        )
        assert resolver.depth(3) == 1

    def test_parent_project_unknown_falls_back_to_record(self):
        child = record(2, parent=1)
        child["related_tasks"]["parenttask"][0].pop("project_id")
        resolver, _ = make_resolver(record(1), child)
        assert resolver.depth(2) == 1

    def test_unresolvable_task_is_depth_zero(self):
        resolver, _ = make_resolver()
        assert resolver.depth(99) == 0

    def test_missing_parent_record_stops_walk(self):
        resolver, _ = make_resolver(record(2, parent=1))
        assert resolver.depth(2) == 1

    def test_cycle_terminates(self):
        resolver, _ = make_resolver(record(1, parent=3), record(2, parent=1), record(3, parent=2))
        assert resolver.depth(1) == 2


class TestAncestorChain:

    def test_closest_first(self):
        resolver, _ = make_resolver(record(1), record(2, parent=1), record(3, parent=2))
        assert resolver.ancestor_chain(3) == [2, 1]
        assert resolver.ancestor_chain(1) == []

    def test_crosses_projects(self):
        resolver, _ = make_resolver(record(1, project_id=4), record(2, parent=1, parent_project=4))
        assert resolver.ancestor_chain(2) == [1]

    def test_cycle_terminates(self):
        resolver, _ = make_resolver(record(1, parent=2), record(2, parent=1))
        assert resolver.ancestor_chain(1) == [2]

    def test_self_parent(self):
        resolver, _ = make_resolver(record(1, parent=1))
        assert resolver.ancestor_chain(1) == []
        assert resolver.depth(1) == 0


def test_prefetch_batches_one_round_per_level():
    resolver, backend = make_resolver(
        record(1), record(2, parent=1), record(3, parent=2), record(4, parent=1), record(5),
    )
    resolver.prefetch([3, 4, 5])
    assert backend.calls == [
        ("list_tasks_by_ids", (3, 4, 5)),
        ("list_tasks_by_ids", (2, 1)),
    ]
    calls_before = len(backend.calls)
    assert resolver.depth(3) == 2
    assert len(backend.calls) == calls_before
