"""Unit tests for RowReorderer."""

import pytest

from core.exceptions import VikunjaError
from services.fetcher import BatchFetcher
from services.hierarchy import HierarchyResolver
from services.reorder import RowReorderer
from storage.cache import TaskStore
from conftest import FakeRow, FakeVikunja, ids_of, record


def make_reorderer(*records):
    backend = FakeVikunja(records)
    return RowReorderer(HierarchyResolver(BatchFetcher(backend, TaskStore()))), backend


def rows_for(*task_ids):
    return [FakeRow(i) for i in task_ids]


class TestRowReorderer:

    def test_child_moves_below_parent(self):
        reorderer, _ = make_reorderer(record(1), record(2, parent=1), record(3))
        row2, row1, row3 = rows = rows_for(2, 1, 3)
        result = reorderer.reorder(rows)
        assert ids_of(result.rows) == [1, 2, 3]
        assert (row1.depth, row2.depth, row3.depth) == (0, 1, 0)
        assert result.moved == [row1, row2]

    def test_siblings_keep_input_order(self):
        reorderer, _ = make_reorderer(record(1), record(2, parent=1), record(3, parent=1), record(4))
        result = reorderer.reorder(rows_for(1, 2, 4, 3))
        assert ids_of(result.rows) == [1, 2, 3, 4]

    def test_grandchildren_follow_their_parent(self):
        reorderer, _ = make_reorderer(record(1), record(2, parent=1), record(3, parent=2))
        rows = rows_for(3, 2, 1)
        result = reorderer.reorder(rows)
        assert ids_of(result.rows) == [1, 2, 3]
        assert [r.depth for r in result.rows] == [0, 1, 2]

    def test_nested_subtrees_stay_together(self):
        reorderer, _ = make_reorderer(
            record(1), record(2, parent=1), record(3, parent=2), record(4, parent=1), record(5),
        )
        result = reorderer.reorder(rows_for(5, 4, 3, 2, 1))
        assert ids_of(result.rows) == [5, 1, 4, 2, 3]

    def test_child_of_hidden_parent_stays_in_place(self):
        reorderer, _ = make_reorderer(record(1), record(2, parent=1), record(3))
        rows = rows_for(3, 2)
        result = reorderer.reorder(rows)
        assert ids_of(result.rows) == [3, 2]
        assert rows[1].depth == 1
        assert result.moved == []

    def test_cross_project_parent_not_indented(self):
        reorderer, _ = make_reorderer(record(1, project_id=4), record(2, parent=1, parent_project=4))
        rows = rows_for(2, 1)
        result = reorderer.reorder(rows)
        assert ids_of(result.rows) == [2, 1]
        assert [r.depth for r in rows] == [0, 0]

    def test_unresolvable_row_left_at_depth_zero(self):
        reorderer, _ = make_reorderer(record(1), record(2, parent=1))
        rows = rows_for(99, 2, 1)
        result = reorderer.reorder(rows)
        assert ids_of(result.rows) == [99, 1, 2]
        assert rows[0].depth == 0

    def test_second_run_moves_nothing(self):
        reorderer, _ = make_reorderer(
            record(1), record(2, parent=1), record(3, parent=2), record(4, parent=1),
            record(5), record(6, parent=5), record(7, parent=8), record(8, project_id=3),
        )
        first = reorderer.reorder(rows_for(7, 6, 3, 4, 2, 5, 1))
        assert first.moved
        second = reorderer.reorder(first.rows)
        assert second.moved == []
        assert ids_of(second.rows) == ids_of(first.rows)

    def test_empty(self):
        reorderer, backend = make_reorderer()
        assert reorderer.reorder([]).rows == []
        assert backend.calls == []

    def test_fetch_failure_propagates(self):
        reorderer, backend = make_reorderer(record(1))
        backend.fail_on.add(("list_tasks_by_ids", (1,)))
        with pytest.raises(VikunjaError):
            reorderer.reorder(rows_for(1))
