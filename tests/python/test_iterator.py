"""
Tests for ColumnIterator and the iteration helpers.
"""

import pytest
import numpy as np

from cscview import ColumnIterator, IndexOutOfBounds


def _walk(view, j):
    entries = []
    it, end = view.begin_column(j), view.end_column(j)
    while it != end:
        entries.append((it.index, it.row(), it.col(), it.value))
        it.advance()
    return entries


class TestColumnIterator:
    """Test begin_column/end_column traversal."""

    def test_visits_column_range(self, random_view):
        indptr = random_view.indptr
        for j in range(random_view.cols):
            entries = _walk(random_view, j)
            assert [e[0] for e in entries] == list(range(indptr[j], indptr[j + 1]))
            rows = [e[1] for e in entries]
            assert rows == sorted(set(rows))
            assert all(e[2] == j for e in entries)
            assert [e[3] for e in entries] == list(random_view.data[indptr[j]:indptr[j + 1]])

    def test_empty_column(self, random_view):
        assert random_view.begin_column(7) == random_view.end_column(7)
        assert _walk(random_view, 7) == []

    def test_scenario_column(self, diagonal_view):
        assert _walk(diagonal_view, 1) == [(1, 2, 1, 7.0)]

    def test_restartable(self, small_view):
        first = _walk(small_view, 3)
        second = _walk(small_view, 3)
        assert first == second
        assert len(first) == 2

    def test_write_through_value(self, diagonal_host, diagonal_view):
        it, end = diagonal_view.begin_column(2), diagonal_view.end_column(2)
        while it != end:
            it.value = it.value * 2.0
            it.advance()
        assert diagonal_host.x[2] == 18.0
        assert diagonal_view.at(1, 2) == 18.0

    def test_ordering(self, small_view):
        begin = small_view.begin_column(0)
        end = small_view.end_column(0)
        assert begin < end
        assert end > begin
        assert begin <= begin.copy()
        assert begin != end

    def test_copy_is_independent(self, small_view):
        it = small_view.begin_column(0)
        other = it.copy()
        it.advance()
        assert other.index == it.index - 1

    def test_column_bounds(self, small_view):
        with pytest.raises(IndexOutOfBounds):
            small_view.begin_column(4)
        with pytest.raises(IndexOutOfBounds):
            small_view.end_column(-1)

    def test_iterators_of_different_views(self, small_view, diagonal_view):
        assert small_view.begin() != diagonal_view.begin()

    def test_unhashable(self, small_view):
        with pytest.raises(TypeError):
            hash(small_view.begin())


class TestWholeMatrixIterator:
    """Test begin()/end() over every stored entry."""

    def test_visits_everything(self, small_view, dense_small):
        it, end = small_view.begin(), small_view.end()
        seen = []
        while it != end:
            seen.append((it.row(), it.col(), it.value))
            it.advance()
        assert len(seen) == small_view.nnz
        for r, c, value in seen:
            assert dense_small[r, c] == value

    def test_col_skips_empty_columns(self, random_view, scipy_random):
        dense = scipy_random.toarray()
        it, end = random_view.begin(), random_view.end()
        while it != end:
            assert it.col() != 7
            assert dense[it.row(), it.col()] == it.value
            it.advance()

    def test_isinstance(self, small_view):
        assert isinstance(small_view.begin(), ColumnIterator)
        assert small_view.end().index == small_view.nnz


class TestIterationHelpers:
    """Test iter_column / iter_nonzero generators."""

    def test_iter_column(self, small_view):
        assert list(small_view.iter_column(0)) == [(0, 1.0), (2, 5.0)]
        assert list(small_view.iter_column(1)) == [(1, 3.0)]

    def test_iter_nonzero_column_major(self, small_view):
        entries = list(small_view.iter_nonzero())
        assert entries == [
            (0, 0, 1.0), (2, 0, 5.0),
            (1, 1, 3.0),
            (0, 2, 2.0),
            (1, 3, 4.0), (2, 3, 6.0),
        ]

    def test_iter_column_bounds(self, small_view):
        # raised on the call itself, not on first next()
        with pytest.raises(IndexOutOfBounds):
            small_view.iter_column(9)
        with pytest.raises(IndexOutOfBounds):
            small_view.iter_column(-1)

    def test_iter_column_empty(self, random_view):
        assert list(random_view.iter_column(7)) == []

    def test_nonzeros_is_aliased(self, small_host, small_view):
        values = small_view.nonzeros()
        assert values is small_host.x
        values *= 10.0
        np.testing.assert_array_equal(small_view.column_sums(), [60.0, 30.0, 20.0, 100.0])
