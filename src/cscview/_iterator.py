"""Forward cursor over stored entries.

A ColumnIterator is a position into the stored-entry arrays of a view.
``begin_column(j)`` / ``end_column(j)`` bracket one column; ``begin()``
/ ``end()`` bracket the whole matrix in column-major order.

Advancing past the end sentinel is not checked here; loops must stop
when the cursor compares equal to the sentinel:

    >>> it, end = view.begin_column(1), view.end_column(1)
    >>> while it != end:
    ...     it.value *= 2.0    # writes into the host's value array
    ...     it.advance()

Writes through ``value`` alias the borrowed storage. There is no
locking; concurrent writers must work on disjoint columns.
"""

from functools import total_ordering
from typing import TYPE_CHECKING, Optional

import numpy as np

if TYPE_CHECKING:
    from ._view import SparseMatrixView

__all__ = ['ColumnIterator']


@total_ordering
class ColumnIterator:
    """Mutable forward cursor into a view's stored entries.

    Attributes:
        index: Offset into the row-index/value arrays.
    """

    __slots__ = ('_view', '_index', '_col')

    def __init__(self, view: 'SparseMatrixView', index: int, col: Optional[int] = None):
        self._view = view
        self._index = index
        self._col = col

    @property
    def index(self) -> int:
        return self._index

    @property
    def value(self) -> float:
        """Stored value at the cursor."""
        return float(self._view._storage.data[self._index])

    @value.setter
    def value(self, new_value: float) -> None:
        self._view._storage.data[self._index] = new_value

    def row(self) -> int:
        return int(self._view._storage.indices[self._index])

    def col(self) -> int:
        """Column of the current entry.

        Fixed for cursors from begin_column(); otherwise found by binary
        search over the column pointers (empty columns are skipped).
        """
        if self._col is not None:
            return self._col
        indptr = self._view._storage.indptr
        return int(np.searchsorted(indptr, self._index, side='right')) - 1

    def advance(self) -> 'ColumnIterator':
        """Move to the next stored entry (in place) and return self."""
        self._index += 1
        return self

    def copy(self) -> 'ColumnIterator':
        return ColumnIterator(self._view, self._index, self._col)

    def _check_comparable(self, other) -> bool:
        return isinstance(other, ColumnIterator) and other._view is self._view

    def __eq__(self, other) -> bool:
        if not self._check_comparable(other):
            return NotImplemented
        return self._index == other._index

    def __lt__(self, other) -> bool:
        if not self._check_comparable(other):
            return NotImplemented
        return self._index < other._index

    __hash__ = None

    def __repr__(self) -> str:
        col = self._col if self._col is not None else '?'
        return f"ColumnIterator(index={self._index}, col={col})"
