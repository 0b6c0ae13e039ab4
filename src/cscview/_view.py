"""Zero-copy CSC Matrix View.

SparseMatrixView interprets the three flat arrays of a compressed
sparse column matrix (row indices, column pointers, values) plus a
shape as a logical matrix. It never copies those arrays on attach:
the view holds the host's own ndarrays, so writes through the view
(``nonzeros()``, ``ColumnIterator.value``) are visible to the host.

Access Costs:
    - at(i, j): O(nnz in column j), early exit on sorted rows
    - column(j): O(rows + nnz in column j)
    - row(i): O(cols * average column nnz)
      Deliberately asymmetric with column(); CSC favours columns.
    - column_sums / row_sums: O(nnz), row_sums by scatter
    - crossprod: merge-join over pairs of sorted columns

Lifetime:
    A borrowed view must not be used to hand data back to a host that
    has been discarded; ``is_valid`` / ``source`` report on that. The
    arrays themselves stay alive while the view references them.

Example:
    >>> host = DgCMatrix(i=[0, 2, 1], p=[0, 1, 2, 3], x=[5.0, 7.0, 9.0], Dim=(3, 3))
    >>> view = SparseMatrixView.from_host(host)
    >>> view.at(1, 2)
    9.0
    >>> view.column(1)
    array([0., 0., 7.])
"""

import logging
from typing import Any, Iterator, Optional, Sequence, Tuple, Union

import numpy as np
import scipy.sparse as sp

from ._backend import CSCStorage, Ownership
from ._config import get_config
from ._errors import InvalidShape, NotSquare, check_index
from ._host import (
    DgCMatrix,
    attach_fields,
    borrow_index_array,
    borrow_value_array,
    detach_host,
)
from ._iterator import ColumnIterator
from ._ownership import OwnershipTracker
from . import _ops

logger = logging.getLogger("cscview.view")

__all__ = ['SparseMatrixView', 'attach']


IndexLike = Union[int, Sequence[int], np.ndarray]


class SparseMatrixView:
    """Read/write view over a host-owned CSC matrix.

    Attributes:
        shape: Matrix dimensions (rows, cols).
        nnz: Number of stored entries.
        indices: Row indices (the host's array).
        indptr: Column pointers (the host's array).
        data: Stored values (the host's array).
        dimnames: (row labels, column labels) or None.
        ownership: BORROWED for attached views, OWNED for copies.
    """

    __slots__ = ('_storage', '_ownership', '__weakref__')

    # =========================================================================
    # Initialization
    # =========================================================================

    def __init__(self, storage: CSCStorage, ownership: Optional[OwnershipTracker] = None):
        """Initialize from prepared storage.

        Note:
            Prefer attach(), from_host() or from_dense().
        """
        self._storage = storage
        if ownership is None:
            ownership = OwnershipTracker.owned() if storage.is_owned else OwnershipTracker.borrowed(None)
        self._ownership = ownership

    @classmethod
    def attach(
        cls,
        i: Any,
        p: Any,
        x: Any,
        nrow: int,
        ncol: int,
        dimnames: Optional[tuple] = None,
    ) -> 'SparseMatrixView':
        """Attach to existing CSC arrays without copying them.

        Only the sizes are checked here (len(p) == ncol + 1 and
        len(i) == len(x)); the host is trusted for the rest unless strict
        mode is on.

        Args:
            i: Row indices, integer ndarray.
            p: Column pointers, integer ndarray of length ncol + 1.
            x: Values, float64 ndarray of the same length as ``i``.
            nrow: Number of rows.
            ncol: Number of columns.
            dimnames: Optional (row labels, column labels).

        Raises:
            InvalidShape: If the array sizes disagree with the shape.
            TypeError: If an ndarray has the wrong element type.
        """
        return cls._attach((i, p, x, (nrow, ncol), dimnames), source=None)

    @classmethod
    def from_host(cls, host: Any) -> 'SparseMatrixView':
        """Attach to a host object (DgCMatrix, scipy CSC, or slot mapping)."""
        return cls._attach(attach_fields(host), source=host)

    @classmethod
    def from_scipy(cls, mat: Any) -> 'SparseMatrixView':
        """Attach to a scipy CSC matrix; same as from_host()."""
        return cls.from_host(mat)

    @classmethod
    def from_dense(cls, dense: Any, dimnames: Optional[tuple] = None) -> 'SparseMatrixView':
        """Create a view that owns freshly built arrays.

        Args:
            dense: 2D array-like.
            dimnames: Optional (row labels, column labels).

        Returns:
            SparseMatrixView with OWNED storage.
        """
        host = DgCMatrix.from_dense(dense, dimnames=dimnames)
        storage = CSCStorage(
            indices=host.i,
            indptr=host.p,
            data=host.x,
            shape=host.Dim,
            dimnames=dimnames,
            ownership=Ownership.OWNED,
        )
        return cls(storage, OwnershipTracker.owned())

    @classmethod
    def _attach(cls, fields, source: Any) -> 'SparseMatrixView':
        i, p, x, shape, dimnames = fields
        indices = borrow_index_array(i, 'i')
        indptr = borrow_index_array(p, 'p')
        data = borrow_value_array(x, 'x')
        nrow, ncol = cls._check_shape(indices, indptr, data, shape)

        storage = CSCStorage(
            indices=indices,
            indptr=indptr,
            data=data,
            shape=(nrow, ncol),
            dimnames=dimnames,
            ownership=Ownership.BORROWED,
        )
        view = cls(storage, OwnershipTracker.borrowed(source))

        if get_config().strict:
            logger.debug(f"Strict mode: validating {view!r}")
            view.validate()

        logger.debug(f"Attached {view!r}")
        return view

    @staticmethod
    def _check_shape(indices, indptr, data, shape) -> Tuple[int, int]:
        nrow, ncol = int(shape[0]), int(shape[1])
        if nrow < 0 or ncol < 0:
            raise InvalidShape(f"Invalid shape: ({nrow}, {ncol})")
        for name, arr in (('i', indices), ('p', indptr), ('x', data)):
            if arr.ndim != 1:
                raise InvalidShape(f"{name} must be 1-dimensional, got {arr.ndim}D")
        if len(indptr) != ncol + 1:
            raise InvalidShape(f"p size mismatch: expected {ncol + 1}, got {len(indptr)}")
        if len(indices) != len(data):
            raise InvalidShape(
                f"i and x size mismatch: {len(indices)} row indices, {len(data)} values"
            )
        return nrow, ncol

    def validate(self) -> 'SparseMatrixView':
        """Full CSC well-formedness check, O(nnz).

        Returns:
            self (for chaining).

        Raises:
            InvalidShape: On the first violated invariant.
        """
        indices = self._storage.indices
        indptr = self._storage.indptr
        nnz = self.nnz
        nrow = self.rows

        if int(indptr[0]) != 0:
            raise InvalidShape(f"p[0] must be 0, got {int(indptr[0])}")
        if np.any(np.diff(indptr.astype(np.int64)) < 0):
            raise InvalidShape("p must be non-decreasing")
        if int(indptr[-1]) != nnz:
            raise InvalidShape(f"p[-1] must equal nnz ({nnz}), got {int(indptr[-1])}")
        if nnz > 0 and (int(indices.min()) < 0 or int(indices.max()) >= nrow):
            raise InvalidShape(f"row indices must lie in [0, {nrow})")

        for j in range(self.cols):
            seg = indices[int(indptr[j]):int(indptr[j + 1])]
            if len(seg) > 1 and np.any(np.diff(seg.astype(np.int64)) <= 0):
                raise InvalidShape(f"row indices of column {j} are not strictly increasing")

        dimnames = self._storage.dimnames
        if dimnames is not None:
            rownames, colnames = dimnames
            if rownames is not None and len(rownames) != nrow:
                raise InvalidShape(f"{len(rownames)} row names for {nrow} rows")
            if colnames is not None and len(colnames) != self.cols:
                raise InvalidShape(f"{len(colnames)} column names for {self.cols} columns")
        return self

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def shape(self) -> Tuple[int, int]:
        """Matrix dimensions (rows, cols)."""
        return self._storage.shape

    @property
    def rows(self) -> int:
        """Number of rows."""
        return self._storage.shape[0]

    @property
    def cols(self) -> int:
        """Number of columns."""
        return self._storage.shape[1]

    nrow = rows
    ncol = cols

    @property
    def nnz(self) -> int:
        """Number of stored entries."""
        return self._storage.nnz

    def n_nonzero(self) -> int:
        return self._storage.nnz

    @property
    def indices(self) -> np.ndarray:
        return self._storage.indices

    @property
    def indptr(self) -> np.ndarray:
        return self._storage.indptr

    @property
    def data(self) -> np.ndarray:
        return self._storage.data

    @property
    def dimnames(self) -> Optional[tuple]:
        return self._storage.dimnames

    @property
    def ownership(self) -> Ownership:
        """Current ownership model."""
        return self._storage.ownership

    @property
    def is_owned(self) -> bool:
        return self._storage.is_owned

    @property
    def is_valid(self) -> bool:
        """False once a borrowed host object has been garbage collected."""
        return self._ownership.is_valid

    @property
    def source(self) -> Any:
        """Host object this view was attached to (None if unknown or owned)."""
        return self._ownership.source

    @property
    def nbytes(self) -> int:
        return self._storage.nbytes

    def nonzeros(self) -> np.ndarray:
        """The stored values, aliased (writes reach the host)."""
        return self._storage.data

    # =========================================================================
    # Element Access
    # =========================================================================

    def _get_element(self, i: int, j: int) -> float:
        """Get single element; indices already checked."""
        indices = self._storage.indices
        indptr = self._storage.indptr
        for k in range(int(indptr[j]), int(indptr[j + 1])):
            r = indices[k]
            if r == i:
                return float(self._storage.data[k])
            if r > i:
                break
        return 0.0

    def at(self, row: IndexLike, col: IndexLike) -> Union[float, np.ndarray]:
        """Element access with scalar or vector indices.

        Args:
            row: Row index or sequence of row indices.
            col: Column index or sequence of column indices.

        Returns:
            float for (int, int); 1D array when one side is a sequence;
            2D array (len(row), len(col)) when both are.

        Raises:
            IndexOutOfBounds: If any index is negative or past the end.
        """
        row_scalar = np.ndim(row) == 0
        col_scalar = np.ndim(col) == 0

        if row_scalar and col_scalar:
            return self._get_element(
                check_index(row, self.rows, 'row'),
                check_index(col, self.cols, 'column'),
            )

        if row_scalar:
            i = check_index(row, self.rows, 'row')
            cols = [check_index(c, self.cols, 'column') for c in col]
            return np.array([self._get_element(i, j) for j in cols], dtype=np.float64)

        if col_scalar:
            j = check_index(col, self.cols, 'column')
            rows = [check_index(r, self.rows, 'row') for r in row]
            return np.array([self._get_element(i, j) for i in rows], dtype=np.float64)

        rows = [check_index(r, self.rows, 'row') for r in row]
        cols = [check_index(c, self.cols, 'column') for c in col]
        result = np.zeros((len(rows), len(cols)), dtype=np.float64)
        for a, i in enumerate(rows):
            for b, j in enumerate(cols):
                result[a, b] = self._get_element(i, j)
        return result

    def __getitem__(self, key) -> Union[float, np.ndarray]:
        """Support view[j], view[i, j], view[:, j], view[i, :], view[[..], [..]].

        A single index selects a column.
        """
        if isinstance(key, tuple) and len(key) == 2:
            row_key, col_key = key
            full_rows = isinstance(row_key, slice) and row_key == slice(None)
            full_cols = isinstance(col_key, slice) and col_key == slice(None)

            if full_rows and not isinstance(col_key, slice):
                if np.ndim(col_key) == 0:
                    return self.column(col_key)
                return self.select_columns(col_key)
            if full_cols and not isinstance(row_key, slice):
                if np.ndim(row_key) == 0:
                    return self.row(row_key)
                return self.select_rows(row_key)
            if not isinstance(row_key, slice) and not isinstance(col_key, slice):
                return self.at(row_key, col_key)

        elif not isinstance(key, (slice, tuple)) and np.ndim(key) == 0:
            return self.column(key)

        raise TypeError(f"Invalid index: {key!r}")

    # =========================================================================
    # Row / Column Materialization
    # =========================================================================

    def column(self, j: int) -> np.ndarray:
        """Dense copy of column ``j`` (length rows)."""
        j = check_index(j, self.cols, 'column')
        indices = self._storage.indices
        data = self._storage.data
        indptr = self._storage.indptr

        result = np.zeros(self.rows, dtype=np.float64)
        for k in range(int(indptr[j]), int(indptr[j + 1])):
            result[indices[k]] = data[k]
        return result

    def row(self, i: int) -> np.ndarray:
        """Dense copy of row ``i`` (length cols).

        Scans every column, stopping early once row indices pass ``i``.
        """
        i = check_index(i, self.rows, 'row')
        indices = self._storage.indices
        data = self._storage.data
        indptr = self._storage.indptr

        result = np.zeros(self.cols, dtype=np.float64)
        for j in range(self.cols):
            for k in range(int(indptr[j]), int(indptr[j + 1])):
                r = indices[k]
                if r == i:
                    result[j] = data[k]
                    break
                if r > i:
                    break
        return result

    def select_columns(self, cols: Sequence[int]) -> np.ndarray:
        """Dense (rows, len(cols)) block of the selected columns."""
        result = np.zeros((self.rows, len(cols)), dtype=np.float64)
        for b, j in enumerate(cols):
            result[:, b] = self.column(j)
        return result

    def select_rows(self, rows: Sequence[int]) -> np.ndarray:
        """Dense (len(rows), cols) block of the selected rows."""
        result = np.zeros((len(rows), self.cols), dtype=np.float64)
        for a, i in enumerate(rows):
            result[a, :] = self.row(i)
        return result

    def diagonal(self) -> np.ndarray:
        """Main diagonal (length min(rows, cols))."""
        n = min(self.rows, self.cols)
        result = np.zeros(n, dtype=np.float64)
        for k in range(n):
            result[k] = self._get_element(k, k)
        return result

    def trace(self) -> float:
        """Sum of the diagonal.

        Raises:
            NotSquare: If rows != cols.
        """
        if self.rows != self.cols:
            raise NotSquare(f"trace() needs a square matrix, got shape {self.shape}")
        return float(self.diagonal().sum())

    # =========================================================================
    # Iteration
    # =========================================================================

    def begin_column(self, j: int) -> ColumnIterator:
        """Cursor at the first stored entry of column ``j``."""
        j = check_index(j, self.cols, 'column')
        return ColumnIterator(self, int(self._storage.indptr[j]), j)

    def end_column(self, j: int) -> ColumnIterator:
        """Sentinel one past the last stored entry of column ``j``."""
        j = check_index(j, self.cols, 'column')
        return ColumnIterator(self, int(self._storage.indptr[j + 1]), j)

    def begin(self) -> ColumnIterator:
        """Cursor at the first stored entry of the matrix."""
        return ColumnIterator(self, 0)

    def end(self) -> ColumnIterator:
        """Sentinel one past the last stored entry of the matrix."""
        return ColumnIterator(self, self.nnz)

    def iter_column(self, j: int) -> Iterator[Tuple[int, float]]:
        """Iterate (row, value) over the stored entries of column ``j``.

        Raises:
            IndexOutOfBounds: Immediately, before any iteration.
        """
        j = check_index(j, self.cols, 'column')
        indices = self._storage.indices
        data = self._storage.data
        start, stop = int(self._storage.indptr[j]), int(self._storage.indptr[j + 1])

        def entries():
            for k in range(start, stop):
                yield int(indices[k]), float(data[k])

        return entries()

    def iter_nonzero(self) -> Iterator[Tuple[int, int, float]]:
        """Yield (row, col, value) for every stored entry, column-major."""
        for j in range(self.cols):
            for r, value in self.iter_column(j):
                yield r, j, value

    # =========================================================================
    # Reductions
    # =========================================================================

    def sum(self, axis: Optional[int] = None) -> Union[float, np.ndarray]:
        """Sum of stored values.

        Args:
            axis: None for the total, 0 for column sums, 1 for row sums.
        """
        if axis is None:
            return _ops.sum_all(self)
        if axis == 0:
            return _ops.sum_cols(self)
        if axis == 1:
            return _ops.sum_rows(self)
        raise ValueError(f"axis must be None, 0 or 1, got {axis}")

    def mean(self, axis: Optional[int] = None) -> Union[float, np.ndarray]:
        """Mean over all rows * cols entries, implicit zeros included."""
        if axis is None:
            n_total = self.rows * self.cols
            return self.sum() / n_total if n_total > 0 else 0.0
        if axis == 0:
            return _ops.mean_cols(self)
        if axis == 1:
            return _ops.mean_rows(self)
        raise ValueError(f"axis must be None, 0 or 1, got {axis}")

    def column_sums(self) -> np.ndarray:
        return _ops.sum_cols(self)

    def row_sums(self) -> np.ndarray:
        return _ops.sum_rows(self)

    def column_means(self) -> np.ndarray:
        return _ops.mean_cols(self)

    def row_means(self) -> np.ndarray:
        return _ops.mean_rows(self)

    def crossprod(self) -> np.ndarray:
        """``A.T @ A`` as a dense symmetric (cols, cols) array."""
        return _ops.crossprod(self)

    # =========================================================================
    # Conversion Methods
    # =========================================================================

    def detach(self) -> DgCMatrix:
        """Hand the data back as a fresh host object.

        The new DgCMatrix holds the same three arrays (no numeric copy);
        only shape and labels are copied.
        """
        host = detach_host(
            self._storage.indices,
            self._storage.indptr,
            self._storage.data,
            self._storage.shape,
            self._storage.dimnames,
        )
        logger.debug(f"Detached {self!r} into {host!r}")
        return host

    def to_scipy(self) -> sp.csc_matrix:
        """Convert to scipy.sparse.csc_matrix sharing the value array."""
        return sp.csc_matrix(
            (self._storage.data, self._storage.indices, self._storage.indptr),
            shape=self.shape,
            copy=False,
        )

    def to_dense(self) -> np.ndarray:
        """Dense float64 copy, shape (rows, cols)."""
        result = np.zeros(self.shape, dtype=np.float64)
        for r, j, value in self.iter_nonzero():
            result[r, j] = value
        return result

    toarray = to_dense

    def copy(self) -> 'SparseMatrixView':
        """Create a deep copy that owns its arrays."""
        storage = self._storage.copy(index_dtype=get_config().index_dtype)
        return SparseMatrixView(storage, OwnershipTracker.owned())

    # =========================================================================
    # Representation
    # =========================================================================

    def __repr__(self) -> str:
        return (
            f"SparseMatrixView(shape={self.shape}, nnz={self.nnz}, "
            f"ownership={self.ownership.value})"
        )

    def info(self) -> str:
        """Get detailed information string."""
        lines = [
            "SparseMatrixView:",
            f"  shape: {self.shape}",
            f"  nnz: {self.nnz}",
            f"  index dtype: {self._storage.indices.dtype}",
            f"  ownership: {self.ownership.value}",
            f"  host alive: {self.is_valid}",
            f"  memory: {self.nbytes / 1024:.2f} KB",
        ]
        return '\n'.join(lines)


def attach(host: Any) -> SparseMatrixView:
    """Attach a view to a host object without copying its arrays.

    Example:
        >>> view = cscview.attach(scipy_csc)
        >>> view.data is scipy_csc.data
        True
    """
    return SparseMatrixView.from_host(host)
