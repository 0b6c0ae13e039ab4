"""
Host Object Model and Conversion Boundary

The host owns the sparse matrix; a view only borrows its arrays. Three
host representations are understood:

1. DgCMatrix: tagged object with slots i, p, x, Dim, Dimnames
   (the layout of the Matrix package's dgCMatrix class)
2. scipy.sparse CSC matrices/arrays: indices, indptr, data, shape
3. Plain mappings with keys 'i', 'p', 'x', 'Dim' and optional 'Dimnames'

The host type is resolved once per attach; no per-access dispatch.

Zero-copy:
    Numeric arrays are passed through by identity. A dtype mismatch is
    a TypeError, never a silent conversion, because converting would
    copy and break aliasing with the host.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence, Tuple

import numpy as np
import scipy.sparse as sp

from ._backend import copy_dimnames
from ._config import get_config
from ._errors import InvalidShape

logger = logging.getLogger("cscview.host")

__all__ = [
    'DgCMatrix',
    'attach_fields',
    'detach_host',
    'borrow_index_array',
    'borrow_value_array',
    'is_host_like',
]


HostFields = Tuple[np.ndarray, np.ndarray, np.ndarray, Tuple[int, int], Optional[tuple]]


# =============================================================================
# Array Borrowing
# =============================================================================

def borrow_index_array(arr: Any, name: str) -> np.ndarray:
    """Return ``arr`` itself if it is an integer ndarray.

    Non-ndarray input (lists, tuples) can't be aliased anyway, so it is
    converted into a new array of the configured index dtype.

    Raises:
        TypeError: If ``arr`` is an ndarray with a non-integer dtype.
    """
    if isinstance(arr, np.ndarray):
        if arr.dtype.kind not in 'iu':
            raise TypeError(f"{name} must have an integer dtype, got {arr.dtype}")
        return arr
    return np.asarray(arr, dtype=get_config().index_dtype)


def borrow_value_array(arr: Any, name: str = 'x') -> np.ndarray:
    """Return ``arr`` itself if it is a float64 ndarray.

    Raises:
        TypeError: If ``arr`` is an ndarray of any other dtype.
    """
    if isinstance(arr, np.ndarray):
        if arr.dtype != np.float64:
            raise TypeError(f"{name} must be float64, got {arr.dtype}")
        return arr
    return np.asarray(arr, dtype=np.float64)


# =============================================================================
# Host Object
# =============================================================================

class DgCMatrix:
    """
    Host-side tagged sparse matrix (compressed sparse column).

    Slot names follow the dgCMatrix class of R's Matrix package:

    Attributes:
        i: Row indices of the stored entries (0-based)
        p: Column pointers, length ncol + 1
        x: Stored values (float64)
        Dim: (nrow, ncol)
        Dimnames: (row labels, column labels) or None

    The host owns its arrays. Constructing from ndarrays of the right
    dtype keeps them as they are; anything else is converted once here.

    Example:
        >>> host = DgCMatrix(i=[0, 2, 1], p=[0, 1, 2, 3], x=[5.0, 7.0, 9.0], Dim=(3, 3))
        >>> view = SparseMatrixView.from_host(host)
        >>> view.indices is host.i
        True
    """

    __slots__ = ('i', 'p', 'x', 'Dim', 'Dimnames', '__weakref__')

    tag = 'dgCMatrix'

    def __init__(
        self,
        i: Any,
        p: Any,
        x: Any,
        Dim: Sequence[int],
        Dimnames: Optional[tuple] = None,
    ):
        index_dtype = get_config().index_dtype
        self.i = i if _is_int_array(i) else np.asarray(i, dtype=index_dtype)
        self.p = p if _is_int_array(p) else np.asarray(p, dtype=index_dtype)
        self.x = np.asarray(x, dtype=np.float64)
        self.Dim = (int(Dim[0]), int(Dim[1]))
        self.Dimnames = Dimnames

    # -------------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------------

    @classmethod
    def from_dense(cls, dense: Any, dimnames: Optional[tuple] = None) -> 'DgCMatrix':
        """Build a host matrix from a dense 2D array-like (exact zeros dropped)."""
        arr = np.asarray(dense, dtype=np.float64)
        if arr.ndim != 2:
            raise ValueError(f"Expected a 2D array, got {arr.ndim}D")

        nrow, ncol = arr.shape
        i_list = []
        x_list = []
        p_list = [0]
        for j in range(ncol):
            for r in range(nrow):
                val = arr[r, j]
                if val != 0.0:
                    i_list.append(r)
                    x_list.append(val)
            p_list.append(len(x_list))

        index_dtype = get_config().index_dtype
        return cls(
            i=np.array(i_list, dtype=index_dtype),
            p=np.array(p_list, dtype=index_dtype),
            x=np.array(x_list, dtype=np.float64),
            Dim=(nrow, ncol),
            Dimnames=dimnames,
        )

    @classmethod
    def from_scipy(cls, mat: Any) -> 'DgCMatrix':
        """Wrap the arrays of a scipy CSC matrix without copying them."""
        i, p, x, shape, _ = _scipy_fields(mat)
        return cls(i=i, p=p, x=x, Dim=shape)

    def to_scipy(self) -> sp.csc_matrix:
        """Wrap the slots in a scipy.sparse.csc_matrix.

        The value array is shared. scipy may pick a narrower index
        dtype, in which case it copies the index arrays.
        """
        return sp.csc_matrix((self.x, self.i, self.p), shape=self.Dim, copy=False)

    def toarray(self) -> np.ndarray:
        """Dense float64 copy."""
        out = np.zeros(self.Dim, dtype=np.float64)
        for j in range(self.Dim[1]):
            for k in range(int(self.p[j]), int(self.p[j + 1])):
                out[self.i[k], j] = self.x[k]
        return out

    def __repr__(self) -> str:
        return f"DgCMatrix(Dim={self.Dim}, nnz={len(self.x)})"


def _is_int_array(arr: Any) -> bool:
    return isinstance(arr, np.ndarray) and arr.dtype.kind in 'iu'


# =============================================================================
# Tagged-Type Dispatch
# =============================================================================

def is_host_like(obj: Any) -> bool:
    """Check if ``obj`` is a host representation attach() understands."""
    if isinstance(obj, DgCMatrix):
        return True
    if sp.issparse(obj):
        return obj.format == 'csc'
    if isinstance(obj, Mapping):
        return all(key in obj for key in ('i', 'p', 'x', 'Dim'))
    return False


def attach_fields(obj: Any) -> HostFields:
    """
    Extract (i, p, x, shape, dimnames) from a host object.

    Args:
        obj: DgCMatrix, scipy CSC matrix, or mapping with CSC slots

    Returns:
        Tuple of the borrowed arrays plus shape and labels

    Raises:
        TypeError: If the host type or its element types are unsupported
    """
    if isinstance(obj, DgCMatrix):
        fields = (obj.i, obj.p, obj.x, obj.Dim, obj.Dimnames)
    elif sp.issparse(obj):
        fields = _scipy_fields(obj)
    elif isinstance(obj, Mapping):
        missing = [key for key in ('i', 'p', 'x', 'Dim') if key not in obj]
        if missing:
            raise TypeError(f"Host mapping is missing slots: {missing}")
        dim = obj['Dim']
        fields = (obj['i'], obj['p'], obj['x'], (int(dim[0]), int(dim[1])), obj.get('Dimnames'))
    else:
        raise TypeError(f"Cannot attach to object of type {type(obj).__name__}")

    i, p, x, shape, dimnames = fields
    logger.debug(f"Resolved host {type(obj).__name__} with shape {shape}")
    return (
        borrow_index_array(i, 'i'),
        borrow_index_array(p, 'p'),
        borrow_value_array(x, 'x'),
        shape,
        dimnames,
    )


def _scipy_fields(mat: Any) -> HostFields:
    if not sp.issparse(mat) or mat.format != 'csc':
        raise TypeError(f"Expected a scipy CSC matrix, got {type(mat).__name__}")
    if mat.data.dtype != np.float64:
        raise TypeError(f"scipy matrix values must be float64, got {mat.data.dtype}")

    if not mat.has_sorted_indices:
        # In place: the host's own buffers are reordered, nothing is copied
        logger.warning("scipy host has unsorted row indices; sorting in place")
        mat.sort_indices()

    if not mat.has_canonical_format and _has_duplicate_rows(mat.indices, mat.indptr):
        raise InvalidShape(
            "scipy host has duplicate (row, col) entries; call sum_duplicates() first"
        )

    return mat.indices, mat.indptr, mat.data, (int(mat.shape[0]), int(mat.shape[1])), None


def _has_duplicate_rows(indices: np.ndarray, indptr: np.ndarray) -> bool:
    """Repeated row index inside a column; rows must already be sorted."""
    nnz = len(indices)
    if nnz < 2:
        return False
    same = indices[1:] == indices[:-1]
    # Equal neighbours straddling a column boundary are not duplicates
    starts = indptr[1:-1]
    starts = starts[(starts > 0) & (starts < nnz)]
    same[starts - 1] = False
    return bool(same.any())


def detach_host(indices, indptr, data, shape, dimnames) -> DgCMatrix:
    """Fresh host object around the same arrays; only metadata is copied."""
    host = DgCMatrix.__new__(DgCMatrix)
    host.i = indices
    host.p = indptr
    host.x = data
    host.Dim = (int(shape[0]), int(shape[1]))
    host.Dimnames = copy_dimnames(dimnames)
    return host
