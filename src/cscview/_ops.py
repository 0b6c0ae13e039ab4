"""Reductions over a CSC view.

All accumulation is float64 addition in stored order (increasing row
within a column). NaN/Inf propagate as IEEE arithmetic dictates.

Functions:
    - sum_all: sum of every stored value
    - sum_cols, sum_rows: per-column / per-row sums
    - mean_cols, mean_rows: sums divided by the full axis length
    - crossprod: t(A) %*% A by sparse merge-join
"""

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from ._view import SparseMatrixView

__all__ = [
    'sum_all',
    'sum_cols',
    'sum_rows',
    'mean_cols',
    'mean_rows',
    'crossprod',
]


# =============================================================================
# Sums
# =============================================================================

def sum_all(mat: 'SparseMatrixView') -> float:
    """Sum of all stored values; implicit zeros contribute nothing."""
    data = mat._storage.data
    total = 0.0
    for k in range(len(data)):
        total += data[k]
    return float(total)


def sum_cols(mat: 'SparseMatrixView') -> np.ndarray:
    """Compute column sums.

    Args:
        mat: CSC view.

    Returns:
        float64 array of column sums (length = cols).
    """
    indptr = mat._storage.indptr
    data = mat._storage.data

    result = np.zeros(mat.cols, dtype=np.float64)
    for j in range(mat.cols):
        total = 0.0
        for k in range(int(indptr[j]), int(indptr[j + 1])):
            total += data[k]
        result[j] = total
    return result


def sum_rows(mat: 'SparseMatrixView') -> np.ndarray:
    """Compute row sums.

    One scatter pass over the stored entries, so O(nnz). Calling
    ``row(i)`` per row would cost O(cols * nnz) instead.

    Args:
        mat: CSC view.

    Returns:
        float64 array of row sums (length = rows).
    """
    indices = mat._storage.indices
    data = mat._storage.data

    result = np.zeros(mat.rows, dtype=np.float64)
    for k in range(len(data)):
        result[indices[k]] += data[k]
    return result


def mean_cols(mat: 'SparseMatrixView') -> np.ndarray:
    """Column means over all ``rows`` entries (implicit zeros included)."""
    sums = sum_cols(mat)
    if mat.rows == 0:
        return np.zeros(mat.cols, dtype=np.float64)
    return sums / float(mat.rows)


def mean_rows(mat: 'SparseMatrixView') -> np.ndarray:
    """Row means over all ``cols`` entries (implicit zeros included)."""
    sums = sum_rows(mat)
    if mat.cols == 0:
        return np.zeros(mat.rows, dtype=np.float64)
    return sums / float(mat.cols)


# =============================================================================
# Cross Product
# =============================================================================

def _column_dot(indices, data, a_start, a_end, b_start, b_end) -> float:
    """Dot product of two sorted sparse columns by merge-join."""
    total = 0.0
    a, b = a_start, b_start
    while a < a_end and b < b_end:
        row_a = indices[a]
        row_b = indices[b]
        if row_a == row_b:
            total += data[a] * data[b]
            a += 1
            b += 1
        elif row_a < row_b:
            a += 1
        else:
            b += 1
    return total


def crossprod(mat: 'SparseMatrixView') -> np.ndarray:
    """Compute ``A.T @ A`` as a dense symmetric (cols x cols) array.

    Entry (c1, c2) is the dot product of columns c1 and c2. Only the
    upper triangle is computed and then mirrored. Each off-diagonal
    entry costs O(nnz(c1) + nnz(c2)); no column is densified.

    Args:
        mat: CSC view.

    Returns:
        float64 array of shape (cols, cols).
    """
    indptr = mat._storage.indptr
    indices = mat._storage.indices
    data = mat._storage.data
    ncol = mat.cols

    bounds = [(int(indptr[j]), int(indptr[j + 1])) for j in range(ncol)]
    result = np.zeros((ncol, ncol), dtype=np.float64)

    for c1 in range(ncol):
        start1, end1 = bounds[c1]

        diag = 0.0
        for k in range(start1, end1):
            diag += data[k] * data[k]
        result[c1, c1] = diag

        if start1 == end1:
            continue

        for c2 in range(c1 + 1, ncol):
            start2, end2 = bounds[c2]
            if start2 == end2:
                continue
            value = _column_dot(indices, data, start1, end1, start2, end2)
            result[c1, c2] = value
            result[c2, c1] = value

    return result
