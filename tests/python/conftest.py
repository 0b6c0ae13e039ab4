"""
Pytest configuration and shared fixtures for cscview tests.
"""

import pytest
import numpy as np
import scipy.sparse as sp
from pathlib import Path
import sys

# Add src to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root / "src"))

from cscview import DgCMatrix, SparseMatrixView, get_config


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    """Every test starts from default configuration."""
    monkeypatch.delenv('CSCVIEW_STRICT', raising=False)
    get_config().reset()
    yield
    get_config().reset()


@pytest.fixture
def diagonal_host():
    """3x3 host with entries (0,0)=5, (2,1)=7, (1,2)=9.

    Matrix:
    [[5, 0, 0],
     [0, 0, 9],
     [0, 7, 0]]
    """
    return DgCMatrix(
        i=np.array([0, 2, 1], dtype=np.int32),
        p=np.array([0, 1, 2, 3], dtype=np.int32),
        x=np.array([5.0, 7.0, 9.0]),
        Dim=(3, 3),
    )


@pytest.fixture
def diagonal_view(diagonal_host):
    return SparseMatrixView.from_host(diagonal_host)


@pytest.fixture
def dense_small():
    """3x4 dense matrix; columns 0/2 and 0/3 share rows, columns 0/1 don't."""
    return np.array([
        [1.0, 0.0, 2.0, 0.0],
        [0.0, 3.0, 0.0, 4.0],
        [5.0, 0.0, 0.0, 6.0],
    ])


@pytest.fixture
def small_host(dense_small):
    return DgCMatrix.from_dense(dense_small)


@pytest.fixture
def small_view(small_host):
    return SparseMatrixView.from_host(small_host)


@pytest.fixture
def scipy_random():
    """Seeded random 30x20 scipy CSC matrix with an empty column."""
    rng = np.random.default_rng(42)
    dense = rng.standard_normal((30, 20))
    dense[rng.random((30, 20)) > 0.2] = 0.0
    dense[:, 7] = 0.0
    return sp.csc_matrix(dense)


@pytest.fixture
def random_view(scipy_random):
    return SparseMatrixView.from_host(scipy_random)

