"""
Tests for reductions: sums, means and the cross product.
"""

import math

import pytest
import numpy as np

from cscview import SparseMatrixView, DgCMatrix, sum_cols, sum_rows, crossprod


class TestSums:
    """Test total, column and row sums."""

    def test_scenario_sums(self, diagonal_view):
        np.testing.assert_array_equal(diagonal_view.column_sums(), [5.0, 7.0, 9.0])
        np.testing.assert_array_equal(diagonal_view.row_sums(), [5.0, 9.0, 7.0])
        assert diagonal_view.sum() == 21.0

    def test_sum_axis(self, small_view, dense_small):
        assert small_view.sum() == dense_small.sum()
        np.testing.assert_array_equal(small_view.sum(axis=0), dense_small.sum(axis=0))
        np.testing.assert_array_equal(small_view.sum(axis=1), dense_small.sum(axis=1))

    def test_sum_bad_axis(self, small_view):
        with pytest.raises(ValueError):
            small_view.sum(axis=2)

    def test_column_sums_match_columns(self, random_view):
        sums = random_view.column_sums()
        assert sums.shape == (random_view.cols,)
        for j in range(random_view.cols):
            assert sums[j] == pytest.approx(random_view.column(j).sum())
        assert sums[7] == 0.0

    def test_row_sums_match_rows(self, random_view):
        sums = random_view.row_sums()
        assert sums.shape == (random_view.rows,)
        for i in range(random_view.rows):
            assert sums[i] == pytest.approx(random_view.row(i).sum())

    def test_against_scipy(self, random_view, scipy_random):
        np.testing.assert_allclose(random_view.column_sums(), np.asarray(scipy_random.sum(axis=0)).ravel())
        np.testing.assert_allclose(random_view.row_sums(), np.asarray(scipy_random.sum(axis=1)).ravel())
        assert random_view.sum() == pytest.approx(scipy_random.sum())

    def test_module_functions(self, small_view):
        np.testing.assert_array_equal(sum_cols(small_view), small_view.column_sums())
        np.testing.assert_array_equal(sum_rows(small_view), small_view.row_sums())

    def test_nan_propagates(self):
        view = SparseMatrixView.attach(
            np.array([0, 1]), np.array([0, 2]), np.array([1.0, np.nan]), 2, 1
        )
        assert math.isnan(view.column_sums()[0])
        assert view.row_sums()[0] == 1.0
        assert math.isnan(view.row_sums()[1])


class TestMeans:
    """Test column/row means including implicit zeros."""

    def test_means(self, small_view, dense_small):
        np.testing.assert_allclose(small_view.column_means(), dense_small.mean(axis=0))
        np.testing.assert_allclose(small_view.row_means(), dense_small.mean(axis=1))
        assert small_view.mean() == pytest.approx(dense_small.mean())
        np.testing.assert_allclose(small_view.mean(axis=0), dense_small.mean(axis=0))
        np.testing.assert_allclose(small_view.mean(axis=1), dense_small.mean(axis=1))

    def test_zero_rows(self):
        view = SparseMatrixView.attach(np.array([], dtype=np.int32),
                                       np.array([0, 0, 0], dtype=np.int32),
                                       np.array([]), 0, 2)
        np.testing.assert_array_equal(view.column_means(), [0.0, 0.0])
        assert view.mean() == 0.0


class TestCrossProduct:
    """Test the merge-join cross product."""

    def test_small_against_dense(self, small_view, dense_small):
        result = small_view.crossprod()
        assert result.shape == (4, 4)
        np.testing.assert_array_equal(result, dense_small.T @ dense_small)

    def test_overlapping_and_disjoint_columns(self, small_view):
        result = small_view.crossprod()
        # columns 0 and 1 share no rows
        assert result[0, 1] == 0.0
        # columns 0 and 3 overlap on row 2 only
        assert result[0, 3] == 5.0 * 6.0
        # columns 1 and 3 overlap on row 1 only
        assert result[1, 3] == 3.0 * 4.0

    def test_diagonal_is_sum_of_squares(self, random_view):
        result = random_view.crossprod()
        for j in range(random_view.cols):
            col = random_view.column(j)
            assert result[j, j] == pytest.approx(np.dot(col, col))

    def test_symmetric(self, random_view):
        result = random_view.crossprod()
        np.testing.assert_array_equal(result, result.T)

    def test_matches_column_dot_products(self, random_view):
        result = random_view.crossprod()
        for c1 in range(random_view.cols):
            for c2 in range(random_view.cols):
                expected = np.dot(random_view.column(c1), random_view.column(c2))
                assert result[c1, c2] == pytest.approx(expected, abs=1e-12)

    def test_against_scipy(self, random_view, scipy_random):
        expected = (scipy_random.T @ scipy_random).toarray()
        np.testing.assert_allclose(random_view.crossprod(), expected)

    def test_empty_column_row_and_col(self, random_view):
        result = random_view.crossprod()
        np.testing.assert_array_equal(result[7, :], 0.0)
        np.testing.assert_array_equal(result[:, 7], 0.0)

    def test_module_function(self, diagonal_view):
        np.testing.assert_array_equal(crossprod(diagonal_view), np.diag([25.0, 49.0, 81.0]))

    def test_long_column_vs_short_column(self):
        host = DgCMatrix.from_dense([
            [1.0, 0.0],
            [2.0, 0.0],
            [3.0, 0.0],
            [4.0, 10.0],
            [5.0, 0.0],
        ])
        view = SparseMatrixView.from_host(host)
        result = view.crossprod()
        assert result[0, 1] == 40.0
        assert result[1, 0] == 40.0
        assert result[0, 0] == 55.0
        assert result[1, 1] == 100.0
