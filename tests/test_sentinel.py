"""Tests for the validity sentinel helpers."""

import numpy as np
import pytest

from spatialstate import sentinel


class TestScalarSentinels:
    """Test suite for scalar sentinel values."""

    def test_unknown_is_nan(self):
        """Unknown sentinel is a NaN that never equals itself."""
        value = sentinel.unknown()
        assert np.isnan(value)
        assert value != value
        assert sentinel.is_unknown(value)

    def test_infinity(self):
        """Infinity helper survives scaling."""
        inf = sentinel.infinity()
        assert sentinel.is_infinity(inf)
        assert sentinel.is_infinity(inf * 10)
        assert inf == inf

    def test_arithmetic_nan_is_not_unknown(self):
        """A NaN produced by invalid arithmetic is not the unknown sentinel."""
        with np.errstate(invalid="ignore"):
            produced = np.float64(np.inf) - np.float64(np.inf)
        assert np.isnan(produced)
        assert not sentinel.is_unknown(produced)
        assert sentinel.is_valid(produced)
        assert not sentinel.is_finite(produced)

    def test_ordinary_values(self):
        """Finite numbers are valid and finite."""
        assert sentinel.is_valid(1.5)
        assert sentinel.is_finite(1.5)
        assert not sentinel.is_unknown(0.0)


class TestArraySentinels:
    """Test suite for vector and matrix sentinels."""

    def test_unknown_like_shapes(self):
        """unknown_like fills every element."""
        vector = sentinel.unknown_like(3)
        matrix = sentinel.unknown_like((6, 6))

        assert vector.shape == (3,)
        assert matrix.shape == (6, 6)
        assert vector.dtype == np.float64
        assert sentinel.is_unknown(vector)
        assert sentinel.is_unknown(matrix)

    def test_mark_unknown_in_place(self):
        """mark_unknown overwrites the array it is given."""
        array = np.ones((2, 3))
        result = sentinel.mark_unknown(array)

        assert result is array
        assert sentinel.is_unknown(array)

    def test_mark_unknown_rejects_non_float(self):
        """mark_unknown requires a float64 array."""
        with pytest.raises(TypeError):
            sentinel.mark_unknown(np.zeros(3, dtype=np.int64))

    def test_partial_unknown(self):
        """One unknown axis makes the vector invalid but not wholly unknown."""
        vector = np.array([1.0, 2.0, 3.0])
        vector[1] = sentinel.unknown()

        np.testing.assert_array_equal(
            sentinel.unknown_mask(vector), [False, True, False]
        )
        assert not sentinel.is_valid(vector)
        assert not sentinel.is_unknown(vector)
        assert not sentinel.is_finite(vector)

    def test_copy_preserves_pattern(self):
        """Copies and slices keep the reserved bit pattern."""
        matrix = sentinel.unknown_like((6, 6))
        assert sentinel.is_unknown(matrix.copy())
        assert sentinel.is_unknown(matrix[:3, 3:])
        assert sentinel.is_unknown(np.array(matrix, dtype=np.float64))

    def test_has_nan(self):
        """has_nan ignores the payload."""
        assert sentinel.has_nan(sentinel.unknown_like(2))
        assert sentinel.has_nan(np.array([0.0, np.nan]))
        assert not sentinel.has_nan(np.array([0.0, np.inf]))


class TestArrayEqual:
    """Test suite for sentinel-aware equality."""

    def test_unknown_equals_unknown(self):
        """Two unknown arrays compare equal."""
        assert sentinel.array_equal(sentinel.unknown_like(3), sentinel.unknown_like(3))

    def test_zero_differs_from_unknown(self):
        """A zero vector and an unknown vector are distinct."""
        assert not sentinel.array_equal(np.zeros(3), sentinel.unknown_like(3))

    def test_partial_unknown(self):
        """Known elements must match and unknown elements must line up."""
        a = np.array([1.0, sentinel.unknown(), 3.0])
        assert sentinel.array_equal(a, a.copy())
        assert not sentinel.array_equal(a, np.array([1.0, 2.0, 3.0]))

    def test_signed_zero_and_shape(self):
        """Signed zeros are equal; shapes must agree."""
        assert sentinel.array_equal(np.array([0.0]), np.array([-0.0]))
        assert not sentinel.array_equal(np.zeros(3), np.zeros(4))
