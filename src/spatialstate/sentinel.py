"""Sentinel values marking scalars, vectors and matrices as unknown.

An estimate that has not been computed yet is stored as a NaN with a
reserved payload rather than wrapped in an optional. Arithmetic on such
a value still yields a non-finite result, so operators need no explicit
branch, while ``is_unknown`` can tell a deliberately unknown field from
the default NaN produced by an invalid operation.

The UNKNOWN pattern fails the coarse ``is_finite`` check used by callers
that only need to know whether a value is usable. Infinity is kept
separate: it is a valid value meaning "magnitude unknown".
"""

from __future__ import annotations

import numpy as np

_UNKNOWN_BITS = np.uint64(0x7FF8_0000_0000_0A11)


def _from_bits(bits: np.uint64) -> float:
    return float(np.array(bits, dtype=np.uint64).view(np.float64))


UNKNOWN: float = _from_bits(_UNKNOWN_BITS)


def unknown() -> float:
    """Return the scalar unknown sentinel."""
    return UNKNOWN


def infinity() -> float:
    """Return positive infinity (used as 'unknown magnitude' variance)."""
    return float(np.inf)


def unknown_like(shape: int | tuple[int, ...]) -> np.ndarray:
    """Create a float64 array of the given shape filled with UNKNOWN."""
    return np.full(shape, _UNKNOWN_BITS, dtype=np.uint64).view(np.float64)


def mark_unknown(array: np.ndarray) -> np.ndarray:
    """Overwrite every element of a float64 array with UNKNOWN, in place.

    Args:
        array: Writable float64 array

    Returns:
        The same array, for chaining

    Raises:
        TypeError: If the array is not float64
    """
    if not isinstance(array, np.ndarray) or array.dtype != np.float64:
        raise TypeError("mark_unknown expects a float64 numpy array")
    array[...] = unknown_like(array.shape)
    return array


def _bits(x) -> np.ndarray:
    return np.asarray(x, dtype=np.float64).view(np.uint64)


def unknown_mask(x) -> np.ndarray:
    """Elementwise test for the UNKNOWN bit pattern."""
    return _bits(x) == _UNKNOWN_BITS


def is_unknown(x) -> bool:
    """True when every element of ``x`` carries the UNKNOWN pattern."""
    return bool(np.all(unknown_mask(x)))


def is_infinity(x) -> bool:
    """True when every element of ``x`` is infinite."""
    return bool(np.all(np.isinf(np.asarray(x, dtype=np.float64))))


def is_valid(x) -> bool:
    """True iff no element of ``x`` carries the UNKNOWN pattern."""
    return not bool(np.any(unknown_mask(x)))


def is_finite(x) -> bool:
    """Coarse usability check: no NaN of any kind and no infinity."""
    return bool(np.all(np.isfinite(np.asarray(x, dtype=np.float64))))


def has_nan(x) -> bool:
    """True when any element is NaN, whatever its payload."""
    return bool(np.any(np.isnan(np.asarray(x, dtype=np.float64))))


def array_equal(a, b) -> bool:
    """Elementwise equality where identical NaN payloads compare equal.

    Two unknown arrays are equal; a zero array and an unknown array are
    not. ``0.0`` and ``-0.0`` compare equal as usual.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        return False
    return bool(np.all((a == b) | (_bits(a) == _bits(b))))
