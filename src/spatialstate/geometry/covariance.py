"""6x6 covariance over the (translation, rotation) tangent space."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .. import sentinel


@dataclass
class Covariance6:
    """Symmetric 6x6 uncertainty matrix, or the unknown sentinel.

    Row/column order is (x, y, z, rx, ry, rz) for transforms and
    (vx, vy, vz, wx, wy, wz) for twists. Positive semi-definiteness is
    never checked: intermediate results of inverse composition may hold
    matrices that are not PSD.

    Every operator returns ``Covariance6.unknown()`` as soon as one of
    its operands is not valid.

    Attributes:
        matrix: 6x6 float64 array
    """

    matrix: np.ndarray | None = None

    def __post_init__(self) -> None:
        """Copy the matrix and check its shape; None means unknown."""
        if self.matrix is None:
            self.matrix = sentinel.unknown_like((6, 6))
        self.matrix = np.array(self.matrix, dtype=np.float64)
        if self.matrix.shape != (6, 6):
            raise ValueError(f"Covariance must be 6x6, got {self.matrix.shape}")

    @classmethod
    def unknown(cls) -> Covariance6:
        return cls(matrix=sentinel.unknown_like((6, 6)))

    @classmethod
    def zeros(cls) -> Covariance6:
        return cls(matrix=np.zeros((6, 6)))

    @classmethod
    def identity(cls, scale: float = 1.0) -> Covariance6:
        return cls(matrix=scale * np.eye(6))

    @classmethod
    def diagonal(cls, values) -> Covariance6:
        """Build a diagonal covariance from six variances."""
        values = np.asarray(values, dtype=np.float64).flatten()
        if values.shape != (6,):
            raise ValueError(f"Expected 6 diagonal values, got {values.shape}")
        return cls(matrix=np.diag(values))

    @classmethod
    def from_blocks(
        cls,
        translation: np.ndarray,
        rotation: np.ndarray,
        cross: np.ndarray | None = None,
    ) -> Covariance6:
        """Assemble from 3x3 blocks.

        Args:
            translation: Upper-left 3x3 block
            rotation: Lower-right 3x3 block
            cross: Upper-right 3x3 block (lower-left is its transpose).
                Zero when omitted.
        """
        C = np.zeros((6, 6), dtype=np.float64)
        C[:3, :3] = translation
        C[3:, 3:] = rotation
        if cross is not None:
            C[:3, 3:] = cross
            C[3:, :3] = np.asarray(cross).T
        return cls(matrix=C)

    def is_unknown(self) -> bool:
        """True when the whole matrix carries the unknown sentinel."""
        return sentinel.is_unknown(self.matrix)

    def is_valid(self) -> bool:
        """True only if the matrix is sentinel-free and finite."""
        return sentinel.is_valid(self.matrix) and sentinel.is_finite(self.matrix)

    @property
    def translation_block(self) -> np.ndarray:
        """Upper-left 3x3 block (view)."""
        return self.matrix[:3, :3]

    @property
    def rotation_block(self) -> np.ndarray:
        """Lower-right 3x3 block (view)."""
        return self.matrix[3:, 3:]

    def scaled(self, factor: float) -> Covariance6:
        """Return factor * C."""
        if not self.is_valid():
            return Covariance6.unknown()
        return Covariance6(matrix=float(factor) * self.matrix)

    def congruence(self, J: np.ndarray) -> Covariance6:
        """Return J C J^T for a 6x6 Jacobian J."""
        J = np.asarray(J, dtype=np.float64)
        if J.shape != (6, 6):
            raise ValueError(f"Jacobian must be 6x6, got {J.shape}")
        if not self.is_valid():
            return Covariance6.unknown()
        return Covariance6(matrix=J @ self.matrix @ J.T)

    def symmetrized(self) -> Covariance6:
        """Return (C + C^T) / 2."""
        if not self.is_valid():
            return Covariance6.unknown()
        return Covariance6(matrix=0.5 * (self.matrix + self.matrix.T))

    def copy(self) -> Covariance6:
        return Covariance6(matrix=self.matrix)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Covariance6):
            return NotImplemented
        return sentinel.array_equal(self.matrix, other.matrix)

    def __add__(self, other: Covariance6) -> Covariance6:
        if not isinstance(other, Covariance6):
            return NotImplemented
        if not (self.is_valid() and other.is_valid()):
            return Covariance6.unknown()
        return Covariance6(matrix=self.matrix + other.matrix)

    def __sub__(self, other: Covariance6) -> Covariance6:
        if not isinstance(other, Covariance6):
            return NotImplemented
        if not (self.is_valid() and other.is_valid()):
            return Covariance6.unknown()
        return Covariance6(matrix=self.matrix - other.matrix)

    def __mul__(self, factor: float) -> Covariance6:
        if not isinstance(factor, (int, float, np.number)):
            return NotImplemented
        return self.scaled(factor)

    __rmul__ = __mul__

    def __str__(self) -> str:
        if not self.is_valid():
            return "unknown"
        return np.array2string(self.matrix, precision=6, suppress_small=True)

    def __repr__(self) -> str:
        if not self.is_valid():
            return "Covariance6(unknown)"
        return f"Covariance6(diag={np.array2string(np.diag(self.matrix), precision=4)})"
