"""Twist: linear and angular velocity of a rigid body."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .. import sentinel


@dataclass
class Twist:
    """Linear + angular velocity pair, zero by default.

    Each axis may independently hold the unknown sentinel. A zero twist
    and an unknown twist are distinct: ``is_zero`` is False for any
    twist containing NaN.

    Attributes:
        linear: Linear velocity (vx, vy, vz) in m/s
        angular: Angular velocity (wx, wy, wz) in rad/s
    """

    linear: np.ndarray | None = None  # (3,)
    angular: np.ndarray | None = None  # (3,)

    def __post_init__(self) -> None:
        """Copy inputs into (3,) float64 arrays."""
        if self.linear is None:
            self.linear = np.zeros(3)
        if self.angular is None:
            self.angular = np.zeros(3)
        self.linear = np.array(self.linear, dtype=np.float64).flatten()
        self.angular = np.array(self.angular, dtype=np.float64).flatten()

        if self.linear.shape != (3,):
            raise ValueError(f"Linear velocity must be (3,), got {self.linear.shape}")
        if self.angular.shape != (3,):
            raise ValueError(
                f"Angular velocity must be (3,), got {self.angular.shape}"
            )

    @classmethod
    def zero(cls) -> Twist:
        return cls(linear=np.zeros(3), angular=np.zeros(3))

    @classmethod
    def unknown(cls) -> Twist:
        return cls(linear=sentinel.unknown_like(3), angular=sentinel.unknown_like(3))

    @classmethod
    def from_vector(cls, vector: np.ndarray) -> Twist:
        """Create from a 6-vector (vx, vy, vz, wx, wy, wz)."""
        vector = np.asarray(vector, dtype=np.float64).flatten()
        if vector.shape != (6,):
            raise ValueError(f"Twist vector must be (6,), got {vector.shape}")
        return cls(linear=vector[:3], angular=vector[3:])

    def to_vector(self) -> np.ndarray:
        """Return (vx, vy, vz, wx, wy, wz)."""
        return np.concatenate([self.linear, self.angular])

    def has_valid_linear(self) -> bool:
        return sentinel.is_finite(self.linear)

    def has_valid_angular(self) -> bool:
        return sentinel.is_finite(self.angular)

    def is_valid(self) -> bool:
        return self.has_valid_linear() and self.has_valid_angular()

    def is_zero(self) -> bool:
        return bool(np.all(self.linear == 0.0) and np.all(self.angular == 0.0))

    def cross(self, other: Twist) -> Twist:
        """Spatial cross product of two twists expressed in one frame.

            linear  = w1 x v2 + v1 x w2
            angular = w1 x w2
        """
        return Twist(
            linear=np.cross(self.angular, other.linear)
            + np.cross(self.linear, other.angular),
            angular=np.cross(self.angular, other.angular),
        )

    def copy(self) -> Twist:
        return Twist(linear=self.linear, angular=self.angular)

    def __eq__(self, other: object) -> bool:
        """Exact equality; a zero twist never equals an unknown one."""
        if not isinstance(other, Twist):
            return NotImplemented
        return sentinel.array_equal(
            self.linear, other.linear
        ) and sentinel.array_equal(self.angular, other.angular)

    def __add__(self, other: Twist) -> Twist:
        if not isinstance(other, Twist):
            return NotImplemented
        return Twist(
            linear=self.linear + other.linear, angular=self.angular + other.angular
        )

    def __sub__(self, other: Twist) -> Twist:
        if not isinstance(other, Twist):
            return NotImplemented
        return Twist(
            linear=self.linear - other.linear, angular=self.angular - other.angular
        )

    def __neg__(self) -> Twist:
        return Twist(linear=-self.linear, angular=-self.angular)

    def __mul__(self, factor: float) -> Twist:
        if not isinstance(factor, (int, float, np.number)):
            return NotImplemented
        return Twist(linear=factor * self.linear, angular=factor * self.angular)

    __rmul__ = __mul__

    def __truediv__(self, factor: float) -> Twist:
        if not isinstance(factor, (int, float, np.number)):
            return NotImplemented
        return Twist(linear=self.linear / factor, angular=self.angular / factor)

    def __matmul__(self, other: Twist) -> Twist:
        if not isinstance(other, Twist):
            return NotImplemented
        return self.cross(other)

    def __repr__(self) -> str:
        return (
            f"Twist(linear={np.array2string(self.linear, precision=3)}, "
            f"angular={np.array2string(self.angular, precision=3)})"
        )
