"""Twist with first-order uncertainty.

Covariance rules for independent estimates:

    -v        C
    k * v     k^2 C
    v / k     C / k^2
    v1 +- v2  C1 + C2
    v1 @ v2   J1 C1 J1^T + J2 C2 J2^T   (spatial cross product)

The result covariance is unknown unless every operand covariance is valid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from ..geometry.covariance import Covariance6
from ..geometry.linalg import skew
from ..geometry.twist import Twist

logger = logging.getLogger(__name__)


def _is_scalar(value) -> bool:
    return isinstance(value, (int, float, np.number)) and not isinstance(value, bool)


def cross_jacobians(lhs: Twist, rhs: Twist) -> tuple[np.ndarray, np.ndarray]:
    """Jacobians of ``lhs.cross(rhs)`` with respect to each operand.

    Both are 6x6 over (linear, angular):

        d/d lhs = [[-[w2]x, -[v2]x],      d/d rhs = [[[w1]x, [v1]x],
                   [     0, -[w2]x]]                 [    0, [w1]x]]
    """
    J_lhs = np.zeros((6, 6), dtype=np.float64)
    J_lhs[:3, :3] = -skew(rhs.angular)
    J_lhs[:3, 3:] = -skew(rhs.linear)
    J_lhs[3:, 3:] = -skew(rhs.angular)

    J_rhs = np.zeros((6, 6), dtype=np.float64)
    J_rhs[:3, :3] = skew(lhs.angular)
    J_rhs[:3, 3:] = skew(lhs.linear)
    J_rhs[3:, 3:] = skew(lhs.angular)

    return J_lhs, J_rhs


@dataclass
class TwistWithCovariance:
    """Twist plus Covariance6.

    A default-constructed instance has a zero (valid) velocity and an
    unknown covariance.

    Attributes:
        velocity: Mean twist
        covariance: 6x6 covariance over (vx, vy, vz, wx, wy, wz)
    """

    velocity: Twist = field(default_factory=Twist.zero)
    covariance: Covariance6 = field(default_factory=Covariance6.unknown)

    def __post_init__(self) -> None:
        """Accept 6-vectors and raw 6x6 arrays; copy passed-in objects."""
        if isinstance(self.velocity, Twist):
            self.velocity = self.velocity.copy()
        else:
            self.velocity = Twist.from_vector(self.velocity)
        if self.covariance is None:
            self.covariance = Covariance6.unknown()
        elif isinstance(self.covariance, Covariance6):
            self.covariance = self.covariance.copy()
        else:
            self.covariance = Covariance6(matrix=self.covariance)

    @classmethod
    def from_vector(
        cls, vector: np.ndarray, covariance: np.ndarray | Covariance6 | None = None
    ) -> TwistWithCovariance:
        return cls(velocity=Twist.from_vector(vector), covariance=covariance)

    # Accessors

    @property
    def linear(self) -> np.ndarray:
        """Linear velocity (mutable view)."""
        return self.velocity.linear

    @linear.setter
    def linear(self, value: np.ndarray) -> None:
        self.velocity.linear[:] = np.asarray(value, dtype=np.float64).flatten()

    @property
    def angular(self) -> np.ndarray:
        """Angular velocity (mutable view)."""
        return self.velocity.angular

    @angular.setter
    def angular(self, value: np.ndarray) -> None:
        self.velocity.angular[:] = np.asarray(value, dtype=np.float64).flatten()

    @property
    def linear_covariance(self) -> np.ndarray:
        return self.covariance.translation_block

    @property
    def angular_covariance(self) -> np.ndarray:
        return self.covariance.rotation_block

    def get_velocity(self) -> np.ndarray:
        """Return the mean as a 6-vector."""
        return self.velocity.to_vector()

    def set_velocity(self, vector: np.ndarray) -> None:
        self.velocity = Twist.from_vector(vector)

    def set_covariance(self, covariance) -> None:
        if isinstance(covariance, Covariance6):
            self.covariance = covariance.copy()
        else:
            self.covariance = Covariance6(matrix=covariance)

    # Validity

    def has_valid_velocity(self) -> bool:
        return self.velocity.is_valid()

    def has_valid_covariance(self) -> bool:
        return self.covariance.is_valid()

    def invalidate_velocity(self) -> None:
        self.velocity = Twist.unknown()

    def invalidate_covariance(self) -> None:
        self.covariance = Covariance6.unknown()

    def invalidate(self) -> None:
        self.invalidate_velocity()
        self.invalidate_covariance()

    # Algebra

    def _combined_covariance(self, other: TwistWithCovariance) -> Covariance6:
        if self.has_valid_covariance() and other.has_valid_covariance():
            return self.covariance + other.covariance
        return Covariance6.unknown()

    def add(self, other: TwistWithCovariance) -> TwistWithCovariance:
        return TwistWithCovariance(
            velocity=self.velocity + other.velocity,
            covariance=self._combined_covariance(other),
        )

    def subtract(self, other: TwistWithCovariance) -> TwistWithCovariance:
        return TwistWithCovariance(
            velocity=self.velocity - other.velocity,
            covariance=self._combined_covariance(other),
        )

    def negate(self) -> TwistWithCovariance:
        return TwistWithCovariance(
            velocity=-self.velocity, covariance=self.covariance.copy()
        )

    def scale(self, factor: float) -> TwistWithCovariance:
        return TwistWithCovariance(
            velocity=factor * self.velocity,
            covariance=self.covariance.scaled(factor * factor),
        )

    def compose(self, other: TwistWithCovariance) -> TwistWithCovariance:
        """Spatial cross product ``self @ other`` with propagated covariance.

        The covariance is computed whenever both operands carry one, even
        for zero means.
        """
        velocity = self.velocity.cross(other.velocity)

        if self.has_valid_covariance() and other.has_valid_covariance():
            J_lhs, J_rhs = cross_jacobians(self.velocity, other.velocity)
            covariance = self.covariance.congruence(
                J_lhs
            ) + other.covariance.congruence(J_rhs)
        else:
            logger.debug("Twist composition without covariance")
            covariance = Covariance6.unknown()

        return TwistWithCovariance(velocity=velocity, covariance=covariance)

    def copy(self) -> TwistWithCovariance:
        return TwistWithCovariance(
            velocity=self.velocity.copy(), covariance=self.covariance.copy()
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TwistWithCovariance):
            return NotImplemented
        return self.velocity == other.velocity and self.covariance == other.covariance

    def __add__(self, other: TwistWithCovariance) -> TwistWithCovariance:
        if not isinstance(other, TwistWithCovariance):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: TwistWithCovariance) -> TwistWithCovariance:
        if not isinstance(other, TwistWithCovariance):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> TwistWithCovariance:
        return self.negate()

    def __mul__(self, factor: float) -> TwistWithCovariance:
        if not _is_scalar(factor):
            return NotImplemented
        return self.scale(factor)

    __rmul__ = __mul__

    def __truediv__(self, factor: float) -> TwistWithCovariance:
        if not _is_scalar(factor):
            return NotImplemented
        return self.scale(1.0 / factor)

    def __matmul__(self, other: TwistWithCovariance) -> TwistWithCovariance:
        if not isinstance(other, TwistWithCovariance):
            return NotImplemented
        return self.compose(other)

    def __str__(self) -> str:
        return "\n".join(
            [
                "Velocity:",
                np.array2string(self.velocity.to_vector(), precision=6),
                "Covariance:",
                str(self.covariance),
            ]
        )
