"""Rigid transform with first-order uncertainty.

The uncertainty is a 6x6 covariance over a perturbation applied on the
target side of the transform:

    T_true = exp(xi) T,    xi = (dx, dy, dz, rx, ry, rz) ~ N(0, C)

With that convention, chaining T3 = T2 T1 gives

    exp(xi3) T3 = exp(xi2) T2 exp(xi1) T1
                = exp(xi2) exp(Ad(T2) xi1) T2 T1

so to first order

    C3 = Ad(T2) C1 Ad(T2)^T + C2

and the two inverse-composition operators solve that relation for C2
or C1. Frame labels and timestamps ride along for bookkeeping only;
nothing checks that chained frames actually match.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from ..geometry.covariance import Covariance6
from ..geometry.transform import RigidTransform

logger = logging.getLogger(__name__)


@dataclass
class TransformWithCovariance:
    """RigidTransform plus Covariance6, with optional frame bookkeeping.

    Attributes:
        transform: Mean transform T_target_source
        covariance: 6x6 covariance, unknown by default
        source_frame: Name of the frame the transform maps from
        target_frame: Name of the frame the transform maps into
        timestamp_ns: Estimate timestamp in nanoseconds
    """

    transform: RigidTransform = field(default_factory=RigidTransform.identity)
    covariance: Covariance6 = field(default_factory=Covariance6.unknown)
    source_frame: str | None = None
    target_frame: str | None = None
    timestamp_ns: int | None = None

    def __post_init__(self) -> None:
        """Accept raw arrays; never hold on to the caller's objects."""
        if isinstance(self.transform, np.ndarray):
            self.transform = RigidTransform.from_matrix(self.transform)
        else:
            self.transform = self.transform.copy()
        if self.covariance is None:
            self.covariance = Covariance6.unknown()
        elif isinstance(self.covariance, Covariance6):
            self.covariance = self.covariance.copy()
        else:
            self.covariance = Covariance6(matrix=self.covariance)

    @classmethod
    def identity(cls) -> TransformWithCovariance:
        """Identity transform with unknown covariance."""
        return cls()

    # Accessors

    @property
    def translation(self) -> np.ndarray:
        """Translation of the mean transform (mutable view)."""
        return self.transform.translation

    @translation.setter
    def translation(self, value: np.ndarray) -> None:
        self.transform.translation[:] = np.asarray(value, dtype=np.float64).flatten()

    @property
    def rotation(self) -> np.ndarray:
        """Rotation matrix of the mean transform (mutable view)."""
        return self.transform.rotation

    @rotation.setter
    def rotation(self, value: np.ndarray) -> None:
        self.transform.rotation[:] = np.asarray(value, dtype=np.float64)

    @property
    def orientation(self) -> np.ndarray:
        """Rotation as unit quaternion [qw, qx, qy, qz]."""
        return self.transform.quaternion

    @property
    def translation_covariance(self) -> np.ndarray:
        """3x3 translation block of the covariance."""
        return self.covariance.translation_block

    @property
    def orientation_covariance(self) -> np.ndarray:
        """3x3 rotation block of the covariance."""
        return self.covariance.rotation_block

    def set_transform(self, transform: RigidTransform) -> None:
        self.transform = transform.copy()

    def set_covariance(self, covariance) -> None:
        """Replace the covariance with a 6x6 matrix or Covariance6."""
        if isinstance(covariance, Covariance6):
            self.covariance = covariance.copy()
        else:
            self.covariance = Covariance6(matrix=covariance)

    # Validity

    def has_valid_transform(self) -> bool:
        return self.transform.is_valid()

    def has_valid_covariance(self) -> bool:
        return self.covariance.is_valid()

    def invalidate_transform(self) -> None:
        self.transform = RigidTransform.unknown()

    def invalidate_covariance(self) -> None:
        self.covariance = Covariance6.unknown()

    def invalidate(self) -> None:
        """Mark both mean and covariance unknown."""
        self.invalidate_transform()
        self.invalidate_covariance()

    # Algebra

    def compose(self, inner: TransformWithCovariance) -> TransformWithCovariance:
        """Chain ``self`` (outer) after ``inner``: self @ inner.

        If inner maps A into B and self maps B into C, the result maps A
        into C. Covariance: Ad(self) C_inner Ad(self)^T + C_self, unknown
        unless both operands carry a valid covariance.
        """
        transform = self.transform.compose(inner.transform)

        if self.has_valid_covariance() and inner.has_valid_covariance():
            covariance = (
                inner.covariance.congruence(self.transform.adjoint())
                + self.covariance
            )
        else:
            logger.debug(
                "Composing %s -> %s without covariance",
                inner.source_frame,
                self.target_frame,
            )
            covariance = Covariance6.unknown()

        return TransformWithCovariance(
            transform=transform,
            covariance=covariance,
            source_frame=inner.source_frame,
            target_frame=self.target_frame,
            timestamp_ns=inner.timestamp_ns,
        )

    def inverse(self) -> TransformWithCovariance:
        """Inverse transform; covariance is moved to the other side.

        (exp(xi) T)^-1 = T^-1 exp(-xi) = exp(-Ad(T^-1) xi) T^-1
        """
        transform = self.transform.inverse()
        covariance = self.covariance.congruence(transform.adjoint())
        return TransformWithCovariance(
            transform=transform,
            covariance=covariance,
            source_frame=self.target_frame,
            target_frame=self.source_frame,
            timestamp_ns=self.timestamp_ns,
        )

    def composition_inv(
        self, inner: TransformWithCovariance
    ) -> TransformWithCovariance:
        """Recover the outer operand from ``self = outer @ inner``.

        T_outer = T_self @ T_inner^-1
        C_outer = C_self - Ad(T_outer) C_inner Ad(T_outer)^T
        """
        transform = self.transform.compose(inner.transform.inverse())

        if self.has_valid_covariance() and inner.has_valid_covariance():
            covariance = self.covariance - inner.covariance.congruence(
                transform.adjoint()
            )
        else:
            covariance = Covariance6.unknown()

        return TransformWithCovariance(
            transform=transform,
            covariance=covariance,
            source_frame=inner.target_frame,
            target_frame=self.target_frame,
            timestamp_ns=self.timestamp_ns,
        )

    def pre_composition_inv(
        self, outer: TransformWithCovariance
    ) -> TransformWithCovariance:
        """Recover the inner operand from ``self = outer @ inner``.

        T_inner = T_outer^-1 @ T_self
        C_inner = Ad(T_outer)^-1 (C_self - C_outer) Ad(T_outer)^-T
        """
        outer_inv = outer.transform.inverse()
        transform = outer_inv.compose(self.transform)

        if self.has_valid_covariance() and outer.has_valid_covariance():
            covariance = (self.covariance - outer.covariance).congruence(
                outer_inv.adjoint()
            )
        else:
            covariance = Covariance6.unknown()

        return TransformWithCovariance(
            transform=transform,
            covariance=covariance,
            source_frame=self.source_frame,
            target_frame=outer.source_frame,
            timestamp_ns=self.timestamp_ns,
        )

    def copy(self) -> TransformWithCovariance:
        return TransformWithCovariance(
            transform=self.transform.copy(),
            covariance=self.covariance.copy(),
            source_frame=self.source_frame,
            target_frame=self.target_frame,
            timestamp_ns=self.timestamp_ns,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TransformWithCovariance):
            return NotImplemented
        return (
            self.transform == other.transform
            and self.covariance == other.covariance
            and self.source_frame == other.source_frame
            and self.target_frame == other.target_frame
            and self.timestamp_ns == other.timestamp_ns
        )

    def __matmul__(self, other: TransformWithCovariance) -> TransformWithCovariance:
        """Composition operator: T3 = T2 @ T1."""
        if not isinstance(other, TransformWithCovariance):
            return NotImplemented
        return self.compose(other)

    def __str__(self) -> str:
        lines = []
        if self.source_frame or self.target_frame:
            lines.append(f"Frames: {self.source_frame} -> {self.target_frame}")
        if self.timestamp_ns is not None:
            lines.append(f"Time: {self.timestamp_ns} ns")
        lines.append("Transform:")
        lines.append(
            np.array2string(self.transform.to_matrix(), precision=6, suppress_small=True)
        )
        lines.append("Covariance:")
        lines.append(str(self.covariance))
        return "\n".join(lines)
