"""Rigid transform (rotation + translation) without uncertainty."""

from __future__ import annotations

from dataclasses import dataclass

import cv2
import numpy as np

from .. import sentinel
from .linalg import (
    exp_so3,
    is_approx,
    quat_to_rotation_matrix,
    rotation_matrix_to_quat,
    skew,
)


@dataclass
class RigidTransform:
    """Rigid body transformation (rotation + translation) in SE(3).

    A transform T_target_source maps points expressed in the source frame
    into the target frame:

        p_target = R @ p_source + t

    Identity is the default. The only way to hold non-finite entries is
    ``RigidTransform.unknown()``, which the uncertain types use when a
    pose is invalidated.

    Attributes:
        rotation: 3x3 orthonormal rotation matrix (det = +1)
        translation: 3D translation vector
    """

    rotation: np.ndarray | None = None  # 3x3 rotation matrix
    translation: np.ndarray | None = None  # (3,) translation vector

    def __post_init__(self) -> None:
        """Validate inputs and fill identity defaults."""
        if self.rotation is None:
            self.rotation = np.eye(3)
        if self.translation is None:
            self.translation = np.zeros(3)
        self.rotation = np.array(self.rotation, dtype=np.float64)
        self.translation = np.array(self.translation, dtype=np.float64).flatten()

        if self.rotation.shape != (3, 3):
            raise ValueError(f"Rotation must be 3x3, got {self.rotation.shape}")
        if self.translation.shape != (3,):
            raise ValueError(
                f"Translation must be (3,), got {self.translation.shape}"
            )

    @classmethod
    def identity(cls) -> RigidTransform:
        """Create identity transformation (no rotation, no translation)."""
        return cls(rotation=np.eye(3), translation=np.zeros(3))

    @classmethod
    def unknown(cls) -> RigidTransform:
        """Create a transform whose every entry is the unknown sentinel."""
        return cls(
            rotation=sentinel.unknown_like((3, 3)),
            translation=sentinel.unknown_like(3),
        )

    @classmethod
    def from_Rt(cls, R: np.ndarray, t: np.ndarray) -> RigidTransform:
        """Create a transform from rotation matrix and translation vector."""
        return cls(rotation=R, translation=t)

    @classmethod
    def from_matrix(cls, T: np.ndarray) -> RigidTransform:
        """Create a transform from a 4x4 homogeneous matrix.

        Args:
            T: 4x4 transformation matrix of the form:
               [[R  t]
                [0  1]]
        """
        T = np.asarray(T, dtype=np.float64)
        if T.shape != (4, 4):
            raise ValueError(f"Transform must be 4x4, got {T.shape}")

        return cls(rotation=T[:3, :3], translation=T[:3, 3])

    @classmethod
    def from_quaternion(
        cls,
        qw: float,
        qx: float,
        qy: float,
        qz: float,
        translation: np.ndarray | None = None,
    ) -> RigidTransform:
        """Create a transform from a Hamilton quaternion (w, x, y, z).

        The quaternion is normalized before conversion.
        """
        R = quat_to_rotation_matrix(np.array([qw, qx, qy, qz]))
        return cls(rotation=R, translation=translation)

    @classmethod
    def from_axis_angle(
        cls,
        angle: float,
        axis: np.ndarray,
        translation: np.ndarray | None = None,
    ) -> RigidTransform:
        """Create a transform rotating by ``angle`` radians about ``axis``.

        The rotation is applied first, then the translation, i.e.
        ``Translation(t) * AngleAxis(angle, axis)``.
        """
        axis = np.asarray(axis, dtype=np.float64).flatten()
        norm = np.linalg.norm(axis)
        if norm == 0.0:
            raise ValueError("Rotation axis must be non-zero")
        return cls(rotation=exp_so3(axis / norm * angle), translation=translation)

    @classmethod
    def from_rvec_tvec(cls, rvec: np.ndarray, tvec: np.ndarray) -> RigidTransform:
        """Create a transform from an OpenCV Rodrigues vector and translation.

        Args:
            rvec: 3D Rodrigues rotation vector (axis * angle)
            tvec: 3D translation vector
        """
        R, _ = cv2.Rodrigues(np.asarray(rvec, dtype=np.float64).flatten())
        return cls(rotation=R, translation=np.asarray(tvec).flatten())

    def to_matrix(self) -> np.ndarray:
        """Convert to 4x4 homogeneous transformation matrix."""
        T = np.eye(4, dtype=np.float64)
        T[:3, :3] = self.rotation
        T[:3, 3] = self.translation
        return T

    def to_rvec_tvec(self) -> tuple[np.ndarray, np.ndarray]:
        """Convert to OpenCV Rodrigues vector and translation."""
        rvec, _ = cv2.Rodrigues(self.rotation)
        return rvec.flatten(), self.translation.copy()

    @property
    def quaternion(self) -> np.ndarray:
        """Rotation as unit quaternion [qw, qx, qy, qz] with qw >= 0."""
        return rotation_matrix_to_quat(self.rotation)

    def inverse(self) -> RigidTransform:
        """Compute the inverse transformation T^{-1}.

        For T = [R, t], the inverse is [R^T, -R^T @ t].
        """
        R_inv = self.rotation.T
        t_inv = -R_inv @ self.translation
        return RigidTransform(rotation=R_inv, translation=t_inv)

    def compose(self, other: RigidTransform) -> RigidTransform:
        """Compose with another transformation: self @ other.

        If self = T_C_B and other = T_B_A, the result is T_C_A.

        Example:
            T_world_body.compose(T_body_sensor) gives T_world_sensor
        """
        R = self.rotation @ other.rotation
        t = self.rotation @ other.translation + self.translation
        return RigidTransform(rotation=R, translation=t)

    def apply(self, vector: np.ndarray) -> np.ndarray:
        """Map a single point from the source frame into the target frame."""
        vector = np.asarray(vector, dtype=np.float64).flatten()
        return self.rotation @ vector + self.translation

    def transform_points(self, points: np.ndarray) -> np.ndarray:
        """Map an Nx3 array of points from the source into the target frame."""
        points = np.asarray(points, dtype=np.float64)
        if points.ndim == 1:
            points = points.reshape(1, 3)

        if points.shape[1] != 3:
            raise ValueError(f"Points must be Nx3, got {points.shape}")

        return (self.rotation @ points.T).T + self.translation

    def adjoint(self) -> np.ndarray:
        """6x6 adjoint acting on (translation, rotation) tangent vectors.

        Block form:
            [[R, [t]x R],
             [0,      R]]

        Ad(T) maps a perturbation applied on the source side of T to the
        equivalent perturbation on the target side:
        T exp(xi) = exp(Ad(T) xi) T.
        """
        R = self.rotation
        Ad = np.zeros((6, 6), dtype=np.float64)
        Ad[:3, :3] = R
        Ad[:3, 3:] = skew(self.translation) @ R
        Ad[3:, 3:] = R
        return Ad

    def normalized(self) -> RigidTransform:
        """Return a copy whose rotation is projected back onto SO(3)."""
        U, _, Vt = np.linalg.svd(self.rotation)
        R = U @ Vt
        if np.linalg.det(R) < 0:
            U[:, -1] = -U[:, -1]
            R = U @ Vt
        return RigidTransform(rotation=R, translation=self.translation)

    def is_valid(self) -> bool:
        """True when rotation and translation are finite."""
        return sentinel.is_finite(self.rotation) and sentinel.is_finite(
            self.translation
        )

    def is_approx(self, other: RigidTransform, precision: float = 1e-12) -> bool:
        """Compare the homogeneous matrices with a relative tolerance."""
        return is_approx(self.to_matrix(), other.to_matrix(), precision)

    def __eq__(self, other: object) -> bool:
        """Exact equality; unknown entries match only unknown entries."""
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return sentinel.array_equal(
            self.rotation, other.rotation
        ) and sentinel.array_equal(self.translation, other.translation)

    def copy(self) -> RigidTransform:
        return RigidTransform(rotation=self.rotation, translation=self.translation)

    def __repr__(self) -> str:
        """Return string representation."""
        pos = self.translation
        return f"RigidTransform(position=[{pos[0]:.3f}, {pos[1]:.3f}, {pos[2]:.3f}])"

    def __matmul__(self, other: RigidTransform) -> RigidTransform:
        """Composition operator: T_result = T1 @ T2."""
        if not isinstance(other, RigidTransform):
            return NotImplemented
        return self.compose(other)
