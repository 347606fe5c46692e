"""Flat per-field rigid body state record.

RigidBodyState stores position, orientation, linear and angular
velocity as separate fields, each with its own 3x3 covariance. Two
kinds of "not known" coexist:

- a NaN field (unknown sentinel) means the value is invalid and fails
  the matching ``has_valid_*`` predicate;
- a covariance with infinite diagonal means "valid field, magnitude of
  the uncertainty unknown". ``is_known_value`` tells the two apart.

Conversion to and from BodyState maps an infinite-diagonal covariance
onto ``Covariance6.unknown()`` and back.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .. import sentinel
from ..geometry.covariance import Covariance6
from ..geometry.linalg import quat_to_rotation_matrix, rotation_matrix_to_quat
from ..geometry.transform import RigidTransform
from ..geometry.twist import Twist
from ..uncertain.transform_with_covariance import TransformWithCovariance
from ..uncertain.twist_with_covariance import TwistWithCovariance
from .body_state import BodyState


def unknown_covariance() -> np.ndarray:
    """3x3 covariance meaning 'uncertainty magnitude unknown'."""
    return np.diag([sentinel.infinity()] * 3)


_ARRAY_FIELDS = (
    "position",
    "cov_position",
    "orientation",
    "cov_orientation",
    "velocity",
    "cov_velocity",
    "angular_velocity",
    "cov_angular_velocity",
)


def _vector3() -> np.ndarray:
    return np.zeros(3)


def _identity_quat() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0])


@dataclass
class RigidBodyState:
    """Pose and velocity of ``source_frame`` expressed in ``target_frame``.

    Attributes:
        timestamp_ns: Sample timestamp in nanoseconds
        source_frame: Frame whose state is described (e.g. "body")
        target_frame: Reference frame (e.g. "world")
        position: Position (3,) in target frame
        cov_position: 3x3 position covariance
        orientation: Unit quaternion [qw, qx, qy, qz]
        cov_orientation: 3x3 orientation covariance (rotation vector)
        velocity: Linear velocity (3,)
        cov_velocity: 3x3 linear velocity covariance
        angular_velocity: Angular velocity (3,)
        cov_angular_velocity: 3x3 angular velocity covariance
    """

    timestamp_ns: int | None = None
    source_frame: str | None = None
    target_frame: str | None = None
    position: np.ndarray = field(default_factory=_vector3)
    cov_position: np.ndarray = field(default_factory=unknown_covariance)
    orientation: np.ndarray = field(default_factory=_identity_quat)
    cov_orientation: np.ndarray = field(default_factory=unknown_covariance)
    velocity: np.ndarray = field(default_factory=_vector3)
    cov_velocity: np.ndarray = field(default_factory=unknown_covariance)
    angular_velocity: np.ndarray = field(default_factory=_vector3)
    cov_angular_velocity: np.ndarray = field(default_factory=unknown_covariance)

    def __post_init__(self) -> None:
        """Ensure arrays have correct shape and type."""
        for name in ("position", "velocity", "angular_velocity"):
            value = np.array(getattr(self, name), dtype=np.float64).flatten()
            if value.shape != (3,):
                raise ValueError(f"{name} must be (3,), got {value.shape}")
            setattr(self, name, value)

        self.orientation = np.array(self.orientation, dtype=np.float64).flatten()
        if self.orientation.shape != (4,):
            raise ValueError(
                f"orientation must be a (4,) quaternion, got {self.orientation.shape}"
            )

        for name in (
            "cov_position",
            "cov_orientation",
            "cov_velocity",
            "cov_angular_velocity",
        ):
            value = np.array(getattr(self, name), dtype=np.float64)
            if value.shape != (3, 3):
                raise ValueError(f"{name} must be 3x3, got {value.shape}")
            setattr(self, name, value)

    def init_unknown(self) -> None:
        """Zero means, identity orientation, unknown-magnitude covariances."""
        self.position = _vector3()
        self.orientation = _identity_quat()
        self.velocity = _vector3()
        self.angular_velocity = _vector3()
        self.cov_position = unknown_covariance()
        self.cov_orientation = unknown_covariance()
        self.cov_velocity = unknown_covariance()
        self.cov_angular_velocity = unknown_covariance()

    def invalidate(self) -> None:
        """Set every field to the unknown sentinel."""
        self.position = sentinel.unknown_like(3)
        self.orientation = sentinel.unknown_like(4)
        self.velocity = sentinel.unknown_like(3)
        self.angular_velocity = sentinel.unknown_like(3)
        self.cov_position = sentinel.unknown_like((3, 3))
        self.cov_orientation = sentinel.unknown_like((3, 3))
        self.cov_velocity = sentinel.unknown_like((3, 3))
        self.cov_angular_velocity = sentinel.unknown_like((3, 3))

    @staticmethod
    def is_known_value(cov: np.ndarray) -> bool:
        """True when every variance on the diagonal is finite."""
        return sentinel.is_finite(np.diag(np.asarray(cov, dtype=np.float64)))

    def has_valid_position(self) -> bool:
        return not sentinel.has_nan(self.position)

    def has_valid_position_covariance(self) -> bool:
        return not sentinel.has_nan(self.cov_position)

    def has_valid_orientation(self) -> bool:
        return not sentinel.has_nan(self.orientation)

    def has_valid_orientation_covariance(self) -> bool:
        return not sentinel.has_nan(self.cov_orientation)

    def has_valid_velocity(self) -> bool:
        return not sentinel.has_nan(self.velocity)

    def has_valid_velocity_covariance(self) -> bool:
        return not sentinel.has_nan(self.cov_velocity)

    def has_valid_angular_velocity(self) -> bool:
        return not sentinel.has_nan(self.angular_velocity)

    def has_valid_angular_velocity_covariance(self) -> bool:
        return not sentinel.has_nan(self.cov_angular_velocity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RigidBodyState):
            return NotImplemented
        if (self.timestamp_ns, self.source_frame, self.target_frame) != (
            other.timestamp_ns,
            other.source_frame,
            other.target_frame,
        ):
            return False
        return all(
            sentinel.array_equal(getattr(self, name), getattr(other, name))
            for name in _ARRAY_FIELDS
        )

    # Conversion

    def _pose_covariance(self) -> Covariance6:
        if not (
            self.is_known_value(self.cov_position)
            and self.is_known_value(self.cov_orientation)
        ):
            return Covariance6.unknown()
        return Covariance6.from_blocks(self.cov_position, self.cov_orientation)

    def _velocity_covariance(self) -> Covariance6:
        if not (
            self.is_known_value(self.cov_velocity)
            and self.is_known_value(self.cov_angular_velocity)
        ):
            return Covariance6.unknown()
        return Covariance6.from_blocks(self.cov_velocity, self.cov_angular_velocity)

    def to_transform_with_covariance(self) -> TransformWithCovariance:
        if self.has_valid_orientation():
            rotation = quat_to_rotation_matrix(self.orientation)
        else:
            rotation = sentinel.unknown_like((3, 3))
        return TransformWithCovariance(
            transform=RigidTransform(rotation=rotation, translation=self.position),
            covariance=self._pose_covariance(),
            source_frame=self.source_frame,
            target_frame=self.target_frame,
            timestamp_ns=self.timestamp_ns,
        )

    def to_body_state(self) -> BodyState:
        return BodyState(
            pose=self.to_transform_with_covariance(),
            velocity=TwistWithCovariance(
                velocity=Twist(linear=self.velocity, angular=self.angular_velocity),
                covariance=self._velocity_covariance(),
            ),
        )

    @classmethod
    def from_body_state(cls, state: BodyState) -> RigidBodyState:
        """Flatten a BodyState. Cross-covariance blocks are dropped."""
        pose_cov = state.pose.covariance
        vel_cov = state.velocity.covariance

        if state.has_valid_orientation():
            orientation = rotation_matrix_to_quat(state.orientation)
        else:
            orientation = sentinel.unknown_like(4)

        def block(cov: Covariance6, upper: bool) -> np.ndarray:
            if not cov.is_valid():
                return unknown_covariance()
            return cov.translation_block if upper else cov.rotation_block

        return cls(
            timestamp_ns=state.timestamp_ns,
            source_frame=state.source_frame,
            target_frame=state.target_frame,
            position=state.position,
            cov_position=block(pose_cov, True),
            orientation=orientation,
            cov_orientation=block(pose_cov, False),
            velocity=state.linear_velocity,
            cov_velocity=block(vel_cov, True),
            angular_velocity=state.angular_velocity,
            cov_angular_velocity=block(vel_cov, False),
        )
