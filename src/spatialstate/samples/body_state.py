"""Pose and velocity of one rigid body at one instant."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .. import sentinel
from ..geometry.covariance import Covariance6
from ..geometry.linalg import skew
from ..geometry.transform import RigidTransform
from ..geometry.twist import Twist
from ..uncertain.transform_with_covariance import TransformWithCovariance
from ..uncertain.twist_with_covariance import TwistWithCovariance


@dataclass
class BodyState:
    """Full kinematic state of a rigid body relative to a reference frame.

    A default-constructed BodyState is in the ``init_unknown`` state:
    identity pose and zero velocity (known by convention), with both
    covariances unknown.

    Attributes:
        pose: Body pose T_reference_body with covariance
        velocity: Body twist with covariance
    """

    pose: TransformWithCovariance = field(default_factory=TransformWithCovariance)
    velocity: TwistWithCovariance = field(default_factory=TwistWithCovariance)

    def __post_init__(self) -> None:
        """Own copies of the pose and velocity."""
        self.pose = self.pose.copy()
        self.velocity = self.velocity.copy()

    def init_unknown(self) -> None:
        """Reset to identity pose and zero twist with unknown covariances."""
        self.pose.transform = RigidTransform.identity()
        self.pose.invalidate_covariance()
        self.velocity.velocity = Twist.zero()
        self.velocity.invalidate_covariance()

    def invalidate(self) -> None:
        """Mark pose and velocity means and covariances unknown."""
        self.pose.invalidate()
        self.velocity.invalidate()

    # Frame bookkeeping

    @property
    def timestamp_ns(self) -> int | None:
        return self.pose.timestamp_ns

    @timestamp_ns.setter
    def timestamp_ns(self, value: int | None) -> None:
        self.pose.timestamp_ns = value

    @property
    def source_frame(self) -> str | None:
        return self.pose.source_frame

    @source_frame.setter
    def source_frame(self, value: str | None) -> None:
        self.pose.source_frame = value

    @property
    def target_frame(self) -> str | None:
        return self.pose.target_frame

    @target_frame.setter
    def target_frame(self, value: str | None) -> None:
        self.pose.target_frame = value

    # Field views; writes go straight into the pose or velocity

    @property
    def position(self) -> np.ndarray:
        return self.pose.translation

    @position.setter
    def position(self, value: np.ndarray) -> None:
        self.pose.translation = value

    @property
    def orientation(self) -> np.ndarray:
        """Rotation matrix of the pose (mutable view)."""
        return self.pose.rotation

    @orientation.setter
    def orientation(self, value: np.ndarray) -> None:
        self.pose.rotation = value

    @property
    def linear_velocity(self) -> np.ndarray:
        return self.velocity.linear

    @linear_velocity.setter
    def linear_velocity(self, value: np.ndarray) -> None:
        self.velocity.linear = value

    @property
    def angular_velocity(self) -> np.ndarray:
        return self.velocity.angular

    @angular_velocity.setter
    def angular_velocity(self, value: np.ndarray) -> None:
        self.velocity.angular = value

    # Validity

    def has_valid_pose(self) -> bool:
        return self.pose.has_valid_transform()

    def has_valid_pose_covariance(self) -> bool:
        return self.pose.has_valid_covariance()

    def has_valid_velocity(self) -> bool:
        return self.velocity.has_valid_velocity()

    def has_valid_velocity_covariance(self) -> bool:
        return self.velocity.has_valid_covariance()

    def has_valid_position(self) -> bool:
        return sentinel.is_finite(self.position)

    def has_valid_orientation(self) -> bool:
        return sentinel.is_finite(self.orientation)

    def has_valid_linear_velocity(self) -> bool:
        return self.velocity.velocity.has_valid_linear()

    def has_valid_angular_velocity(self) -> bool:
        return self.velocity.velocity.has_valid_angular()

    def has_valid_position_covariance(self) -> bool:
        return sentinel.is_finite(self.pose.translation_covariance)

    def has_valid_orientation_covariance(self) -> bool:
        return sentinel.is_finite(self.pose.orientation_covariance)

    def has_valid_linear_velocity_covariance(self) -> bool:
        return sentinel.is_finite(self.velocity.linear_covariance)

    def has_valid_angular_velocity_covariance(self) -> bool:
        return sentinel.is_finite(self.velocity.angular_covariance)

    # Algebra

    def compose(self, inner: BodyState) -> BodyState:
        """Compose ``self`` (outer) with ``inner``: self @ inner.

        Pose follows TransformWithCovariance.compose. The inner velocity
        is rotated into the outer reference frame and the outer motion is
        transported to the inner origin:

            w = w_o + R_o w_i
            v = v_o + w_o x (R_o t_i) + R_o v_i

        The velocity covariance is propagated through the Jacobians of
        that map with respect to each twist.
        """
        pose = self.pose.compose(inner.pose)

        R_o = self.pose.rotation
        lever = R_o @ inner.pose.translation
        w_o = self.velocity.angular

        velocity = Twist(
            linear=self.velocity.linear
            + np.cross(w_o, lever)
            + R_o @ inner.velocity.linear,
            angular=w_o + R_o @ inner.velocity.angular,
        )

        if self.has_valid_velocity_covariance() and inner.has_valid_velocity_covariance():
            J_outer = np.eye(6)
            J_outer[:3, 3:] = -skew(lever)

            J_inner = np.zeros((6, 6), dtype=np.float64)
            J_inner[:3, :3] = R_o
            J_inner[3:, 3:] = R_o

            covariance = self.velocity.covariance.congruence(
                J_outer
            ) + inner.velocity.covariance.congruence(J_inner)
        else:
            covariance = Covariance6.unknown()

        return BodyState(
            pose=pose,
            velocity=TwistWithCovariance(velocity=velocity, covariance=covariance),
        )

    def copy(self) -> BodyState:
        return BodyState(pose=self.pose.copy(), velocity=self.velocity.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BodyState):
            return NotImplemented
        return self.pose == other.pose and self.velocity == other.velocity

    def __matmul__(self, other: BodyState) -> BodyState:
        if not isinstance(other, BodyState):
            return NotImplemented
        return self.compose(other)

    def __str__(self) -> str:
        return "\n".join(["Pose", str(self.pose), "Velocity", str(self.velocity)])
