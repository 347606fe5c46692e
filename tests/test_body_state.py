"""Tests for BodyState."""

import numpy as np
import pytest

from spatialstate.geometry import RigidTransform
from spatialstate.samples import BodyState
from spatialstate.uncertain import TransformWithCovariance, TwistWithCovariance


def rot_z(angle: float, translation=None) -> RigidTransform:
    return RigidTransform.from_axis_angle(angle, [0.0, 0.0, 1.0], translation)


def make_state(transform, cov_pose, twist, cov_twist) -> BodyState:
    return BodyState(
        pose=TransformWithCovariance(transform=transform, covariance=cov_pose),
        velocity=TwistWithCovariance.from_vector(twist, cov_twist),
    )


PREDICATES = [
    "has_valid_position",
    "has_valid_orientation",
    "has_valid_linear_velocity",
    "has_valid_angular_velocity",
    "has_valid_position_covariance",
    "has_valid_orientation_covariance",
    "has_valid_linear_velocity_covariance",
    "has_valid_angular_velocity_covariance",
]


class TestValidity:
    """Test suite for BodyState validity."""

    def test_init_unknown(self):
        """Means are known by convention, covariances are not."""
        bs = BodyState()
        bs.init_unknown()

        assert bs.has_valid_pose()
        assert not bs.has_valid_pose_covariance()
        assert bs.has_valid_velocity()
        assert not bs.has_valid_velocity_covariance()
        assert bs.pose.transform.is_approx(RigidTransform.identity())
        np.testing.assert_array_equal(bs.velocity.get_velocity(), np.zeros(6))

    def test_invalidate(self):
        """invalidate clears every field."""
        bs = make_state(RigidTransform(), np.eye(6), np.ones(6), np.eye(6))
        for name in PREDICATES:
            assert getattr(bs, name)()

        bs.invalidate()
        assert not bs.has_valid_pose()
        assert not bs.has_valid_pose_covariance()
        assert not bs.has_valid_velocity()
        assert not bs.has_valid_velocity_covariance()
        for name in PREDICATES:
            assert not getattr(bs, name)()

    def test_infinite_blocks_fail_field_predicates(self):
        """Per-field covariance predicates reject infinite variances."""
        inf = float("inf")
        bs = make_state(
            RigidTransform(),
            np.diag([inf, inf, inf, 1.0, 1.0, 1.0]),
            np.zeros(6),
            np.diag([1.0, 1.0, 1.0, inf, inf, inf]),
        )
        assert not bs.has_valid_position_covariance()
        assert bs.has_valid_orientation_covariance()
        assert bs.has_valid_linear_velocity_covariance()
        assert not bs.has_valid_angular_velocity_covariance()

    def test_init_unknown_after_invalidate(self):
        """init_unknown restores valid means."""
        bs = BodyState()
        bs.invalidate()
        bs.init_unknown()
        assert bs.has_valid_pose()
        assert bs.has_valid_velocity()

    def test_field_writes(self):
        """Writing position or orientation leaves velocity untouched."""
        bs = make_state(RigidTransform(), np.eye(6), [1, 2, 3, 4, 5, 6], np.eye(6))

        bs.position = [1.0, 2.0, 3.0]
        bs.orientation = rot_z(np.pi / 2).rotation
        bs.position[2] = 10.0

        np.testing.assert_array_equal(bs.pose.translation, [1.0, 2.0, 10.0])
        np.testing.assert_allclose(bs.pose.rotation, rot_z(np.pi / 2).rotation)
        np.testing.assert_array_equal(bs.velocity.get_velocity(), [1, 2, 3, 4, 5, 6])

    def test_states_do_not_share_a_transform(self):
        """Writing one state's position leaves a state built from the same transform alone."""
        t = RigidTransform.identity()
        a = BodyState(pose=TransformWithCovariance(transform=t))
        b = BodyState(pose=TransformWithCovariance(transform=t))

        a.position = [1.0, 2.0, 3.0]
        np.testing.assert_array_equal(b.position, np.zeros(3))
        np.testing.assert_array_equal(t.translation, np.zeros(3))

    def test_states_do_not_share_a_pose(self):
        """Two states built from one pose and velocity are independent."""
        pose = TransformWithCovariance(covariance=np.eye(6))
        velocity = TwistWithCovariance.from_vector(np.zeros(6), np.eye(6))
        a = BodyState(pose=pose, velocity=velocity)
        b = BodyState(pose=pose, velocity=velocity)

        a.orientation = rot_z(np.pi / 2).rotation
        a.linear_velocity = [1.0, 0.0, 0.0]
        np.testing.assert_array_equal(b.orientation, np.eye(3))
        np.testing.assert_array_equal(b.linear_velocity, np.zeros(3))
        np.testing.assert_array_equal(pose.rotation, np.eye(3))

    def test_equality(self):
        """Default states are equal; invalidation makes them differ."""
        assert BodyState() == BodyState()
        bs = BodyState()
        bs.invalidate()
        assert bs != BodyState()
        assert bs == bs.copy()

    def test_frame_properties(self):
        """Frames and timestamp live on the pose."""
        bs = BodyState()
        bs.source_frame = "body"
        bs.target_frame = "world"
        bs.timestamp_ns = 5
        assert bs.pose.source_frame == "body"
        assert bs.pose.target_frame == "world"
        assert bs.pose.timestamp_ns == 5


class TestComposition:
    """Test suite for BodyState.compose."""

    def test_valid_inputs_give_valid_result(self):
        """Composing fully known states keeps everything valid."""
        bs1 = make_state(RigidTransform(), 0.1 * np.eye(6), np.zeros(6), 0.1 * np.eye(6))
        bs2 = make_state(
            rot_z(np.pi / 2), 0.2 * np.eye(6), np.ones(6), 0.2 * np.eye(6)
        )

        bs3 = bs2 @ bs1
        assert bs3.has_valid_pose()
        assert bs3.has_valid_pose_covariance()
        assert bs3.has_valid_velocity()
        assert bs3.has_valid_velocity_covariance()

    def test_velocity_values(self):
        """Inner velocity is rotated and outer rotation is transported."""
        outer = make_state(
            rot_z(np.pi / 2), 0.1 * np.eye(6), [1, 0, 0, 0, 0, 1], 0.1 * np.eye(6)
        )
        inner = make_state(
            RigidTransform(translation=[1.0, 0.0, 0.0]),
            0.1 * np.eye(6),
            [0, 1, 0, 1, 0, 0],
            0.1 * np.eye(6),
        )

        result = outer @ inner
        np.testing.assert_allclose(result.linear_velocity, [-1.0, 0.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(result.angular_velocity, [0.0, 1.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(result.position, [0.0, 1.0, 0.0], atol=1e-12)

    def test_pose_matches_transform_composition(self):
        """Pose part is TransformWithCovariance composition."""
        outer = make_state(rot_z(0.4, [1.0, 2.0, 0.0]), 0.1 * np.eye(6), np.zeros(6), None)
        inner = make_state(rot_z(-0.1, [0.5, 0.0, 0.0]), 0.2 * np.eye(6), np.zeros(6), None)

        result = outer @ inner
        expected = outer.pose @ inner.pose
        assert result.pose.transform.is_approx(expected.transform)
        np.testing.assert_allclose(
            result.pose.covariance.matrix, expected.covariance.matrix
        )
        assert not result.has_valid_velocity_covariance()

    def test_identity_inner(self):
        """Composing with a static identity state changes nothing."""
        outer = make_state(
            rot_z(0.7, [1.0, -1.0, 0.5]), 0.1 * np.eye(6), [1, 2, 3, 0.1, 0.2, 0.3], 0.3 * np.eye(6)
        )
        inner = make_state(RigidTransform(), np.zeros((6, 6)), np.zeros(6), np.zeros((6, 6)))

        result = outer @ inner
        assert result.pose.transform.is_approx(outer.pose.transform)
        np.testing.assert_allclose(result.velocity.get_velocity(), outer.velocity.get_velocity())
        np.testing.assert_allclose(
            result.velocity.covariance.matrix, outer.velocity.covariance.matrix
        )

    def test_copy_is_independent(self):
        """copy() shares no state."""
        bs = make_state(RigidTransform(), np.eye(6), np.ones(6), np.eye(6))
        other = bs.copy()
        other.position[0] = 7.0
        other.linear_velocity[0] = 7.0
        assert bs.position[0] == 0.0
        assert bs.linear_velocity[0] == pytest.approx(1.0)

    def test_str(self):
        """Printing shows both parts."""
        text = str(BodyState())
        assert "Pose" in text
        assert "Velocity" in text
