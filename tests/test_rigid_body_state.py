"""Tests for RigidBodyState."""

import numpy as np
import pytest

from spatialstate import sentinel
from spatialstate.samples import BodyState, RigidBodyState

PREDICATES = [
    "has_valid_position",
    "has_valid_position_covariance",
    "has_valid_orientation",
    "has_valid_orientation_covariance",
    "has_valid_velocity",
    "has_valid_velocity_covariance",
    "has_valid_angular_velocity",
    "has_valid_angular_velocity_covariance",
]


@pytest.fixture
def known_state() -> RigidBodyState:
    q = np.array([0.9, 0.1, -0.3, 0.2])
    return RigidBodyState(
        timestamp_ns=123456789,
        source_frame="body",
        target_frame="world",
        position=[1.0, 2.0, 3.0],
        cov_position=0.01 * np.eye(3),
        orientation=q / np.linalg.norm(q),
        cov_orientation=0.02 * np.eye(3),
        velocity=[0.5, 0.0, -0.5],
        cov_velocity=0.03 * np.eye(3),
        angular_velocity=[0.0, 0.1, 0.0],
        cov_angular_velocity=0.04 * np.eye(3),
    )


class TestValidity:
    """Test suite for RigidBodyState validity predicates."""

    def test_init_unknown(self):
        """Means are valid while covariances have unknown magnitude."""
        rbs = RigidBodyState()
        rbs.init_unknown()

        assert not RigidBodyState.is_known_value(rbs.cov_position)
        assert not RigidBodyState.is_known_value(rbs.cov_orientation)
        assert not RigidBodyState.is_known_value(rbs.cov_velocity)
        assert not RigidBodyState.is_known_value(rbs.cov_angular_velocity)
        for name in PREDICATES:
            assert getattr(rbs, name)()

        np.testing.assert_array_equal(rbs.orientation, [1.0, 0.0, 0.0, 0.0])
        np.testing.assert_array_equal(rbs.position, np.zeros(3))

    def test_unknown_covariance_is_diagonal(self):
        """Only the diagonal is infinite."""
        rbs = RigidBodyState()
        assert sentinel.is_infinity(np.diag(rbs.cov_position))
        assert rbs.cov_position[0, 1] == 0.0

    def test_invalidate(self):
        """invalidate fails every predicate."""
        rbs = RigidBodyState()
        rbs.invalidate()
        for name in PREDICATES:
            assert not getattr(rbs, name)()
        assert sentinel.is_unknown(rbs.position)
        assert sentinel.is_unknown(rbs.cov_angular_velocity)

    def test_equality(self, known_state):
        """Equality is field by field, with sentinels comparing equal."""
        assert RigidBodyState() == RigidBodyState()
        a = RigidBodyState()
        b = RigidBodyState()
        a.invalidate()
        b.invalidate()
        assert a == b
        assert a != RigidBodyState()
        assert known_state != RigidBodyState()

    def test_is_known_value(self, known_state):
        """Finite covariance is a known value."""
        assert RigidBodyState.is_known_value(known_state.cov_position)

    def test_shape_check(self):
        """Wrong shapes raise ValueError."""
        with pytest.raises(ValueError, match="position must be"):
            RigidBodyState(position=np.zeros(2))
        with pytest.raises(ValueError, match="orientation must be"):
            RigidBodyState(orientation=np.zeros(3))
        with pytest.raises(ValueError, match="cov_velocity must be 3x3"):
            RigidBodyState(cov_velocity=np.eye(6))


class TestConversion:
    """Test suite for conversion to and from BodyState."""

    def test_round_trip(self, known_state):
        """Flatten after converting gives back the original fields."""
        back = RigidBodyState.from_body_state(known_state.to_body_state())

        assert back.timestamp_ns == known_state.timestamp_ns
        assert back.source_frame == "body"
        assert back.target_frame == "world"
        np.testing.assert_allclose(back.position, known_state.position)
        np.testing.assert_allclose(back.orientation, known_state.orientation, atol=1e-12)
        np.testing.assert_allclose(back.velocity, known_state.velocity)
        np.testing.assert_allclose(back.angular_velocity, known_state.angular_velocity)
        np.testing.assert_allclose(back.cov_position, known_state.cov_position)
        np.testing.assert_allclose(back.cov_orientation, known_state.cov_orientation)
        np.testing.assert_allclose(back.cov_velocity, known_state.cov_velocity)
        np.testing.assert_allclose(
            back.cov_angular_velocity, known_state.cov_angular_velocity
        )

    def test_to_body_state(self, known_state):
        """Covariance blocks land on the diagonal of the 6x6 matrices."""
        bs = known_state.to_body_state()

        assert isinstance(bs, BodyState)
        assert bs.has_valid_pose_covariance()
        np.testing.assert_allclose(bs.pose.translation_covariance, 0.01 * np.eye(3))
        np.testing.assert_allclose(bs.pose.orientation_covariance, 0.02 * np.eye(3))
        np.testing.assert_array_equal(bs.pose.covariance.matrix[:3, 3:], np.zeros((3, 3)))
        np.testing.assert_allclose(bs.velocity.angular_covariance, 0.04 * np.eye(3))

    def test_unknown_magnitude_maps_to_unknown(self):
        """Infinite diagonal becomes an unknown Covariance6 and back."""
        rbs = RigidBodyState()
        bs = rbs.to_body_state()

        assert bs.has_valid_pose()
        assert bs.has_valid_velocity()
        assert bs.pose.covariance.is_unknown()
        assert bs.velocity.covariance.is_unknown()

        back = RigidBodyState.from_body_state(bs)
        assert not RigidBodyState.is_known_value(back.cov_position)
        assert back.has_valid_position_covariance()

    def test_invalid_state_converts_to_invalid(self):
        """Invalidated fields stay invalid after conversion."""
        rbs = RigidBodyState()
        rbs.invalidate()
        bs = rbs.to_body_state()

        assert not bs.has_valid_pose()
        assert not bs.has_valid_velocity()
        assert not bs.has_valid_pose_covariance()
        assert not bs.has_valid_velocity_covariance()

        back = RigidBodyState.from_body_state(bs)
        assert not back.has_valid_orientation()
        assert not back.has_valid_position()
