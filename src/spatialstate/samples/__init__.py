"""Timestamped rigid body state samples."""

from .body_state import BodyState
from .rigid_body_state import RigidBodyState

__all__ = [
    "BodyState",
    "RigidBodyState",
]
