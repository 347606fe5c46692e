"""spatialstate - Rigid-body pose and velocity with uncertainty."""

__version__ = "0.1.0"

# Re-export main classes for convenient imports
from . import sentinel
from .geometry import Covariance6, RigidTransform, Twist
from .uncertain import TransformWithCovariance, TwistWithCovariance
from .samples import BodyState, RigidBodyState
from .io import load_extrinsics, save_extrinsics

__all__ = [
    "__version__",
    # Validity sentinel
    "sentinel",
    # Mean-only types
    "RigidTransform",
    "Covariance6",
    "Twist",
    # Uncertain types
    "TransformWithCovariance",
    "TwistWithCovariance",
    # Samples
    "BodyState",
    "RigidBodyState",
    # I/O
    "load_extrinsics",
    "save_extrinsics",
]
