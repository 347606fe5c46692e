"""Mean-only spatial types: transform, twist, and the 6x6 covariance."""

from .covariance import Covariance6
from .linalg import exp_so3, is_approx, skew
from .transform import RigidTransform
from .twist import Twist

__all__ = [
    "RigidTransform",
    "Covariance6",
    "Twist",
    "skew",
    "exp_so3",
    "is_approx",
]
