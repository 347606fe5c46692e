"""Transform and twist with first-order covariance propagation."""

from .transform_with_covariance import TransformWithCovariance
from .twist_with_covariance import TwistWithCovariance

__all__ = [
    "TransformWithCovariance",
    "TwistWithCovariance",
]
