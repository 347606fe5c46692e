"""Small SO(3) helpers shared by the transform and twist types.

Conventions:
- Quaternions: [qw, qx, qy, qz] where qw is the scalar part (Hamilton)
- Rotation matrices: 3x3 float64 arrays, v_target = R @ v_source
"""

from __future__ import annotations

import numpy as np


def skew(v: np.ndarray) -> np.ndarray:
    """Create skew-symmetric matrix from vector.

    Args:
        v: 3D vector

    Returns:
        3x3 skew-symmetric matrix [v]x such that [v]x @ u == cross(v, u)
    """
    return np.array(
        [
            [0.0, -v[2], v[1]],
            [v[2], 0.0, -v[0]],
            [-v[1], v[0], 0.0],
        ],
        dtype=np.float64,
    )


def exp_so3(omega: np.ndarray) -> np.ndarray:
    """Exponential map from so(3) to SO(3) (Rodrigues formula).

    Args:
        omega: Rotation vector (3,), axis * angle

    Returns:
        3x3 rotation matrix
    """
    omega = np.asarray(omega, dtype=np.float64)
    theta = np.linalg.norm(omega)
    if theta < 1e-10:
        # First-order approximation for small angles: R ≈ I + [omega]x
        return np.eye(3) + skew(omega)

    K = skew(omega / theta)

    # R = I + sin(θ)K + (1 - cos(θ))K²
    return np.eye(3) + np.sin(theta) * K + (1 - np.cos(theta)) * (K @ K)


def quat_to_rotation_matrix(q: np.ndarray) -> np.ndarray:
    """Convert a quaternion [qw, qx, qy, qz] to a rotation matrix.

    The quaternion is normalized first.

    Raises:
        ValueError: If q is not a 4-element array or has zero norm.
    """
    q = np.asarray(q, dtype=np.float64).flatten()
    if q.shape != (4,):
        raise ValueError(f"Expected 4-element quaternion, got shape {q.shape}")

    norm = np.linalg.norm(q)
    if norm == 0.0:
        raise ValueError("Quaternion has zero norm")
    qw, qx, qy, qz = q / norm

    return np.array(
        [
            [
                1.0 - 2.0 * (qy * qy + qz * qz),
                2.0 * (qx * qy - qw * qz),
                2.0 * (qx * qz + qw * qy),
            ],
            [
                2.0 * (qx * qy + qw * qz),
                1.0 - 2.0 * (qx * qx + qz * qz),
                2.0 * (qy * qz - qw * qx),
            ],
            [
                2.0 * (qx * qz - qw * qy),
                2.0 * (qy * qz + qw * qx),
                1.0 - 2.0 * (qx * qx + qy * qy),
            ],
        ],
        dtype=np.float64,
    )


def rotation_matrix_to_quat(R: np.ndarray) -> np.ndarray:
    """Convert a rotation matrix to a unit quaternion [qw, qx, qy, qz].

    Uses Shepperd's method (largest diagonal pivot). The sign is chosen
    so that qw >= 0.

    Raises:
        ValueError: If R is not a 3x3 matrix.
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"Expected 3x3 matrix, got shape {R.shape}")

    trace = np.trace(R)

    if trace > 0:
        s = 0.5 / np.sqrt(trace + 1.0)
        qw = 0.25 / s
        qx = (R[2, 1] - R[1, 2]) * s
        qy = (R[0, 2] - R[2, 0]) * s
        qz = (R[1, 0] - R[0, 1]) * s
    elif R[0, 0] > R[1, 1] and R[0, 0] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[0, 0] - R[1, 1] - R[2, 2])
        qw = (R[2, 1] - R[1, 2]) / s
        qx = 0.25 * s
        qy = (R[0, 1] + R[1, 0]) / s
        qz = (R[0, 2] + R[2, 0]) / s
    elif R[1, 1] > R[2, 2]:
        s = 2.0 * np.sqrt(1.0 + R[1, 1] - R[0, 0] - R[2, 2])
        qw = (R[0, 2] - R[2, 0]) / s
        qx = (R[0, 1] + R[1, 0]) / s
        qy = 0.25 * s
        qz = (R[1, 2] + R[2, 1]) / s
    else:
        s = 2.0 * np.sqrt(1.0 + R[2, 2] - R[0, 0] - R[1, 1])
        qw = (R[1, 0] - R[0, 1]) / s
        qx = (R[0, 2] + R[2, 0]) / s
        qy = (R[1, 2] + R[2, 1]) / s
        qz = 0.25 * s

    q = np.array([qw, qx, qy, qz], dtype=np.float64)
    q = q / np.linalg.norm(q)
    if q[0] < 0:
        q = -q
    return q


def is_approx(a: np.ndarray, b: np.ndarray, precision: float = 1e-12) -> bool:
    """Relative matrix comparison: ||a - b|| <= precision * min(||a||, ||b||).

    Two all-zero arrays compare equal.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        return False
    diff = np.linalg.norm(a - b)
    scale = min(np.linalg.norm(a), np.linalg.norm(b))
    if scale == 0.0:
        return diff == 0.0
    return bool(diff <= precision * scale)
