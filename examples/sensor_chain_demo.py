#!/usr/bin/env python3
"""Demo script for chaining uncertain poses through sensor extrinsics.

Loads the cam0 extrinsics of a EuRoC sequence (if available), composes
a world-from-body estimate with the body-from-camera calibration and
shows how the camera pose uncertainty grows. Then recovers the body pose
back from the camera pose.

Usage:
    uv run python examples/sensor_chain_demo.py
"""

from pathlib import Path

import numpy as np

from spatialstate import (
    BodyState,
    Covariance6,
    RigidTransform,
    TransformWithCovariance,
    TwistWithCovariance,
    load_extrinsics,
)


def main() -> None:
    """Run the sensor chain demo."""
    # Configuration
    sensor_yaml = Path("data/euroc/MH_01_easy/mav0/cam0/sensor.yaml")

    print("Loading camera extrinsics...")
    print("=" * 80)
    if sensor_yaml.exists():
        body_from_cam = load_extrinsics(sensor_yaml)
        if not body_from_cam.has_valid_covariance():
            body_from_cam.set_covariance(
                Covariance6.diagonal([1e-6] * 3 + [1e-5] * 3)
            )
    else:
        print(f"{sensor_yaml} not found, using a synthetic calibration")
        body_from_cam = TransformWithCovariance(
            transform=RigidTransform.from_axis_angle(
                np.pi / 2, [0.0, 0.0, 1.0], [-0.02, -0.06, 0.01]
            ),
            covariance=Covariance6.diagonal([1e-6] * 3 + [1e-5] * 3),
        )
    body_from_cam.source_frame = "cam0"
    body_from_cam.target_frame = "body"

    world_from_body = TransformWithCovariance(
        transform=RigidTransform.from_axis_angle(0.3, [0.0, 0.0, 1.0], [4.7, -1.8, 0.8]),
        covariance=Covariance6.diagonal([0.01, 0.01, 0.04, 1e-4, 1e-4, 4e-4]),
        source_frame="body",
        target_frame="world",
        timestamp_ns=1403636580838555648,
    )

    # Chain
    world_from_cam = world_from_body @ body_from_cam
    print(world_from_cam)
    print()

    sigma_body = np.sqrt(np.diag(world_from_body.covariance.matrix))
    sigma_cam = np.sqrt(np.diag(world_from_cam.covariance.matrix))
    print(f"{'Axis':>6} | {'Body sigma':>12} | {'Camera sigma':>12}")
    print("-" * 40)
    for name, sb, sc in zip(["x", "y", "z", "rx", "ry", "rz"], sigma_body, sigma_cam):
        print(f"{name:>6} | {sb:12.6f} | {sc:12.6f}")
    print()

    # Recover the body pose from the camera pose
    recovered = world_from_cam.composition_inv(body_from_cam)
    err = np.linalg.norm(recovered.translation - world_from_body.translation)
    print(f"Recovered {recovered.source_frame} -> {recovered.target_frame}")
    print(f"  Translation error: {err:.3e} m")
    print()

    # Velocity of the camera given the body state
    body = BodyState(
        pose=world_from_body,
        velocity=TwistWithCovariance.from_vector(
            [0.5, 0.0, 0.0, 0.0, 0.0, 0.2], 1e-3 * np.eye(6)
        ),
    )
    cam_in_body = BodyState(
        pose=body_from_cam, velocity=TwistWithCovariance.from_vector(np.zeros(6), np.zeros((6, 6)))
    )
    cam = body @ cam_in_body
    print("Camera velocity in world:")
    print(f"  Linear:  {cam.linear_velocity}")
    print(f"  Angular: {cam.angular_velocity}")


if __name__ == "__main__":
    main()
