"""Sensor extrinsics with uncertainty, stored in EuRoC-style sensor.yaml.

Layout:

    T_BS:
      cols: 4
      rows: 4
      data: [r00, r01, r02, tx, r10, ..., 0.0, 0.0, 0.0, 1.0]
    covariance:            # optional, row-major 6x6 over (x, y, z, rx, ry, rz)
      cols: 6
      rows: 6
      data: [...]
    sigmas: [sx, sy, sz, srx, sry, srz]   # optional, alternative to covariance
    source_frame: cam0     # optional
    target_frame: body     # optional

EuRoC files start with a ``%YAML:1.0`` directive, which PyYAML rejects;
it is stripped before parsing.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import yaml

from ..geometry.covariance import Covariance6
from ..geometry.transform import RigidTransform
from ..uncertain.transform_with_covariance import TransformWithCovariance

logger = logging.getLogger(__name__)


def _read_yaml(path: Path) -> dict:
    with open(path, "r") as f:
        lines = [line for line in f if not line.startswith("%YAML")]
    data = yaml.safe_load("".join(lines))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}")
    return data


def _parse_matrix(entry, size: int, name: str, path: Path) -> np.ndarray:
    values = entry.get("data") if isinstance(entry, dict) else entry
    if values is None or len(values) != size * size:
        raise ValueError(f"Invalid {name} in {path}: expected {size * size} values")
    return np.array(values, dtype=np.float64).reshape(size, size)


def _parse_covariance(data: dict, path: Path) -> Covariance6:
    if "covariance" in data:
        return Covariance6(matrix=_parse_matrix(data["covariance"], 6, "covariance", path))

    if "sigmas" in data:
        sigmas = np.asarray(data["sigmas"], dtype=np.float64).flatten()
        if sigmas.shape != (6,):
            raise ValueError(f"Invalid sigmas in {path}: expected 6 values")
        return Covariance6.diagonal(sigmas**2)

    logger.warning("No covariance in %s, leaving extrinsics uncertainty unknown", path)
    return Covariance6.unknown()


def load_extrinsics(
    path: str | Path,
    key: str = "T_BS",
) -> TransformWithCovariance:
    """Load a transform with covariance from a sensor.yaml file.

    Args:
        path: Path to the YAML file
        key: Name of the 4x4 transform entry

    Returns:
        TransformWithCovariance; covariance is unknown when the file
        specifies neither ``covariance`` nor ``sigmas``

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the transform or covariance is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Extrinsics file not found: {path}")

    data = _read_yaml(path)
    if key not in data:
        raise ValueError(f"Missing {key} transform in {path}")

    T = _parse_matrix(data[key], 4, key, path)
    transform = RigidTransform.from_matrix(T)
    if not transform.is_valid():
        raise ValueError(f"Non-finite {key} transform in {path}")

    return TransformWithCovariance(
        transform=transform,
        covariance=_parse_covariance(data, path),
        source_frame=data.get("source_frame"),
        target_frame=data.get("target_frame"),
    )


def save_extrinsics(
    extrinsics: TransformWithCovariance,
    path: str | Path,
    key: str = "T_BS",
) -> None:
    """Write a transform with covariance in the layout read by load_extrinsics.

    An unknown covariance is omitted from the file.
    """
    data: dict = {
        key: {
            "cols": 4,
            "rows": 4,
            "data": [float(v) for v in extrinsics.transform.to_matrix().flatten()],
        }
    }
    if extrinsics.has_valid_covariance():
        data["covariance"] = {
            "cols": 6,
            "rows": 6,
            "data": [float(v) for v in extrinsics.covariance.matrix.flatten()],
        }
    if extrinsics.source_frame is not None:
        data["source_frame"] = extrinsics.source_frame
    if extrinsics.target_frame is not None:
        data["target_frame"] = extrinsics.target_frame

    with open(Path(path), "w") as f:
        yaml.safe_dump(data, f, default_flow_style=None, sort_keys=False)
