"""I/O utilities for sensor extrinsics."""

from .extrinsics import load_extrinsics, save_extrinsics

__all__ = [
    "load_extrinsics",
    "save_extrinsics",
]
