"""Grid distortion kernel: apply a TT strain to a fixed lattice.

  dx = h_plus * x + h_cross * y
  dy = h_cross * x - h_plus * y

Each point is displaced independently, so the lattice is evaluated as one
numpy expression. The scalar ``displace`` and the array paths perform the same
float operations in the same order and therefore agree bit for bit.
"""
from __future__ import annotations
import math
from typing import NamedTuple, Tuple

import numpy as np

from merger_config import WaveConfig
from strain_timeline import Phase, StrainTensor, WaveState, evaluate


class Lattice(NamedTuple):
    X: np.ndarray   # (n, n) reference x, row j / column i
    Y: np.ndarray   # (n, n) reference y
    spacing: float

    @property
    def size(self) -> int:
        return self.X.shape[0]


class DisplayFrame(NamedTuple):
    t: float
    phase: Phase
    points: np.ndarray    # (n, n, 2) displaced lattice
    segments: np.ndarray  # (2 n (n-1), 2, 2) ordered line segments
    bodies: np.ndarray    # (k, 2) body markers, k in {1, 2}
    strain: StrainTensor


def make_lattice(size: int, spacing: float) -> Lattice:
    """Square lattice centred on the origin; arrays are read-only."""
    if int(size) != size or size <= 0:
        raise ValueError(f"lattice size must be a positive integer (got {size!r})")
    if not spacing > 0:
        raise ValueError(f"lattice spacing must be > 0 (got {spacing!r})")
    size = int(size)
    ax = (np.arange(size) - 0.5*(size - 1)) * spacing
    X, Y = np.meshgrid(ax, ax)
    X.setflags(write=False); Y.setflags(write=False)
    return Lattice(X, Y, float(spacing))


def lattice_from_config(cfg: WaveConfig) -> Lattice:
    return make_lattice(cfg.lattice_size, cfg.cell_spacing)


def displace(strain: StrainTensor, point: Tuple[float, float]) -> Tuple[float, float]:
    x, y = point
    hp, hc = strain
    return (x + (hp*x + hc*y), y + (hc*x - hp*y))


def displace_points(strain: StrainTensor, X: np.ndarray, Y: np.ndarray):
    hp, hc = strain
    return X + (hp*X + hc*Y), Y + (hc*X - hp*Y)


def displace_lattice(strain: StrainTensor, lattice: Lattice) -> np.ndarray:
    Xd, Yd = displace_points(strain, lattice.X, lattice.Y)
    return np.stack([Xd, Yd], axis=-1)


def lattice_segments(points: np.ndarray) -> np.ndarray:
    """Right- and lower-neighbour segments in row-major point order.

    For every point (j, i) the segment to (j, i+1) is emitted before the one
    to (j+1, i); edge points emit only what exists.
    """
    points = np.asarray(points, dtype=float)
    n_rows, n_cols = points.shape[:2]
    right = np.stack([points[:, :-1], points[:, 1:]], axis=-2)   # (n_rows, n_cols-1, 2, 2)
    lower = np.stack([points[:-1], points[1:]], axis=-2)         # (n_rows-1, n_cols, 2, 2)
    # rows with a lower neighbour: right, lower pairs, then the last column's lower
    pairs = np.stack([right[:-1], lower[:, :-1]], axis=2).reshape(n_rows - 1, 2*(n_cols - 1), 2, 2)
    body = np.concatenate([pairs, lower[:, -1:]], axis=1).reshape(-1, 2, 2)
    return np.concatenate([body, right[-1]], axis=0)


def body_markers(state: WaveState) -> np.ndarray:
    # equal masses, centre of mass fixed at the origin
    if state.orbit is None:
        return np.zeros((1, 2))
    r, phi = state.orbit.separation, state.orbit.phase_angle
    x1, y1 = r*math.cos(phi), r*math.sin(phi)
    return np.array([[x1, y1], [-x1, -y1]])


def build_frame(t: float, lattice: Lattice, cfg: WaveConfig) -> DisplayFrame:
    state = evaluate(t, cfg)
    points = displace_lattice(state.strain, lattice)
    return DisplayFrame(state.t, state.phase, points, lattice_segments(points),
                        body_markers(state), state.strain)
