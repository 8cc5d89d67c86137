from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from sklearn.neighbors import KDTree

from .angles import DirectionLike, as_theta_phi, direction_to_unit_vector
from .metrics import codeword_gain_db
from .patterns import make_theta_phi_grid
from .phased_array import PhasedArray, compute_norm


def steering_codebook(array: PhasedArray, theta: np.ndarray, phi: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Build a codebook of unit-norm steering vectors over a (theta, phi) grid.

    Returns
    - codebook: (K,M) complex128, row k = s(d_k) / ||s(d_k)||.
    - directions: (K,2) float64 rows [theta, phi] (radians), see make_theta_phi_grid.

    The weights that point the array at codeword k are its conjugate
    (``codeword_weights``).
    """
    directions = make_theta_phi_grid(theta, phi)
    S = array.steering_matrix(directions[:, 0], directions[:, 1])
    norms = np.linalg.norm(S, axis=1, keepdims=True)
    return (S / norms).astype(np.complex128), directions


def codeword_weights(codebook: np.ndarray, k: int) -> np.ndarray:
    """Beamforming vector (unit norm) for codebook entry k."""
    cb = np.asarray(codebook, dtype=np.complex128)
    if cb.ndim != 2:
        raise ValueError("codebook must be (K,M)")
    w = np.conj(cb[int(k)])
    return w / compute_norm(w)


@dataclass
class DirectionTree:
    tree: KDTree
    directions: np.ndarray  # (K,2) [theta, phi] the tree was built from


def build_direction_tree(directions: np.ndarray) -> DirectionTree:
    """Return a KD-tree over the unit wave vectors of a (K,2) [theta, phi] grid.

    Working on unit vectors makes the Euclidean distance a monotone function
    of the angular separation, so azimuth wrap at +-pi and the poles need no
    special casing.
    """
    d = np.asarray(directions, dtype=np.float64)
    if d.ndim != 2 or d.shape[1] != 2:
        raise ValueError("directions must have shape (K,2)")
    if not np.isfinite(d).all():
        raise ValueError("directions contain NaN/inf")
    feats = direction_to_unit_vector(d[:, 0], d[:, 1])
    tree = KDTree(feats, leaf_size=40, metric="euclidean")
    return DirectionTree(tree=tree, directions=d.copy())


def nearest_codeword(tree: DirectionTree, direction: DirectionLike, k: int = 1) -> Tuple[np.ndarray, np.ndarray]:
    """Return (indices, angular distances in radians) of the k closest grid directions."""
    if not isinstance(tree, DirectionTree):
        raise ValueError("tree must be the object returned by build_direction_tree")
    theta, phi = as_theta_phi(direction)
    q = direction_to_unit_vector(np.atleast_1d(theta), np.atleast_1d(phi)).reshape(-1, 3)
    dist, idx = tree.tree.query(q, k=k, return_distance=True)
    # chord length -> angle between unit vectors
    ang = 2.0 * np.arcsin(np.clip(dist / 2.0, 0.0, 1.0))
    return idx[0], ang[0]


def best_codeword(codebook: np.ndarray, steering: np.ndarray) -> Tuple[int, float]:
    """Exhaustive search: index and gain (dB) of the codeword best matching ``steering``."""
    cb = np.asarray(codebook, dtype=np.complex128)
    s = np.asarray(steering, dtype=np.complex128).ravel()
    if cb.ndim != 2 or cb.shape[1] != s.shape[0]:
        raise ValueError("codebook must be (K,M) matching the steering vector length")
    vals = np.abs(cb @ np.conj(s))
    best = int(np.argmax(vals))
    return best, codeword_gain_db(cb[best], s)
