from __future__ import annotations

from typing import Tuple

import numpy as np

from .angles import Direction, normalize_angles
from .phased_array import PhasedArray


def make_theta_phi_grid(theta: np.ndarray, phi: np.ndarray) -> np.ndarray:
    """Return (P,2) mesh flattened with columns [theta, phi] (radians).

    Theta is clamped to [0, pi], phi is wrapped to (-pi, pi]. Rows run over
    theta fastest: row k is (theta[k % Nt], phi[k // Nt]).
    """
    th = np.asarray(theta, dtype=np.float64).ravel()
    ph = np.asarray(phi, dtype=np.float64).ravel()
    if not np.isfinite(th).all() or not np.isfinite(ph).all():
        raise ValueError("theta/phi contain NaN/inf")
    TH, PH = np.meshgrid(th, ph, indexing="xy")
    t, p = normalize_angles(TH.reshape(-1), PH.reshape(-1))
    return np.stack([t, p], axis=1)


def radiation_pattern(
    array: PhasedArray,
    weights: np.ndarray,
    theta: np.ndarray,
    phi: np.ndarray,
) -> np.ndarray:
    """Composite gain map in dB over a (theta, phi) grid.

    G(theta, phi) = 10 log10(|sum_i s_i(theta, phi) w_i|^2 * (F_phi^2 + F_theta^2))

    Parameters
    - array: the phased array.
    - weights: (M,) beamforming vector applied to every direction.
    - theta, phi: 1D arrays of inclination / azimuth (radians).

    Returns
    - (len(phi), len(theta)) float64 array; -inf where no power is radiated.
    """
    w = array.beamforming_vector_from_weights(weights)
    th = np.asarray(theta, dtype=np.float64).ravel()
    ph = np.asarray(phi, dtype=np.float64).ravel()
    grid = make_theta_phi_grid(th, ph)

    S = array.steering_matrix(grid[:, 0], grid[:, 1])  # (P,M)
    af = np.abs(S @ w) ** 2
    f_phi, f_theta = array.element_field_pattern_grid(grid[:, 0], grid[:, 1])
    ep = f_phi ** 2 + f_theta ** 2
    with np.errstate(divide="ignore"):
        g = 10.0 * np.log10(af * ep)
    return g.reshape(ph.size, th.size)


def pattern_peak(theta: np.ndarray, phi: np.ndarray, gain_db: np.ndarray) -> Tuple[Direction, float]:
    """Return the direction and value of the maximum of a (len(phi), len(theta)) gain map."""
    th = np.asarray(theta, dtype=np.float64).ravel()
    ph = np.asarray(phi, dtype=np.float64).ravel()
    g = np.asarray(gain_db, dtype=np.float64)
    if g.shape != (ph.size, th.size):
        raise ValueError("gain_db must be (len(phi), len(theta))")
    i_ph, i_th = np.unravel_index(int(np.argmax(g)), g.shape)
    return Direction(float(th[i_th]), float(ph[i_ph])), float(g[i_ph, i_th])
