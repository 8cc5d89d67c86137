from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from .angles import DirectionLike
from .phased_array import PhasedArray


def _to_db_power(x: np.ndarray | float) -> np.ndarray | float:
    # zero power maps to -inf dB ("no radiated power"), not an error
    with np.errstate(divide="ignore"):
        return 10.0 * np.log10(x)


def _pair(a: np.ndarray, b: np.ndarray, names: Tuple[str, str]) -> Tuple[np.ndarray, np.ndarray]:
    a = np.asarray(a, dtype=np.complex128).ravel()
    b = np.asarray(b, dtype=np.complex128).ravel()
    if a.shape != b.shape:
        raise ValueError(f"{names[0]} and {names[1]} must have the same shape")
    return a, b


def beamforming_gain_db(steering: np.ndarray, weights: np.ndarray) -> float:
    """Array factor 10 log10(|sum_i s_i b_i|^2).

    The weights are applied as given (no conjugation): a beamforming vector
    from PhasedArray.beamforming_vector is already conjugated.
    """
    s, b = _pair(steering, weights, ("steering", "weights"))
    prod = np.sum(s * b)
    return float(_to_db_power(float(np.abs(prod) ** 2)))


def element_power_gain_db(field: Tuple[float, float]) -> float:
    """10 log10(F_phi^2 + F_theta^2) for a (field_phi, field_theta) pair."""
    field_phi, field_theta = field
    return float(_to_db_power(float(field_phi) ** 2 + float(field_theta) ** 2))


def composite_gain_db(
    array: PhasedArray,
    direction: DirectionLike,
    weights: Optional[np.ndarray] = None,
) -> float:
    """Total directional gain = array factor (dB) + element power gain (dB).

    ``weights`` defaults to the beamforming vector towards ``direction`` itself,
    which gives the maximum array gain 10 log10(M) at that direction.
    """
    sv = array.steering_vector(direction)
    if weights is None:
        bf = array.beamforming_vector(direction)
    else:
        bf = array.beamforming_vector_from_weights(weights)
    return beamforming_gain_db(sv, bf) + element_power_gain_db(array.element_field_pattern(direction))


def codeword_gain_db(codeword: np.ndarray, steering: np.ndarray) -> float:
    """Gain of a codebook entry towards a steering vector: 20 log10(|sum_i c_i conj(s_i)|)."""
    c, s = _pair(codeword, steering, ("codeword", "steering"))
    prod = np.sum(c * np.conj(s))
    with np.errstate(divide="ignore"):
        return float(20.0 * np.log10(np.abs(prod)))
